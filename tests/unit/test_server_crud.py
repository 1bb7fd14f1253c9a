"""
参考后端 CRUD 接口测试
"""

import pytest
from fastapi.testclient import TestClient

from admin_engine.server.crud import to_camel, to_snake


@pytest.fixture
def http(backend_app):
    with TestClient(backend_app) as client:
        yield client


class TestNameConversion:
    """测试字段名转换"""

    def test_to_snake(self):
        assert to_snake("companyId") == "company_id"
        assert to_snake("isSalaryNegotiable") == "is_salary_negotiable"
        assert to_snake("name") == "name"

    def test_to_camel(self):
        assert to_camel("company_id") == "companyId"
        assert to_camel("avatar_url") == "avatarUrl"
        assert to_camel("id") == "id"


class TestListEndpoint:
    """测试列表接口"""

    def test_envelope_and_meta(self, http, seeded_data):
        response = http.get("/skills", params={"page": 1, "pageSize": 2})
        body = response.json()

        assert response.status_code == 200
        assert body["success"] is True
        assert body["meta"] == {"page": 1, "pageSize": 2, "total": 5}
        # 字典表按名称升序
        assert [r["name"] for r in body["data"]] == ["Docker", "PostgreSQL"]

    def test_default_and_clamped_page_size(self, http, seeded_data):
        """测试默认每页 20 行，上限 500，下限 1"""
        assert http.get("/skills").json()["meta"]["pageSize"] == 20
        assert http.get("/skills", params={"pageSize": 1000}).json()["meta"]["pageSize"] == 500
        assert http.get("/skills", params={"pageSize": 200}).json()["meta"]["pageSize"] == 200
        assert http.get("/skills", params={"pageSize": 0}).json()["meta"]["pageSize"] == 1

    def test_filter_by_id_param(self, http, seeded_data):
        """测试 *Id 查询参数作为过滤条件"""
        body = http.get("/job-skills", params={"jobId": seeded_data["job_id"]}).json()
        assert body["meta"]["total"] == 2
        assert http.get("/job-skills", params={"jobId": "other"}).json()["data"] == []

    def test_filter_by_declared_field(self, http, seeded_data):
        """测试声明的过滤字段（布尔值）"""
        assert http.get("/companies", params={"isVerified": "true"}).json()["meta"]["total"] == 1
        assert http.get("/companies", params={"isVerified": "false"}).json()["meta"]["total"] == 0

    def test_undeclared_params_ignored(self, http, seeded_data):
        assert http.get("/skills", params={"name": "Python"}).json()["meta"]["total"] == 5

    def test_job_includes_relations(self, http, seeded_data):
        """测试职位附带公司、技能和分类"""
        job = http.get("/jobs").json()["data"][0]

        assert job["company"]["name"] == "Acme"
        assert {s["skill"]["name"] for s in job["skills"]} == {"Python", "TypeScript"}
        assert all(s["jobId"] == job["id"] and s["isRequired"] is True for s in job["skills"])
        assert job["categories"][0]["category"]["name"] == "Engineering"

    def test_password_hash_hidden(self, http, seeded_data):
        user = http.get("/users").json()["data"][0]
        assert "passwordHash" not in user
        assert user["role"] == "RECRUITER"


class TestRecordEndpoints:
    """测试单条记录接口"""

    def test_create_returns_201(self, http):
        response = http.post("/skills", json={"name": "Go", "iconUrl": None, "unknown": 1})
        body = response.json()
        assert response.status_code == 201
        assert body["success"] is True
        assert body["data"]["name"] == "Go"
        assert body["data"]["iconUrl"] is None
        assert len(body["data"]["id"]) == 32

    def test_create_ignores_client_id(self, http):
        body = http.post("/skills", json={"id": "mine", "name": "Go"}).json()
        assert body["data"]["id"] != "mine"

    def test_create_duplicate(self, http, seeded_data):
        """测试唯一约束冲突返回 400 和 success=false"""
        response = http.post("/skills", json={"name": "Python"})
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Unique constraint failed on the fields: (name)"
        }

    def test_create_duplicate_join_row(self, http, seeded_data):
        skills = seeded_data["skills"]
        response = http.post("/job-skills", json={"jobId": seeded_data["job_id"], "skillId": skills["Python"]})
        assert response.status_code == 400
        assert response.json()["message"] == "Unique constraint failed on the fields: (jobId, skillId)"

    def test_create_missing_required(self, http):
        response = http.post("/companies", json={"name": "NoSlug"})
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "slug" in response.json()["message"]

    def test_invalid_json(self, http):
        response = http.post("/skills", content=b"[1, 2]", headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid JSON body"

    def test_get_and_not_found(self, http, seeded_data):
        body = http.get(f"/jobs/{seeded_data['job_id']}").json()
        assert body["data"]["title"] == "Backend Engineer"

        response = http.get("/jobs/missing")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Record not found"}

    def test_wrong_segment_count(self, http, seeded_data):
        """测试复合主键段数不符时返回 404"""
        assert http.get(f"/job-skills/{seeded_data['job_id']}").status_code == 404
        assert http.get(f"/jobs/{seeded_data['job_id']}/extra").status_code == 404

    def test_update(self, http, seeded_data):
        """测试更新：只写请求中出现的字段，非空列的 null 被跳过"""
        job_id = seeded_data["job_id"]
        body = http.put(f"/jobs/{job_id}", json={
            "salaryMin": "1800",
            "currency": None,
            "isSalaryNegotiable": None,
            "status": "CLOSED",
            "id": "hijack",
        }).json()

        assert body["success"] is True
        assert body["data"]["id"] == job_id
        assert body["data"]["salaryMin"] == 1800
        assert body["data"]["currency"] == "USD"
        assert body["data"]["isSalaryNegotiable"] is False
        assert body["data"]["status"] == "CLOSED"
        assert body["data"]["title"] == "Backend Engineer"

    def test_update_invalid_value(self, http, seeded_data):
        response = http.put(f"/jobs/{seeded_data['job_id']}", json={"salaryMin": "lots"})
        assert response.status_code == 400
        assert "salaryMin" in response.json()["message"]

    def test_update_composite(self, http, seeded_data):
        skills = seeded_data["skills"]
        path = f"/job-skills/{seeded_data['job_id']}/{skills['Python']}"
        body = http.put(path, json={"isRequired": False}).json()
        assert body["data"]["isRequired"] is False

    def test_update_missing(self, http):
        assert http.put("/skills/missing", json={"name": "x"}).status_code == 404

    def test_delete(self, http, seeded_data):
        skills = seeded_data["skills"]
        path = f"/job-skills/{seeded_data['job_id']}/{skills['TypeScript']}"
        body = http.delete(path).json()
        assert body["success"] is True
        assert body["data"]["skillId"] == skills["TypeScript"]
        assert http.get(path).status_code == 404
        assert http.delete(path).status_code == 404


class TestUploadEndpoint:
    """测试上传接口"""

    def test_upload_and_fetch(self, http, tmp_path):
        response = http.post("/upload", files={"file": ("logo.svg", b"<svg/>", "image/svg+xml")})
        body = response.json()

        assert body["success"] is True
        assert body["url"].startswith("http://testserver/uploads/")
        name = body["url"].rsplit("/", 1)[-1]
        assert name.endswith(".svg")
        assert (tmp_path / "uploads" / name).read_bytes() == b"<svg/>"

        fetched = http.get(f"/uploads/{name}")
        assert fetched.status_code == 200
        assert fetched.content == b"<svg/>"

    def test_upload_empty_file(self, http):
        response = http.post("/upload", files={"file": ("empty.png", b"", "image/png")})
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "file is required"}

    def test_missing_upload(self, http):
        response = http.get("/uploads/nothing.png")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_health(self, http):
        assert http.get("/health").json() == {"success": True, "status": "ok"}
