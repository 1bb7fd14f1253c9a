"""
资源注册表与关系映射单元测试
"""

import pytest

from admin_engine.errors import UnknownResourceError
from admin_engine.registry.relations import (
    MANY_TO_MANY,
    RELATION_MAP,
    many_to_many_for,
    relation_fields_for,
    relation_for,
)
from admin_engine.registry.resources import (
    ADMIN_RESOURCES,
    EDIT_DENYLIST,
    editable_fields,
    get_resource,
    list_resources,
    resource_by_key_or_path,
    visible_columns,
)


class TestResourceLookup:
    """测试资源查找"""

    def test_every_resource_found_by_key_and_path(self):
        """测试所有资源都能按 key 和路径查到同一个描述"""
        for resource in ADMIN_RESOURCES:
            assert resource_by_key_or_path(resource.key) is resource
            assert resource_by_key_or_path(resource.path) is resource

    def test_primary_keys_subset_of_columns(self):
        """测试主键字段都出现在列中"""
        for resource in list_resources():
            found = resource_by_key_or_path(resource.key)
            assert set(found.primary_keys) <= set(found.columns), resource.key

    def test_lookup_is_pure(self):
        """测试重复查找返回相同结果且不修改描述"""
        first = resource_by_key_or_path("jobs")
        columns = first.columns
        second = resource_by_key_or_path("jobs")
        assert first == second
        assert second.columns == columns

    def test_unknown_resource(self):
        """测试未注册的资源"""
        assert resource_by_key_or_path("nope") is None
        with pytest.raises(UnknownResourceError):
            get_resource("nope")

    def test_unknown_resource_is_key_error(self):
        """测试未注册资源异常可以按 KeyError 捕获"""
        with pytest.raises(KeyError) as exc_info:
            get_resource("missing")
        assert "missing" in str(exc_info.value)

    def test_descriptor_is_frozen(self):
        """测试资源描述不可变"""
        jobs = get_resource("jobs")
        with pytest.raises(Exception):
            jobs.label = "Other"

    def test_composite_primary_keys(self):
        """测试连接表使用复合主键"""
        assert get_resource("job-skills").primary_keys == ("jobId", "skillId")
        assert get_resource("job-categories").primary_keys == ("jobId", "categoryId")
        assert get_resource("users").primary_keys == ("id",)

    def test_keys_are_unique(self):
        """测试资源 key 唯一"""
        keys = [r.key for r in ADMIN_RESOURCES]
        assert len(keys) == len(set(keys))


class TestEditableFields:
    """测试可编辑字段计算"""

    def test_allowed_fields_take_precedence(self):
        """测试声明 allowed_fields 时只使用它"""
        fields = editable_fields(get_resource("users"))
        assert fields == ["firstName", "lastName", "phone", "avatarUrl", "isActive"]

    def test_falls_back_to_columns(self):
        """测试没有 allowed_fields 时从列中计算"""
        fields = editable_fields(get_resource("skills"))
        assert fields == ["name", "iconUrl"]

    def test_denylist_and_primary_keys_removed(self):
        """测试黑名单字段和主键永远不可编辑"""
        for resource in ADMIN_RESOURCES:
            fields = editable_fields(resource)
            assert not set(fields) & EDIT_DENYLIST, resource.key
            assert not set(fields) & set(resource.primary_keys), resource.key

    def test_join_table_editable_fields(self):
        """测试连接表只剩非主键字段"""
        assert editable_fields(get_resource("job-skills")) == ["isRequired"]
        assert editable_fields(get_resource("job-categories")) == []

    def test_jobs_status_not_editable(self):
        """测试职位状态只能通过审核动作修改"""
        assert "status" not in editable_fields(get_resource("jobs"))


class TestVisibleColumns:
    """测试列表列"""

    def test_timestamps_hidden(self):
        """测试隐藏时间戳列"""
        columns = visible_columns(get_resource("users"))
        assert "createdAt" not in columns
        assert "updatedAt" not in columns

    def test_limit(self):
        """测试列数上限"""
        assert len(visible_columns(get_resource("jobs"))) == 8
        assert visible_columns(get_resource("jobs"), limit=3) == ["id", "title", "companyId"]


class TestRelations:
    """测试关系映射"""

    def test_relation_for(self):
        """测试外键字段映射到目标资源"""
        assert relation_for("companyId").path == "companies"
        assert relation_for("skillId").path == "skills"
        assert relation_for("title") is None

    def test_relation_targets_are_registered(self):
        """测试关系目标都是已注册的资源"""
        for field, spec in RELATION_MAP.items():
            assert resource_by_key_or_path(spec.path) is not None, field

    def test_labels(self):
        """测试标签函数"""
        assert relation_for("companyId").label({"name": "Acme", "slug": "acme"}) == "Acme (acme)"
        assert relation_for("userId").label({"firstName": "An", "lastName": "Le", "email": "a@x"}) == "An Le (a@x)"
        assert relation_for("skillId").label({}) == "Skill"

    def test_recruiter_label_prefers_nested_user(self):
        """测试招聘者标签优先使用嵌入的用户姓名"""
        label = relation_for("recruiterId").label
        assert label({"id": "r1", "user": {"firstName": "Rita", "lastName": "R"}}) == "Rita R"
        assert label({"id": "r1", "user": {"email": "r@x"}}) == "r@x"
        assert label({"id": "r1"}) == "r1"

    def test_many_to_many_for_jobs(self):
        """测试职位的多对多关系"""
        specs = many_to_many_for("jobs")
        assert [s.name for s in specs] == ["skills", "categories"]
        assert specs[0].join_path == "job-skills"
        assert specs[0].primary_keys == ("jobId", "skillId")
        assert specs[0].extra_fields == {"isRequired": True}
        assert many_to_many_for("users") == ()

    def test_join_paths_are_registered(self):
        """测试多对多连接表都是已注册的复合主键资源"""
        for specs in MANY_TO_MANY.values():
            for spec in specs:
                join = get_resource(spec.join_path)
                assert join.primary_keys == spec.primary_keys

    def test_relation_fields_for_jobs(self):
        """测试职位编辑需要加载技能和分类选项"""
        fields = relation_fields_for("jobs", editable_fields(get_resource("jobs")))
        assert fields == ["skillId", "categoryId"]

    def test_relation_fields_for_plain_resource(self):
        """测试普通资源只加载编辑字段中的外键"""
        resource = get_resource("candidate-skills")
        assert relation_fields_for(resource.key, editable_fields(resource)) == ["skillId"]
        assert relation_fields_for("skills", ["name", "iconUrl"]) == []
