"""
关系解析器单元测试
"""

import asyncio

import httpx

from admin_engine.models.resource import RelationSpec
from admin_engine.registry.relations import RELATION_MAP
from admin_engine.services.relation_resolver import RelationResolver, project_options


def relation_handler(tables, failing=(), on_request=None):
    """
    按路径返回预置数据的后端；failing 中的路径返回 success=false
    """
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path.strip("/")
        seen.append((path, dict(request.url.params)))
        if on_request is not None:
            on_request(path)
        if path in failing:
            return httpx.Response(500, json={"success": False, "message": f"{path} unavailable"})
        return httpx.Response(200, json={"success": True, "data": tables.get(path, [])})

    handler.seen = seen
    return handler


TABLES = {
    "skills": [{"id": "s1", "name": "Python"}, {"id": "s2", "name": "Go"}],
    "categories": [{"id": "c1", "name": "Engineering"}],
    "companies": [],
}


class TestProjectOptions:
    """测试选项投影"""

    def test_project_options(self):
        spec = RelationSpec(path="skills", label=lambda row: row["name"].upper())
        options = project_options("skillId", spec, [{"id": 1, "name": "go"}, {"skillId": "s9", "name": "rust"}])
        assert [(o.value, o.label) for o in options] == [("1", "GO"), ("s9", "RUST")]


class TestRelationResolver:
    """测试并发加载、缓存与代数作废"""

    def test_resolve_loads_options(self, mock_client):
        """测试加载关系选项"""
        handler = relation_handler(TABLES)
        resolver = RelationResolver(mock_client(handler))

        loaded = asyncio.run(resolver.resolve(["skillId", "categoryId", "title"]))

        assert set(loaded) == {"skillId", "categoryId"}
        assert [o.label for o in resolver.options_for("skillId")] == ["Python", "Go"]
        assert resolver.label_for("categoryId", "c1") == "Engineering"
        assert resolver.label_for("categoryId", "zzz") is None
        assert {p for p, _ in handler.seen} == {"skills", "categories"}
        assert all(params["pageSize"] == "100" for _, params in handler.seen)

    def test_cached_fields_not_refetched(self, mock_client):
        """测试已缓存的字段不会重复请求"""
        handler = relation_handler(TABLES)
        resolver = RelationResolver(mock_client(handler))

        asyncio.run(resolver.resolve(["skillId"]))
        asyncio.run(resolver.resolve(["skillId", "categoryId"]))

        assert [p for p, _ in handler.seen] == ["skills", "categories"]

    def test_empty_relation_is_cached_as_empty(self, mock_client):
        """测试目标资源没有任何行时缓存为空列表"""
        resolver = RelationResolver(mock_client(relation_handler(TABLES)))
        asyncio.run(resolver.resolve(["companyId"]))
        assert resolver.options_for("companyId") == []

    def test_partial_failure(self, mock_client):
        """测试单个关系失败不影响其他关系"""
        resolver = RelationResolver(mock_client(relation_handler(TABLES, failing=("categories",))))

        loaded = asyncio.run(resolver.resolve(["skillId", "categoryId"]))

        assert list(loaded) == ["skillId"]
        assert resolver.options_for("categoryId") is None
        assert resolver.errors == {"categoryId": "categories unavailable"}

    def test_failed_field_retried(self, mock_client):
        """测试失败的字段下次会重新请求"""
        failing = {"categories"}
        handler = relation_handler(TABLES, failing=failing)
        resolver = RelationResolver(mock_client(handler))

        asyncio.run(resolver.resolve(["categoryId"]))
        failing.clear()
        asyncio.run(resolver.resolve(["categoryId"]))

        assert resolver.options_for("categoryId")[0].value == "c1"
        assert resolver.errors == {}

    def test_stale_results_discarded(self, mock_client):
        """测试请求期间发生作废时丢弃返回结果"""
        holder = {}

        def invalidate_mid_flight(path):
            holder["resolver"].invalidate()

        resolver = RelationResolver(mock_client(relation_handler(TABLES, on_request=invalidate_mid_flight)))
        holder["resolver"] = resolver

        loaded = asyncio.run(resolver.resolve(["skillId"]))

        assert loaded == {}
        assert resolver.options_for("skillId") is None

    def test_invalidate_keeps_shared_fields(self, mock_client):
        """测试作废时保留指定字段"""
        resolver = RelationResolver(mock_client(relation_handler(TABLES)))
        asyncio.run(resolver.resolve(["skillId", "categoryId"]))
        generation = resolver.generation

        dropped = resolver.invalidate(keep=["skillId"])

        assert dropped == ("categoryId",)
        assert resolver.options_for("skillId") is not None
        assert resolver.options_for("categoryId") is None
        assert resolver.generation == generation + 1

    def test_concurrent_fetches(self, mock_client):
        """测试多个关系字段并发请求"""
        in_flight = {"now": 0, "peak": 0}

        async def handler(request):
            in_flight["now"] += 1
            in_flight["peak"] = max(in_flight["peak"], in_flight["now"])
            await asyncio.sleep(0.01)
            in_flight["now"] -= 1
            path = request.url.path.strip("/")
            return httpx.Response(200, json={"success": True, "data": TABLES.get(path, [])})

        resolver = RelationResolver(mock_client(handler))
        asyncio.run(resolver.resolve(["skillId", "categoryId", "companyId"]))

        assert in_flight["peak"] == 3

    def test_custom_relation_map(self, mock_client):
        custom = {"ownerId": RELATION_MAP["userId"]}
        handler = relation_handler({"users": [{"id": "u1", "firstName": "A", "lastName": "B", "email": "a@b"}]})
        resolver = RelationResolver(mock_client(handler), relation_map=custom, page_size=5)

        asyncio.run(resolver.resolve(["ownerId", "userId"]))

        assert resolver.label_for("ownerId", "u1") == "A B (a@b)"
        assert handler.seen == [("users", {"page": "1", "pageSize": "5"})]
