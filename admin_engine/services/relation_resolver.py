"""
关系解析器

为外键形态的字段（companyId、skillId ...）并发拉取目标资源的第一页，
投影成 RelationOption 列表并按字段名缓存。

关键机制：
- 只拉取尚未缓存的字段，所有字段并发请求
- 单个关系失败不影响其他关系，失败字段保持无选项（编辑器回退为文本框）
- 代数计数器：invalidate() 之后才返回的旧请求结果会被丢弃
"""

import asyncio
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import httpx

from admin_engine.client.admin_client import AdminClient
from admin_engine.errors import AdminApiError
from admin_engine.models.form import RelationOption
from admin_engine.models.resource import AdminRow, RelationSpec
from admin_engine.registry.relations import RELATION_MAP


def project_options(field: str, spec: RelationSpec, rows: Iterable[AdminRow]) -> List[RelationOption]:
    """
    把目标资源的行投影成关系选项

    Args:
        field: 外键字段名
        spec: 关系映射条目
        rows: 目标资源的行

    Returns:
        RelationOption 列表，value 取行的 id（缺失时取同名字段）
    """
    options = []
    for row in rows:
        value = row.get("id")
        if value is None:
            value = row.get(field)
        options.append(RelationOption(value=str(value if value is not None else ""), label=spec.label(row)))
    return options


class RelationResolver:
    """
    关系选项缓存

    使用示例：
        resolver = RelationResolver(client)
        await resolver.resolve(["companyId", "skillId"])
        resolver.options_for("companyId")
    """

    def __init__(
        self,
        client: AdminClient,
        relation_map: Optional[Mapping[str, RelationSpec]] = None,
        page_size: int = 100
    ):
        """
        初始化解析器

        Args:
            client: REST 客户端
            relation_map: 字段 -> 关系映射，缺省使用全局 RELATION_MAP
            page_size: 每个关系拉取的行数
        """
        self.client = client
        self.relation_map = relation_map if relation_map is not None else RELATION_MAP
        self.page_size = page_size
        self.cache: Dict[str, List[RelationOption]] = {}
        self.errors: Dict[str, str] = {}
        self.generation = 0

    async def _fetch(self, field: str) -> List[RelationOption]:
        spec = self.relation_map[field]
        result = await self.client.list(spec.path, page=1, page_size=self.page_size)
        return project_options(field, spec, result.rows)

    async def resolve(self, field_names: Iterable[str]) -> Dict[str, List[RelationOption]]:
        """
        并发加载尚未缓存的关系字段

        Args:
            field_names: 需要的字段名（非关系字段会被忽略）

        Returns:
            本次新写入缓存的 字段 -> 选项
        """
        need = []
        for field in field_names:
            if field in self.relation_map and field not in self.cache and field not in need:
                need.append(field)
        if not need:
            return {}

        generation = self.generation
        results = await asyncio.gather(*(self._fetch(f) for f in need), return_exceptions=True)

        # 请求期间资源已切换，结果作废
        if generation != self.generation:
            print(f"[RelationResolver] 丢弃过期结果: {need} (generation {generation} != {self.generation})")
            return {}

        loaded: Dict[str, List[RelationOption]] = {}
        for field, outcome in zip(need, results):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, (AdminApiError, httpx.HTTPError)):
                    raise outcome
                message = outcome.message if isinstance(outcome, AdminApiError) else str(outcome)
                self.errors[field] = message
                print(f"[RelationResolver] 关系 {field} 加载失败: {message}")
                continue
            self.cache[field] = outcome
            self.errors.pop(field, None)
            loaded[field] = outcome

        print(f"[RelationResolver] 已加载 {list(loaded)}，失败 {[f for f in need if f not in loaded]}")
        return loaded

    def options_for(self, field: str) -> Optional[List[RelationOption]]:
        """
        返回字段的关系选项

        None 表示没有缓存（未加载或加载失败）；空列表表示目标资源没有任何行，
        两者在编辑器中都渲染为普通输入框
        """
        return self.cache.get(field)

    def label_for(self, field: str, value) -> Optional[str]:
        """按值查找关系选项的标签"""
        if value is None or value == "":
            return None
        for option in self.cache.get(field) or []:
            if option.value == str(value):
                return option.label
        return None

    def invalidate(self, keep: Iterable[str] = ()) -> Tuple[str, ...]:
        """
        作废缓存并推进代数

        Args:
            keep: 需要保留的字段（新旧资源同名共享的关系）

        Returns:
            被清除的字段
        """
        keep_set = set(keep)
        dropped = tuple(f for f in self.cache if f not in keep_set)
        for field in dropped:
            del self.cache[field]
        self.errors.clear()
        self.generation += 1
        return dropped
