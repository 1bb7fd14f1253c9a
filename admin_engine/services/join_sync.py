"""
多对多同步器

把连接表（job-skills、job-categories）收敛到调用方期望的对端 ID 集合：
1. 拉取连接表现有行，筛出属于当前所属记录的行
2. 计算 to_delete（已存在但不再期望）与 to_add（期望但尚不存在）
3. 删除与新增各自作为一批并发请求

同步不是事务性的：部分失败不会回滚也不会重试，调用方重新执行同步即可收敛。
调用前所属记录必须已经写入（owner_id 必须存在）。
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx

from admin_engine.client.admin_client import AdminClient
from admin_engine.errors import AdminApiError
from admin_engine.models.resource import AdminRow, ManyToManySpec
from admin_engine.models.sync import JoinPlan, SyncReport

# 新增时服务端报告"已存在"的消息片段，视为已经收敛
ALREADY_EXISTS_HINTS = ("Unique constraint", "already exists")


def plan_join_sync(
    existing_rows: Iterable[AdminRow],
    owner_field: str,
    owner_id: str,
    desired_ids: Iterable[str],
    counterpart_field: str
) -> JoinPlan:
    """
    计算收敛计划（纯函数）

    Args:
        existing_rows: 连接表的行（可以包含其他所属记录的行）
        owner_field: 指向所属记录的字段
        owner_id: 所属记录 ID
        desired_ids: 期望的对端 ID 集合
        counterpart_field: 指向对端实体的字段

    Returns:
        JoinPlan，to_add 与 to_delete 不相交
    """
    desired = []
    for value in desired_ids:
        value = str(value)
        if value not in desired:
            desired.append(value)

    owned = [r for r in existing_rows if str(r.get(owner_field)) == str(owner_id)]
    existing_ids = []
    for row in owned:
        value = str(row.get(counterpart_field))
        if value not in existing_ids:
            existing_ids.append(value)

    desired_set = set(desired)
    existing_set = set(existing_ids)
    return JoinPlan(
        existing_ids=existing_ids,
        to_add=[v for v in desired if v not in existing_set],
        to_delete=[r for r in owned if str(r.get(counterpart_field)) not in desired_set]
    )


def _is_already_exists(error: BaseException) -> bool:
    message = error.message if isinstance(error, AdminApiError) else str(error)
    return any(hint in (message or "") for hint in ALREADY_EXISTS_HINTS)


class JoinSynchronizer:
    """
    连接表同步器

    使用示例：
        sync = JoinSynchronizer(client)
        report = await sync.sync("job-skills", "jobId", job_id, {"s1", "s2"}, "skillId",
                                 primary_keys=("jobId", "skillId"))
    """

    def __init__(self, client: AdminClient, page_size: int = 200):
        """
        初始化同步器

        Args:
            client: REST 客户端
            page_size: 拉取连接表时的行数上限
        """
        self.client = client
        self.page_size = page_size

    async def sync(
        self,
        join_path: str,
        owner_field: str,
        owner_id: str,
        desired_ids: Iterable[str],
        counterpart_field: str,
        primary_keys: Optional[Sequence[str]] = None,
        extra_fields: Optional[Dict[str, Any]] = None
    ) -> SyncReport:
        """
        执行一次同步

        Args:
            join_path: 连接表资源路径
            owner_field: 指向所属记录的字段
            owner_id: 所属记录 ID（必须已经存在）
            desired_ids: 期望的对端 ID 集合
            counterpart_field: 指向对端实体的字段
            primary_keys: 连接表主键，缺省为 (owner_field, counterpart_field)
            extra_fields: 新建连接行时附带的字段

        Returns:
            SyncReport

        Raises:
            AdminApiError: 拉取连接表现有行失败（此时尚未发出任何写请求）
        """
        keys = tuple(primary_keys or (owner_field, counterpart_field))
        owner_id = str(owner_id)

        # 1. 拉取现有行（同时带上所属记录过滤，客户端再筛一次）
        existing = await self.client.list(
            join_path,
            page=1,
            page_size=self.page_size,
            params={owner_field: owner_id}
        )

        # 2. 计算计划
        plan = plan_join_sync(existing.rows, owner_field, owner_id, desired_ids, counterpart_field)
        report = SyncReport(join_path=join_path, owner_id=owner_id)
        if plan.is_noop:
            print(f"[JoinSynchronizer] {join_path} ({owner_id}) 已收敛，无需操作")
            return report

        # 3a. 删除批次
        delete_results = await asyncio.gather(
            *(self.client.remove(join_path, keys, row) for row in plan.to_delete),
            return_exceptions=True
        )
        for row, outcome in zip(plan.to_delete, delete_results):
            counterpart = str(row.get(counterpart_field))
            if isinstance(outcome, BaseException):
                self._check_recoverable(outcome)
                report.failures.append(f"delete {counterpart}: {outcome}")
            else:
                report.deleted.append(counterpart)

        # 3b. 新增批次
        extra = dict(extra_fields or {})
        add_results = await asyncio.gather(
            *(
                self.client.create(join_path, {**extra, owner_field: owner_id, counterpart_field: cid})
                for cid in plan.to_add
            ),
            return_exceptions=True
        )
        for cid, outcome in zip(plan.to_add, add_results):
            if isinstance(outcome, BaseException):
                self._check_recoverable(outcome)
                if _is_already_exists(outcome):
                    report.added.append(cid)
                    continue
                report.failures.append(f"add {cid}: {outcome}")
            else:
                report.added.append(cid)

        print(
            f"[JoinSynchronizer] {join_path} ({owner_id}): "
            f"+{len(report.added)} -{len(report.deleted)}, {report.summary()}"
        )
        return report

    async def sync_spec(self, spec: ManyToManySpec, owner_id: str, desired_ids: Iterable[str]) -> SyncReport:
        """按多对多关系声明执行同步"""
        return await self.sync(
            spec.join_path,
            spec.owner_field,
            owner_id,
            desired_ids,
            spec.counterpart_field,
            primary_keys=spec.primary_keys,
            extra_fields=spec.extra_fields
        )

    @staticmethod
    def _check_recoverable(error: BaseException) -> None:
        # 只有请求类失败计入报告，其他异常直接抛出
        if not isinstance(error, (AdminApiError, httpx.HTTPError)):
            raise error


def selected_ids_from_row(row: Optional[AdminRow], spec: ManyToManySpec) -> List[str]:
    """
    从记录中嵌入的关系数组提取已选中的对端 ID

    元素优先取 counterpart_field（如 skillId），否则取嵌套对象的 id（如 skill.id）

    Args:
        row: 所属记录
        spec: 多对多关系声明

    Returns:
        去重且保持顺序的 ID 列表
    """
    items = (row or {}).get(spec.name)
    if not isinstance(items, list):
        return []

    ids: List[str] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        value = item.get(spec.counterpart_field)
        if not value:
            nested = item.get(spec.nested_key)
            value = nested.get("id") if isinstance(nested, dict) else None
        if value and str(value) not in ids:
            ids.append(str(value))
    return ids
