"""
多对多同步模型
连接表的收敛计划与执行报告
"""

from typing import List

from pydantic import BaseModel, Field

from .resource import AdminRow


class JoinPlan(BaseModel):
    """
    收敛计划

    to_add 只包含期望集合中尚未持久化的对端 ID，
    to_delete 只包含已持久化但不在期望集合中的连接行，二者不相交
    """

    existing_ids: List[str] = Field(default_factory=list)
    to_add: List[str] = Field(default_factory=list)
    to_delete: List[AdminRow] = Field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not self.to_add and not self.to_delete


class SyncReport(BaseModel):
    """
    同步执行报告

    同步不是事务性的：部分失败会让连接表停留在中间状态，
    需要调用方重新执行同步才能收敛
    """

    join_path: str
    owner_id: str
    added: List[str] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)
    failures: List[str] = Field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.added) + len(self.deleted) + len(self.failures)

    @property
    def succeeded(self) -> int:
        return len(self.added) + len(self.deleted)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        """形如 "3/5 operations succeeded" 的摘要"""
        return f"{self.succeeded}/{self.attempted} operations succeeded"
