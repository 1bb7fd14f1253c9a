"""
响应信封模型
后端所有接口统一使用 success + 可选 message 的响应格式
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .resource import AdminRow


class ListMeta(BaseModel):
    """分页元信息"""
    model_config = ConfigDict(populate_by_name=True)

    page: int = 1
    page_size: int = Field(default=0, alias="pageSize")
    total: int = 0


class ApiEnvelope(BaseModel):
    """
    通用响应信封
    success 是唯一权威的成功/失败信号
    """
    model_config = ConfigDict(extra="allow")

    success: bool
    data: Any = None
    message: Optional[str] = None
    meta: Optional[ListMeta] = None
    url: Optional[str] = None


class ListResult(BaseModel):
    """一次列表请求的结果：当前页的行与分页信息"""

    rows: List[AdminRow] = Field(default_factory=list)
    meta: Optional[ListMeta] = None

    @property
    def total(self) -> int:
        """服务端报告的总数，缺失时退化为当前页行数"""
        if self.meta is not None:
            return self.meta.total
        return len(self.rows)
