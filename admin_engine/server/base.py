"""
参考后端的模型基类
提供字符串主键和时间戳字段
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field


def new_id() -> str:
    """生成记录主键（uuid4 的 hex 形式）"""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TimestampModel(SQLModel):
    """时间戳基类，为实体表提供 created_at 和 updated_at 字段"""
    created_at: Optional[datetime] = Field(default_factory=utc_now, nullable=False)
    updated_at: Optional[datetime] = Field(
        default_factory=utc_now,
        nullable=False,
        sa_column_kwargs={"onupdate": utc_now}
    )


class EntityModel(TimestampModel):
    """带字符串主键的实体基类"""
    id: str = Field(default_factory=new_id, primary_key=True)
