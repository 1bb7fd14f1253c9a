"""
数据模型模块
导出资源描述、响应信封、表单和同步相关的模型
"""

# 资源描述
from .resource import AdminRow, ResourceDescriptor, RelationSpec, ManyToManySpec

# 响应信封
from .envelope import ApiEnvelope, ListMeta, ListResult

# 多对多同步
from .sync import JoinPlan, SyncReport

# 编辑器与展示
from .form import (
    EditorMode, WidgetKind, OptionSource, RelationOption, FieldWidget,
    DisplayKind, DisplayValue, SubmitResult
)

__all__ = [
    # 资源描述
    "AdminRow", "ResourceDescriptor", "RelationSpec", "ManyToManySpec",
    # 响应信封
    "ApiEnvelope", "ListMeta", "ListResult",
    # 多对多同步
    "JoinPlan", "SyncReport",
    # 编辑器与展示
    "EditorMode", "WidgetKind", "OptionSource", "RelationOption", "FieldWidget",
    "DisplayKind", "DisplayValue", "SubmitResult"
]
