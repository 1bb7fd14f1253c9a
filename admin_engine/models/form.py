"""
编辑器与展示模型
表单控件种类、关系选项、只读展示值和提交结果
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .resource import AdminRow
from .sync import SyncReport


class EditorMode(str, Enum):
    """编辑器模式，同一个编辑器实例只处于其中一种"""
    CREATE = "create"
    EDIT = "edit"


class WidgetKind(str, Enum):
    """表单控件种类"""
    SELECT = "select"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    TEXTAREA = "textarea"
    TEXT = "text"


class OptionSource(str, Enum):
    """下拉框选项的来源"""
    ENUM = "enum"
    RELATION = "relation"


class RelationOption(BaseModel):
    """关系选项：主键值 + 可读标签"""
    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class FieldWidget(BaseModel):
    """
    字段控件描述
    kind 由固定顺序的规则表推断；图片字段额外附带上传控件
    """

    field: str
    kind: WidgetKind
    source: Optional[OptionSource] = None
    options: List[RelationOption] = Field(default_factory=list)

    # 枚举字段同时渲染成可点击的选项卡片
    chips: bool = False

    # 图片类字段在文本框旁附带文件上传
    upload: bool = False


class DisplayKind(str, Enum):
    """只读展示的渲染方式"""
    EMPTY = "empty"
    NESTED_LIST = "nested_list"
    IMAGE = "image"
    BOOLEAN = "boolean"
    BADGE = "badge"
    LINK = "link"
    TEXT = "text"


class DisplayValue(BaseModel):
    """单个字段的只读展示结果"""

    field: str
    kind: DisplayKind
    text: str
    icon: Optional[str] = None
    tone: Optional[str] = None
    href: Optional[str] = None

    # NESTED_LIST：展示的前几个名称与剩余数量
    items: Tuple[str, ...] = ()
    remaining: int = 0


class SubmitResult(BaseModel):
    """编辑器提交结果"""

    mode: EditorMode
    row: Optional[AdminRow] = None
    owner_id: Optional[str] = None
    sync_reports: Dict[str, SyncReport] = Field(default_factory=dict)

    @property
    def fully_synced(self) -> bool:
        """所有多对多同步是否全部成功"""
        return all(report.ok for report in self.sync_reports.values())

    def summary(self) -> Optional[str]:
        """同步部分失败时的提示文本"""
        failed = [f"{name}: {report.summary()}" for name, report in self.sync_reports.items() if not report.ok]
        if not failed:
            return None
        return "; ".join(failed)

    def to_payload(self) -> Dict[str, Any]:
        """用于日志或接口输出的简单字典"""
        return {
            "mode": self.mode.value,
            "owner_id": self.owner_id,
            "synced": self.fully_synced,
        }
