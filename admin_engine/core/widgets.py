"""
字段控件推断与只读展示

两者共用同一套启发式：枚举、关系、数值、布尔、长文本、图片。
控件推断是一个按固定顺序求值的规则表，命中第一条即返回。
"""

import json
import re
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

from admin_engine.models.form import (
    DisplayKind, DisplayValue, FieldWidget, OptionSource, RelationOption, WidgetKind
)
from admin_engine.models.resource import ResourceDescriptor
from admin_engine.registry.relations import RELATION_MAP

IMAGE_FIELD_PATTERN = re.compile(r"(avatar|logo|cover|image|photo|picture|icon)", re.IGNORECASE)
HTTP_URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
TEXTAREA_HINTS = ("description", "summary", "letter", "content")

# 嵌入的多对多数组列 -> 元素中对端对象的键名
NESTED_LIST_COLUMNS = {"skills": "skill", "categories": "category"}
NESTED_LIST_PREVIEW = 3

# 状态值 -> (图标, 色调)
STATUS_STYLES = {
    "DRAFT": ("circle", "slate"),
    "PUBLISHED": ("check-circle", "green"),
    "ARCHIVED": ("pause-circle", "amber"),
    "CLOSED": ("ban", "red"),
    "APPLIED": ("circle", "slate"),
    "REVIEWING": ("alarm-clock", "amber"),
    "SHORTLISTED": ("sparkles", "purple"),
    "INTERVIEW_SCHEDULED": ("alarm-clock", "blue"),
    "INTERVIEWED": ("check-circle", "green"),
    "OFFER_SENT": ("sparkles", "emerald"),
    "HIRED": ("check-circle", "emerald"),
    "REJECTED": ("ban", "red"),
    "WITHDRAWN": ("pause-circle", "slate"),
    "PENDING": ("circle", "slate"),
    "IN_PROGRESS": ("alarm-clock", "amber"),
    "PROCESSING": ("alarm-clock", "amber"),
    "COMPLETED": ("check-circle", "green"),
    "FAILED": ("alert-triangle", "red"),
    "EXPIRED": ("x-circle", "slate"),
}


def is_image_field(field: str) -> bool:
    """字段名是否表示图片（头像、logo、封面等）"""
    return bool(IMAGE_FIELD_PATTERN.search(field))


def is_id_field(field: str, primary_keys: Sequence[str] = ()) -> bool:
    """字段是否是 ID 形态：id、以 Id 结尾或属于主键"""
    return field == "id" or field.endswith("Id") or field in primary_keys


def is_numeric_value(value: Any) -> bool:
    # bool 是 int 的子类，需要先排除
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_label(field: str) -> str:
    """
    把字段名转成标题，例如 isSalaryNegotiable -> "Salary Negotiable"
    """
    clean = re.sub(r"^is([A-Z])", lambda m: m.group(1), field)
    clean = re.sub(r"([A-Z])", r" \1", clean).replace("_", " ")
    clean = re.sub(r"\s+", " ", clean).strip()
    return clean[:1].upper() + clean[1:]


# ==================== 控件推断 ====================

def _rule_enum(field, value, enums, relation_options, numeric_fields):
    if enums.get(field):
        return WidgetKind.SELECT
    return None


def _rule_relation(field, value, enums, relation_options, numeric_fields):
    if relation_options:
        return WidgetKind.SELECT
    return None


def _rule_number_value(field, value, enums, relation_options, numeric_fields):
    if is_numeric_value(value):
        return WidgetKind.NUMBER
    return None


def _rule_checkbox_value(field, value, enums, relation_options, numeric_fields):
    if isinstance(value, bool):
        return WidgetKind.CHECKBOX
    return None


def _rule_number_name(field, value, enums, relation_options, numeric_fields):
    if field in numeric_fields or "year" in field.lower():
        return WidgetKind.NUMBER
    return None


def _rule_checkbox_name(field, value, enums, relation_options, numeric_fields):
    if field.startswith("is"):
        return WidgetKind.CHECKBOX
    return None


def _rule_textarea(field, value, enums, relation_options, numeric_fields):
    lowered = field.lower()
    if any(hint in lowered for hint in TEXTAREA_HINTS):
        return WidgetKind.TEXTAREA
    return None


# 规则顺序即优先级：枚举字段即使当前值像布尔或数字也必须渲染成下拉框；
# 当前值的类型优先于字段名推断
WIDGET_RULES: Tuple[Callable[..., Optional[WidgetKind]], ...] = (
    _rule_enum,
    _rule_relation,
    _rule_number_value,
    _rule_checkbox_value,
    _rule_number_name,
    _rule_checkbox_name,
    _rule_textarea,
)


def widget_for(
    field: str,
    value: Any,
    field_enums: Optional[Mapping[str, Sequence[str]]] = None,
    relation_options: Optional[Sequence[RelationOption]] = None,
    numeric_fields: Sequence[str] = ()
) -> WidgetKind:
    """
    推断字段的输入控件

    规则按顺序求值，命中第一条即返回：
    1. 字段声明了枚举 -> select
    2. 关系选项已缓存且非空 -> select
    3. 当前值是数字 -> number
    4. 当前值是布尔 -> checkbox
    5. 字段声明为数值或字段名包含 year -> number
    6. 字段名以 is 开头 -> checkbox
    7. 字段名包含 description/summary/letter/content -> textarea
    8. 其余 -> text

    Args:
        field: 字段名
        value: 当前值
        field_enums: 资源声明的枚举
        relation_options: 该字段的关系选项（空列表等同于没有关系）
        numeric_fields: 资源声明的数值字段

    Returns:
        WidgetKind
    """
    enums = field_enums or {}
    for rule in WIDGET_RULES:
        kind = rule(field, value, enums, relation_options, numeric_fields)
        if kind is not None:
            return kind
    return WidgetKind.TEXT


def describe_widget(
    resource: ResourceDescriptor,
    field: str,
    value: Any,
    relation_options: Optional[Sequence[RelationOption]] = None
) -> FieldWidget:
    """
    生成字段的完整控件描述（种类、选项来源、选项卡片、上传控件）

    Args:
        resource: 资源描述
        field: 字段名
        value: 当前值
        relation_options: 该字段的关系选项

    Returns:
        FieldWidget
    """
    kind = widget_for(field, value, resource.field_enums, relation_options, resource.numeric_fields)
    widget = FieldWidget(field=field, kind=kind, upload=is_image_field(field))

    if kind == WidgetKind.SELECT:
        enum_values = resource.enum_values(field)
        if enum_values:
            widget.source = OptionSource.ENUM
            widget.options = [RelationOption(value=v, label=v) for v in enum_values]
            widget.chips = True
        else:
            widget.source = OptionSource.RELATION
            widget.options = list(relation_options or [])
    return widget


# ==================== 只读展示 ====================

def _nested_names(items: List[Any], nested_key: str) -> List[str]:
    names = []
    for item in items:
        nested = item.get(nested_key) if isinstance(item, dict) else None
        name = str((nested or {}).get("name") or "").strip()
        if name:
            names.append(name)
    return names


def display_for(
    resource: ResourceDescriptor,
    field: str,
    value: Any,
    relation_label: Optional[str] = None
) -> DisplayValue:
    """
    把字段值映射成只读展示

    与控件推断共用同一套判断：嵌套列表、图片、布尔、枚举徽章、ID 链接、文本

    Args:
        resource: 资源描述
        field: 字段名
        value: 字段值
        relation_label: 关系解析得到的可读标签（可选）

    Returns:
        DisplayValue
    """
    if field in NESTED_LIST_COLUMNS and isinstance(value, list):
        names = _nested_names(value, NESTED_LIST_COLUMNS[field])
        shown = tuple(names[:NESTED_LIST_PREVIEW])
        return DisplayValue(
            field=field,
            kind=DisplayKind.NESTED_LIST,
            text=", ".join(shown) if shown else "—",
            items=shown,
            remaining=len(names) - len(shown)
        )

    if value is None or value == "":
        return DisplayValue(field=field, kind=DisplayKind.EMPTY, text="N/A")

    if is_image_field(field) and isinstance(value, str) and HTTP_URL_PATTERN.match(value):
        return DisplayValue(field=field, kind=DisplayKind.IMAGE, text=value, href=value)

    if isinstance(value, bool):
        return DisplayValue(
            field=field,
            kind=DisplayKind.BOOLEAN,
            text="Yes" if value else "No",
            icon="check-circle" if value else "x-circle",
            tone="green" if value else "red"
        )

    if resource.enum_values(field):
        text = str(value)
        icon, tone = STATUS_STYLES.get(text, (None, None))
        if field == "role":
            icon = "shield"
        return DisplayValue(field=field, kind=DisplayKind.BADGE, text=text, icon=icon, tone=tone)

    if is_id_field(field, resource.primary_keys):
        relation = RELATION_MAP.get(field)
        target = relation.path if relation else resource.path
        return DisplayValue(
            field=field,
            kind=DisplayKind.LINK,
            text=relation_label or str(value),
            href=f"/admin/{target}/{quote(str(value), safe='')}"
        )

    if relation_label:
        text = relation_label
    elif isinstance(value, (dict, list)):
        text = json.dumps(value, ensure_ascii=False, default=str)
    else:
        text = str(value)
    return DisplayValue(field=field, kind=DisplayKind.TEXT, text=text)
