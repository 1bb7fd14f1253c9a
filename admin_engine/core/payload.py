"""
提交前的表单归一化
"""

from typing import Any, Dict, Iterable

from admin_engine.models.resource import ResourceDescriptor


def coerce_int(raw: Any) -> Any:
    """
    把表单中的数值输入转成整数

    - "" / None / 纯空白 -> None
    - 数字原样返回
    - 无法解析的字符串 -> None
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, (int, float)):
        return raw
    if isinstance(raw, str):
        trimmed = raw.strip()
        if not trimmed:
            return None
        try:
            return int(trimmed)
        except ValueError:
            try:
                return int(float(trimmed))
            except ValueError:
                return None
    return raw


def normalize_payload(
    resource: ResourceDescriptor,
    draft: Dict[str, Any],
    fields: Iterable[str]
) -> Dict[str, Any]:
    """
    把表单草稿转换成请求体

    1. 只保留可编辑字段
    2. 数值字段转成整数，空值转成 None
    3. is* 布尔字段的空字符串转成 None

    Args:
        resource: 资源描述
        draft: 表单草稿
        fields: 可编辑字段

    Returns:
        新的请求体字典（不修改 draft）
    """
    numeric = set(resource.numeric_fields)
    payload: Dict[str, Any] = {}
    for field in fields:
        if field not in draft:
            continue
        raw = draft[field]
        if field in numeric:
            payload[field] = coerce_int(raw)
        elif field.startswith("is") and raw == "":
            payload[field] = None
        else:
            payload[field] = raw
    return payload
