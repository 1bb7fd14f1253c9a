"""
纯函数模块
过滤、分页、控件推断与请求体归一化，不做任何 I/O
"""

from .filters import apply_client_filter, has_primary_keys, stringify
from .pagination import total_pages, clamp_page
from .widgets import (
    widget_for, describe_widget, display_for, format_label,
    is_image_field, is_id_field, STATUS_STYLES
)
from .payload import normalize_payload, coerce_int

__all__ = [
    "apply_client_filter", "has_primary_keys", "stringify",
    "total_pages", "clamp_page",
    "widget_for", "describe_widget", "display_for", "format_label",
    "is_image_field", "is_id_field", "STATUS_STYLES",
    "normalize_payload", "coerce_int"
]
