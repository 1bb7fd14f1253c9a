"""
资源注册表模块
提供资源目录、字段过滤规则和关系映射的查找入口
"""

from .resources import (
    ADMIN_RESOURCES,
    EDIT_DENYLIST,
    DISPLAY_DENYLIST,
    resource_by_key_or_path,
    get_resource,
    list_resources,
    editable_fields,
    visible_columns,
)
from .relations import (
    RELATION_MAP,
    MANY_TO_MANY,
    relation_for,
    many_to_many_for,
    relation_fields_for,
)

__all__ = [
    "ADMIN_RESOURCES",
    "EDIT_DENYLIST",
    "DISPLAY_DENYLIST",
    "resource_by_key_or_path",
    "get_resource",
    "list_resources",
    "editable_fields",
    "visible_columns",
    "RELATION_MAP",
    "MANY_TO_MANY",
    "relation_for",
    "many_to_many_for",
    "relation_fields_for",
]
