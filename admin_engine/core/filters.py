"""
客户端过滤
只作用于当前页已经拉取到的行，不会转换成服务端查询
"""

import json
from typing import Any, List, Optional, Sequence

from admin_engine.models.resource import AdminRow


def stringify(value: Any) -> str:
    """把单元格的值转成用于匹配的字符串，None 视为空串"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def apply_client_filter(
    rows: Sequence[AdminRow],
    columns: Sequence[str],
    search: str = "",
    column: Optional[str] = None,
    value: Optional[str] = None
) -> List[AdminRow]:
    """
    对当前页的行做搜索 + 等值过滤（AND 语义）

    - search 非空时：任意可见列的字符串表示包含 search（忽略大小写）
    - column 和 value 都非空时：row[column] 的字符串表示等于 value

    Args:
        rows: 当前页的行
        columns: 可见列
        search: 搜索关键字
        column: 等值过滤的字段
        value: 等值过滤的值

    Returns:
        满足条件的行（保持原顺序）
    """
    needle = (search or "").strip().lower()
    use_equality = bool(column) and value is not None and value != ""

    result = []
    for row in rows:
        if needle and not any(needle in stringify(row.get(c)).lower() for c in columns):
            continue
        if use_equality and stringify(row.get(column)) != value:
            continue
        result.append(row)
    return result


def has_primary_keys(row: AdminRow, primary_keys: Sequence[str]) -> bool:
    """行是否带齐全部主键值（缺主键的行不在列表中展示）"""
    return all(row.get(k) is not None for k in primary_keys)
