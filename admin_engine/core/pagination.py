"""
分页计算
"""

import math


def total_pages(total: int, page_size: int) -> int:
    """
    总页数，至少为 1

    Raises:
        ValueError: page_size 不是正数
    """
    if page_size <= 0:
        raise ValueError("page_size 必须大于 0")
    return max(1, math.ceil(max(total, 0) / page_size))


def clamp_page(page: int, pages: int) -> int:
    """把页码限制在 [1, pages] 区间内"""
    return min(max(page, 1), max(pages, 1))
