"""
通用列表控制器

负责任意已注册资源的分页列表：
1. 持有 page / page_size / search / filter 状态
2. 拉取当前页并整体替换行数据
3. 在当前页的行上做客户端搜索与过滤
"""

from typing import List, Optional

import httpx

from admin_engine.client.admin_client import AdminClient
from admin_engine.core.filters import apply_client_filter, has_primary_keys
from admin_engine.core.pagination import clamp_page, total_pages
from admin_engine.errors import AdminApiError
from admin_engine.models.envelope import ListMeta, ListResult
from admin_engine.models.resource import AdminRow, ResourceDescriptor
from admin_engine.registry.resources import visible_columns

DEFAULT_PAGE_SIZE = 10
PAGE_SIZE_OPTIONS = (5, 10, 20, 50)


class ListController:
    """
    列表控制器

    使用示例：
        controller = ListController(client, get_resource("jobs"))
        await controller.load()
        controller.next_page()
        await controller.load()
    """

    def __init__(
        self,
        client: AdminClient,
        resource: ResourceDescriptor,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_size_options=PAGE_SIZE_OPTIONS,
        max_columns: int = 8
    ):
        """
        初始化控制器

        Args:
            client: REST 客户端
            resource: 当前资源
            page_size: 初始每页行数
            page_size_options: 允许选择的每页行数
            max_columns: 列表最多展示的列数
        """
        self.client = client
        self.resource = resource
        self.page_size_options = tuple(page_size_options)
        self.max_columns = max_columns

        if page_size not in self.page_size_options:
            raise ValueError(f"page_size 必须是 {self.page_size_options} 之一")

        self.page = 1
        self.page_size = page_size
        self.rows: List[AdminRow] = []
        self.meta: Optional[ListMeta] = None
        self.loading = False
        self.error: Optional[str] = None

        self.search = ""
        self.filter_column: Optional[str] = None
        self.filter_value: Optional[str] = None

    # ==================== 拉取 ====================

    async def _fetch_page(self) -> ListResult:
        return await self.client.list(self.resource.path, page=self.page, page_size=self.page_size)

    async def load(self) -> ListResult:
        """
        拉取当前页

        成功时整体替换 rows/meta；失败时保留服务端消息并清空 rows。
        服务端总数减少导致当前页越界时，夹紧页码后重新拉取夹紧后的那一页。
        loading 在请求前置位，任何退出路径都会复位。

        Returns:
            本次请求的 ListResult（失败时为空结果）
        """
        self.loading = True
        self.error = None
        try:
            result = await self._fetch_page()
            clamped = clamp_page(self.page, total_pages(result.total, self.page_size))
            if clamped != self.page:
                print(f"[ListController] {self.resource.key} 第 {self.page} 页已越界，改为拉取第 {clamped} 页")
                self.page = clamped
                result = await self._fetch_page()
        except (AdminApiError, httpx.HTTPError) as e:
            message = e.message if isinstance(e, AdminApiError) else str(e)
            print(f"[ListController] 加载 {self.resource.key} 第 {self.page} 页失败: {message}")
            self.error = message or "Failed to load"
            self.rows = []
            self.meta = None
            return ListResult()
        finally:
            self.loading = False

        self.rows = list(result.rows)
        self.meta = result.meta
        print(f"[ListController] {self.resource.key} 第 {self.page}/{self.total_pages} 页, {len(self.rows)} 行")
        return result

    # ==================== 分页 ====================

    @property
    def total(self) -> int:
        """服务端报告的总数，缺失时退化为当前页行数"""
        if self.meta is not None:
            return self.meta.total
        return len(self.rows)

    @property
    def total_pages(self) -> int:
        return total_pages(self.total, self.page_size)

    def go_to_page(self, page: int) -> int:
        """跳转到指定页（自动夹紧），返回实际页码"""
        self.page = clamp_page(page, self.total_pages)
        return self.page

    def next_page(self) -> int:
        return self.go_to_page(self.page + 1)

    def previous_page(self) -> int:
        return self.go_to_page(self.page - 1)

    def set_page_size(self, page_size: int) -> int:
        """
        修改每页行数，并回到第 1 页

        Raises:
            ValueError: page_size 不在可选范围内
        """
        if page_size not in self.page_size_options:
            raise ValueError(f"page_size 必须是 {self.page_size_options} 之一")
        self.page_size = page_size
        self.page = 1
        return self.page

    # ==================== 客户端过滤 ====================

    @property
    def columns(self) -> List[str]:
        """可见列"""
        return visible_columns(self.resource, self.max_columns)

    # 搜索和过滤条件的任何变化都回到第 1 页

    def set_search(self, search: str) -> None:
        self.search = search or ""
        self.page = 1

    def set_filter(self, column: Optional[str], value: Optional[str]) -> None:
        self.filter_column = column or None
        self.filter_value = value if value not in (None, "") else None
        self.page = 1

    def clear_filters(self) -> None:
        self.page = 1
        self.search = ""
        self.filter_column = None
        self.filter_value = None

    @property
    def visible_rows(self) -> List[AdminRow]:
        """
        当前页经过搜索/过滤后的行

        只作用于已拉取的当前页，total 仍然反映服务端未过滤的总数
        """
        rows = [r for r in self.rows if has_primary_keys(r, self.resource.primary_keys)]
        return apply_client_filter(rows, self.columns, self.search, self.filter_column, self.filter_value)

    def reset(self, resource: ResourceDescriptor) -> None:
        """切换资源：回到第 1 页，清空行、错误和过滤条件"""
        self.resource = resource
        self.page = 1
        self.rows = []
        self.meta = None
        self.error = None
        self.loading = False
        self.clear_filters()
