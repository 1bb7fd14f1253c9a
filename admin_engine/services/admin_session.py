"""
后台会话状态

把"当前资源 + 列表 + 编辑器 + 过滤条件 + 关系缓存"放在一个对象里，
切换资源只通过 switch_resource() 这一个入口，所有依赖状态一起重置
"""

from typing import List, Optional

from admin_engine.client.admin_client import AdminClient
from admin_engine.config import AdminSettings
from admin_engine.models.envelope import ListResult
from admin_engine.models.form import EditorMode, SubmitResult
from admin_engine.models.resource import AdminRow, ResourceDescriptor
from admin_engine.registry.relations import relation_fields_for
from admin_engine.registry.resources import ADMIN_RESOURCES, editable_fields, get_resource
from admin_engine.services.join_sync import JoinSynchronizer
from admin_engine.services.list_controller import ListController
from admin_engine.services.record_editor import RecordEditor
from admin_engine.services.relation_resolver import RelationResolver


class AdminSession:
    """
    后台会话

    使用示例：
        session = AdminSession(client)
        await session.activate()
        session.switch_resource("jobs")
        await session.activate()
        session.open_editor(EditorMode.EDIT, session.list.visible_rows[0])
        await session.submit_editor()
    """

    def __init__(
        self,
        client: AdminClient,
        resource: Optional[str] = None,
        settings: Optional[AdminSettings] = None
    ):
        """
        初始化会话

        Args:
            client: REST 客户端
            resource: 初始资源 key 或路径，缺省为注册表第一个资源
            settings: 运行参数（分页、关系拉取行数等），缺省使用默认值
        """
        self.client = client
        self.settings = settings or AdminSettings()
        self.resource: ResourceDescriptor = get_resource(resource) if resource else ADMIN_RESOURCES[0]

        self.resolver = RelationResolver(client, page_size=self.settings.relation_page_size)
        self.synchronizer = JoinSynchronizer(client, page_size=self.settings.join_page_size)
        self.list = ListController(
            client,
            self.resource,
            page_size=self.settings.default_page_size,
            page_size_options=self.settings.page_size_options,
            max_columns=self.settings.max_visible_columns
        )
        self.editor: Optional[RecordEditor] = None
        self.selected_row: Optional[AdminRow] = None

    def relation_fields(self, resource: Optional[ResourceDescriptor] = None) -> List[str]:
        """资源需要预加载选项的关系字段"""
        resource = resource or self.resource
        return relation_fields_for(resource.key, editable_fields(resource))

    def switch_resource(self, identifier: str) -> ResourceDescriptor:
        """
        切换当前资源，原子地重置所有依赖状态

        - 页码回到 1，行、错误和过滤条件清空
        - 选中行清空，编辑器关闭并丢弃草稿
        - 关系缓存只保留新资源同样需要的字段，其余清除；代数推进使旧请求作废

        Args:
            identifier: 资源 key 或路径

        Returns:
            新的资源描述

        Raises:
            UnknownResourceError: 资源未注册
        """
        resource = get_resource(identifier)
        dropped = self.resolver.invalidate(keep=self.relation_fields(resource))

        self.resource = resource
        self.list.reset(resource)
        if self.editor is not None:
            self.editor.close()
        self.editor = None
        self.selected_row = None

        print(f"[AdminSession] 切换到 {resource.key}，清除关系缓存 {list(dropped)}")
        return resource

    async def activate(self) -> ListResult:
        """加载当前资源的关系选项和第一页数据"""
        await self.resolver.resolve(self.relation_fields())
        return await self.list.load()

    async def reload(self) -> ListResult:
        return await self.list.load()

    def select_row(self, row: Optional[AdminRow]) -> None:
        self.selected_row = row

    def open_editor(self, mode: EditorMode, row: Optional[AdminRow] = None) -> RecordEditor:
        """
        打开当前资源的编辑器（同一时刻只有一个）

        Args:
            mode: 编辑器模式
            row: 编辑的记录
        """
        if self.editor is not None:
            self.editor.close()
        self.editor = RecordEditor(self.client, self.resource, self.resolver, self.synchronizer)
        self.editor.open(mode, row)
        if row is not None:
            self.selected_row = row
        return self.editor

    def close_editor(self) -> None:
        if self.editor is not None:
            self.editor.close()
        self.editor = None

    async def submit_editor(self) -> Optional[SubmitResult]:
        """
        提交编辑器，成功后释放编辑器并重新加载列表

        Returns:
            SubmitResult；写入失败时返回 None，编辑器保持打开
        """
        if self.editor is None:
            return None
        result = await self.editor.submit()
        if result is not None:
            self.editor = None
            await self.list.load()
        return result
