"""
详情视图

按主键加载单条记录，用与编辑器相同的启发式渲染只读展示，
支持切换到编辑（复用 RecordEditor）和删除
"""

from typing import List, Optional, Sequence, Union
from urllib.parse import quote

import httpx

from admin_engine.client.admin_client import AdminClient
from admin_engine.core.widgets import display_for
from admin_engine.errors import AdminApiError, NoRowSelectedError
from admin_engine.models.form import DisplayValue, EditorMode, SubmitResult
from admin_engine.models.resource import AdminRow, ResourceDescriptor
from admin_engine.registry.relations import relation_fields_for
from admin_engine.registry.resources import DISPLAY_DENYLIST
from admin_engine.services.join_sync import JoinSynchronizer
from admin_engine.services.record_editor import RecordEditor
from admin_engine.services.relation_resolver import RelationResolver


class DetailView:
    """
    单条记录视图

    使用示例：
        view = DetailView(client, get_resource("jobs"))
        await view.load("job-1")
        view.begin_edit()
        view.editor.set_field("location", "Da Nang")
        await view.save()
    """

    def __init__(
        self,
        client: AdminClient,
        resource: ResourceDescriptor,
        resolver: Optional[RelationResolver] = None,
        synchronizer: Optional[JoinSynchronizer] = None
    ):
        self.client = client
        self.resource = resource
        self.resolver = resolver or RelationResolver(client)
        self.editor = RecordEditor(client, resource, self.resolver, synchronizer)

        self.row: Optional[AdminRow] = None
        self.id_path: Optional[str] = None
        self.loading = False
        self.error: Optional[str] = None
        self.editing = False
        self.deleted = False

    @staticmethod
    def _id_path(primary_key_values: Union[str, Sequence[str]]) -> str:
        if isinstance(primary_key_values, str):
            values = [primary_key_values]
        else:
            values = [str(v) for v in primary_key_values]
        if not values or any(v == "" for v in values):
            raise NoRowSelectedError("Missing primary key value")
        return "/".join(quote(v, safe="") for v in values)

    async def load(self, primary_key_values: Union[str, Sequence[str]]) -> Optional[AdminRow]:
        """
        加载记录

        Args:
            primary_key_values: 单个主键值，或复合主键按声明顺序排列的值

        Returns:
            记录；失败时返回 None，错误消息保存在 error
        """
        self.id_path = self._id_path(primary_key_values)
        self.loading = True
        self.error = None
        try:
            self.row = await self.client.get(self.resource.path, self.id_path)
        except (AdminApiError, httpx.HTTPError) as e:
            self.row = None
            self.error = (e.message if isinstance(e, AdminApiError) else str(e)) or "Failed to load detail"
            print(f"[DetailView] 加载 {self.resource.key}/{self.id_path} 失败: {self.error}")
            return None
        finally:
            self.loading = False

        if self.resolver is not None:
            await self.resolver.resolve(relation_fields_for(self.resource.key, list(self.row.keys())))
        return self.row

    def display_fields(self) -> List[DisplayValue]:
        """按只读渲染规则展示记录的全部字段（凭据类字段始终隐藏）"""
        if not self.row:
            return []
        values = []
        for field, value in self.row.items():
            if field in DISPLAY_DENYLIST:
                continue
            label = self.resolver.label_for(field, value) if self.resolver else None
            values.append(display_for(self.resource, field, value, label))
        return values

    def begin_edit(self) -> None:
        """进入编辑状态，用当前记录建立草稿"""
        if self.row is None:
            raise NoRowSelectedError("No row selected")
        self.editor.open(EditorMode.EDIT, self.row)
        self.editing = True

    def cancel_edit(self) -> None:
        self.editor.close()
        self.editing = False

    async def save(self) -> Optional[SubmitResult]:
        """
        保存编辑并重新加载记录

        Returns:
            SubmitResult；写入失败返回 None（编辑状态保持）
        """
        result = await self.editor.submit()
        if result is None:
            self.error = self.editor.error
            return None

        self.editing = False
        self.error = self.editor.error
        if self.id_path:
            try:
                self.row = await self.client.get(self.resource.path, self.id_path)
            except (AdminApiError, httpx.HTTPError) as e:
                print(f"[DetailView] 保存后重新加载失败: {e}")
        return result

    async def delete(self) -> bool:
        """
        删除当前记录

        Returns:
            是否删除成功
        """
        if self.row is None:
            raise NoRowSelectedError("No row selected")
        try:
            await self.client.remove(self.resource.path, self.resource.primary_keys, self.row)
        except (AdminApiError, httpx.HTTPError) as e:
            self.error = (e.message if isinstance(e, AdminApiError) else str(e)) or "Delete failed"
            print(f"[DetailView] 删除 {self.resource.key}/{self.id_path} 失败: {self.error}")
            return False

        print(f"[DetailView] 已删除 {self.resource.key}/{self.id_path}")
        self.deleted = True
        self.row = None
        self.editing = False
        return True
