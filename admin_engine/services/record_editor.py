"""
记录编辑器（新建 / 编辑）

状态机：
- open(mode, row) 按可编辑字段建立表单草稿；jobs 额外建立技能/分类的已选集合
- set_field / upload 逐字段修改草稿
- submit() 先写入标量字段，成功后再执行多对多同步
- 提交失败时编辑器保持打开，草稿不被清空，错误消息保存在 error
"""

from typing import Any, Dict, Iterable, List, Optional, Set

import httpx

from admin_engine.client.admin_client import AdminClient, build_id_path
from admin_engine.core.payload import normalize_payload
from admin_engine.core.widgets import describe_widget, is_image_field, widget_for
from admin_engine.errors import AdminApiError, NoRowSelectedError, UnknownFieldError
from admin_engine.models.form import EditorMode, FieldWidget, SubmitResult, WidgetKind
from admin_engine.models.resource import AdminRow, ManyToManySpec, ResourceDescriptor
from admin_engine.models.sync import SyncReport
from admin_engine.registry.relations import many_to_many_for
from admin_engine.registry.resources import editable_fields
from admin_engine.services.join_sync import JoinSynchronizer, selected_ids_from_row
from admin_engine.services.relation_resolver import RelationResolver


def _error_message(error: Exception, fallback: str) -> str:
    if isinstance(error, AdminApiError):
        return error.message or fallback
    return str(error) or fallback


class RecordEditor:
    """
    记录编辑器

    同一时刻只服务一个打开的表单；切换资源时由会话整体丢弃

    使用示例：
        editor = RecordEditor(client, get_resource("jobs"), resolver, synchronizer)
        editor.open(EditorMode.EDIT, row)
        editor.set_field("location", "Hanoi")
        editor.toggle_selection("skills", "skill-3")
        result = await editor.submit()
    """

    def __init__(
        self,
        client: AdminClient,
        resource: ResourceDescriptor,
        resolver: Optional[RelationResolver] = None,
        synchronizer: Optional[JoinSynchronizer] = None
    ):
        """
        初始化编辑器

        Args:
            client: REST 客户端
            resource: 当前资源
            resolver: 关系解析器（提供关系下拉选项）
            synchronizer: 多对多同步器，缺省时用同一个客户端创建
        """
        self.client = client
        self.resource = resource
        self.resolver = resolver
        self.synchronizer = synchronizer or JoinSynchronizer(client)

        self.fields: List[str] = editable_fields(resource)
        self.relations: Dict[str, ManyToManySpec] = {s.name: s for s in many_to_many_for(resource.key)}

        self.mode: Optional[EditorMode] = None
        self.is_open = False
        self.original_row: Optional[AdminRow] = None
        self.draft: Dict[str, Any] = {}
        self.selections: Dict[str, Set[str]] = {}
        self.error: Optional[str] = None
        self.field_errors: Dict[str, str] = {}
        self.uploading_field: Optional[str] = None
        self.submitting = False

    # ==================== 打开 / 关闭 ====================

    def open(self, mode: EditorMode, row: Optional[AdminRow] = None) -> Dict[str, Any]:
        """
        打开编辑器并建立草稿

        - edit：从 row 中取可编辑字段，缺失或 None 的值置为空字符串
        - create：所有可编辑字段置为空字符串
        - 有多对多关系的资源（jobs）同时从 row 的嵌入数组建立已选集合

        Args:
            mode: 编辑器模式
            row: 编辑的原始记录

        Returns:
            新建立的草稿
        """
        mode = EditorMode(mode)
        self.mode = mode
        self.is_open = True
        self.error = None
        self.field_errors = {}

        if mode == EditorMode.EDIT:
            self.original_row = dict(row) if row is not None else None
            source = row or {}
            self.draft = {f: ("" if source.get(f) is None else source.get(f)) for f in self.fields}
        else:
            self.original_row = None
            self.draft = {f: "" for f in self.fields}

        self.selections = {
            name: set(selected_ids_from_row(self.original_row, spec)) for name, spec in self.relations.items()
        }
        print(f"[RecordEditor] 打开 {self.resource.key} ({mode.value})，字段 {len(self.fields)} 个")
        return self.draft

    def close(self) -> None:
        """关闭编辑器并丢弃草稿"""
        self.is_open = False
        self.mode = None
        self.original_row = None
        self.draft = {}
        self.selections = {}
        self.error = None
        self.field_errors = {}

    # ==================== 字段修改 ====================

    def set_field(self, field: str, value: Any) -> None:
        """
        修改草稿中的字段

        Raises:
            UnknownFieldError: 字段不是可编辑字段
        """
        if field not in self.draft:
            raise UnknownFieldError(field)
        self.draft[field] = value

    def widget_for(self, field: str) -> WidgetKind:
        """按固定规则表推断字段控件"""
        options = self.resolver.options_for(field) if self.resolver else None
        return widget_for(
            field,
            self.draft.get(field),
            self.resource.field_enums,
            options,
            self.resource.numeric_fields
        )

    def widgets(self) -> List[FieldWidget]:
        """全部可编辑字段的控件描述"""
        result = []
        for field in self.fields:
            options = self.resolver.options_for(field) if self.resolver else None
            result.append(describe_widget(self.resource, field, self.draft.get(field), options))
        return result

    def toggle_selection(self, relation: str, value: str) -> Set[str]:
        """
        切换多对多关系中的一个对端 ID

        Args:
            relation: 关系名（如 "skills"）
            value: 对端 ID

        Returns:
            切换后的已选集合
        """
        if relation not in self.relations:
            raise UnknownFieldError(relation)
        selected = self.selections.setdefault(relation, set())
        value = str(value)
        if value in selected:
            selected.remove(value)
        else:
            selected.add(value)
        return selected

    def set_selection(self, relation: str, values: Iterable[str]) -> Set[str]:
        """整体替换多对多关系的已选集合"""
        if relation not in self.relations:
            raise UnknownFieldError(relation)
        self.selections[relation] = {str(v) for v in values}
        return self.selections[relation]

    async def upload(self, field: str, filename: str, content: bytes, content_type: str = "application/octet-stream") -> Optional[str]:
        """
        为图片字段上传文件，成功后用返回的 URL 替换字段值

        失败时字段保持原值，错误消息写入 field_errors[field]

        Returns:
            上传后的 URL，失败返回 None
        """
        if field not in self.draft:
            raise UnknownFieldError(field)
        if not is_image_field(field):
            raise ValueError(f"字段 {field} 不是图片字段")

        self.uploading_field = field
        self.field_errors.pop(field, None)
        try:
            url = await self.client.upload(filename, content, content_type)
        except (AdminApiError, httpx.HTTPError) as e:
            self.field_errors[field] = _error_message(e, "Upload failed")
            print(f"[RecordEditor] 上传 {field} 失败: {self.field_errors[field]}")
            return None
        finally:
            self.uploading_field = None

        self.draft[field] = url
        return url

    # ==================== 提交 ====================

    def build_payload(self) -> Dict[str, Any]:
        """把草稿转换成请求体（只含可编辑字段，数值已归一化）"""
        return normalize_payload(self.resource, self.draft, self.fields)

    async def submit(self) -> Optional[SubmitResult]:
        """
        提交草稿

        流程：
        1. edit 模式先校验原始记录与主键（失败直接抛出，不发任何请求）
        2. POST（create）或 PUT（edit）标量字段
        3. 成功后对每个多对多关系执行同步
        4. 关闭编辑器并返回结果；同步部分失败时 error 中保存 "k/n operations succeeded"

        Returns:
            SubmitResult；标量写入失败时返回 None，编辑器保持打开且草稿不变

        Raises:
            NoRowSelectedError: edit 模式没有原始记录或原始记录缺少主键
        """
        if not self.is_open or self.mode is None:
            raise NoRowSelectedError("Editor is not open")

        payload = self.build_payload()
        if self.mode == EditorMode.EDIT:
            if self.original_row is None:
                raise NoRowSelectedError("No row selected")
            # 提前拼接主键路径，缺主键时在发出请求前抛出
            build_id_path(self.resource.primary_keys, self.original_row)

        self.submitting = True
        self.error = None
        try:
            if self.mode == EditorMode.CREATE:
                saved = await self.client.create(self.resource.path, payload)
                owner_id = (saved or {}).get("id")
            else:
                saved = await self.client.update(
                    self.resource.path, self.resource.primary_keys, self.original_row, payload
                )
                owner_id = self.original_row.get("id") or (saved or {}).get("id")
        except (AdminApiError, httpx.HTTPError) as e:
            self.error = _error_message(e, "Request failed")
            print(f"[RecordEditor] 提交 {self.resource.key} 失败: {self.error}")
            return None
        finally:
            self.submitting = False

        result = SubmitResult(mode=self.mode, row=saved, owner_id=str(owner_id) if owner_id else None)

        # 多对多同步总是在所属记录写入之后进行
        if self.relations and owner_id:
            result.sync_reports = await self._sync_relations(str(owner_id))

        sync_summary = result.summary()
        self.close()
        if sync_summary:
            self.error = sync_summary
            print(f"[RecordEditor] 多对多同步未完全成功: {sync_summary}")
        return result

    async def _sync_relations(self, owner_id: str) -> Dict[str, SyncReport]:
        reports: Dict[str, SyncReport] = {}
        for name, spec in self.relations.items():
            desired = sorted(self.selections.get(name, set()))
            try:
                reports[name] = await self.synchronizer.sync_spec(spec, owner_id, desired)
            except (AdminApiError, httpx.HTTPError) as e:
                # 现有行都拿不到时，按全部操作失败计
                reports[name] = SyncReport(
                    join_path=spec.join_path,
                    owner_id=owner_id,
                    failures=[f"list {spec.join_path}: {_error_message(e, 'List failed')}"]
                )
        return reports
