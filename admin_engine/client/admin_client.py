"""
后台 REST 客户端
封装对通用 CRUD 接口的异步访问，统一处理鉴权头和响应信封
"""

from typing import Any, Callable, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from admin_engine.config import AdminSettings, get_settings
from admin_engine.errors import AdminApiError, MissingPrimaryKeyError
from admin_engine.models.envelope import ApiEnvelope, ListResult
from admin_engine.models.resource import AdminRow


def build_query(params: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """
    构造查询参数，丢弃值为 None 的键

    Args:
        params: 原始参数字典

    Returns:
        全部值已转为字符串的参数字典
    """
    if not params:
        return {}
    query = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        else:
            query[key] = str(value)
    return query


def message_text(value: Any) -> Optional[str]:
    """
    把服务端的 message 规整为字符串

    列表（如逐字段的校验错误）用 "; " 连接，空值返回 None
    """
    if value is None or value == "" or value == []:
        return None
    if isinstance(value, (list, tuple)):
        return "; ".join(str(item) for item in value)
    return str(value)


def build_id_path(primary_keys: Sequence[str], row: AdminRow) -> str:
    """
    按主键顺序把记录的主键值拼成路径片段，例如 "job1/skill2"

    Args:
        primary_keys: 资源的主键字段
        row: 记录

    Returns:
        URL 编码后以 "/" 连接的路径

    Raises:
        MissingPrimaryKeyError: 记录缺少某个主键值（在发出任何请求之前抛出）
    """
    parts = []
    for key in primary_keys:
        value = row.get(key) if row else None
        if value is None or value == "":
            raise MissingPrimaryKeyError(key)
        parts.append(quote(str(value), safe=""))
    return "/".join(parts)


class AdminClient:
    """
    后台 REST 客户端

    每次请求创建一个短生命周期的 httpx.AsyncClient，
    因此同一个实例可以在不同的事件循环中使用

    使用示例：
        client = AdminClient(base_url="http://localhost:9999")
        result = await client.list("jobs", page=1, page_size=10)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        settings: Optional[AdminSettings] = None
    ):
        """
        初始化客户端

        Args:
            base_url: 后端根地址，缺省时读取配置
            token_provider: 返回 Bearer 令牌的函数，缺省时从环境变量读取
            timeout: 请求超时（秒），缺省时读取配置
            transport: 自定义传输层（测试时注入 MockTransport / ASGITransport）
            settings: 运行参数，缺省时按需加载全局配置
        """
        if settings is None and (base_url is None or timeout is None):
            settings = get_settings()

        self.base_url = base_url or settings.api_base_url
        self.timeout = timeout if timeout is not None else settings.request_timeout
        if token_provider is None and settings is not None:
            token_provider = settings.get_token
        self.token_provider = token_provider
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        token = self.token_provider() if self.token_provider else None
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def _request(
        self,
        method: str,
        url: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None
    ) -> ApiEnvelope:
        """
        发送请求并解析响应信封

        Args:
            method: HTTP 方法
            url: 相对路径
            operation: 操作名，用于拼接错误信息（如 "List"）
            params: 查询参数
            json: JSON 请求体
            files: multipart 文件

        Returns:
            success=true 的 ApiEnvelope

        Raises:
            AdminApiError: 网络错误、响应无法解析或 success=false
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport
            ) as client:
                response = await client.request(
                    method,
                    url,
                    params=build_query(params),
                    json=json,
                    files=files,
                    headers=self._headers()
                )
        except httpx.HTTPError as e:
            print(f"[AdminClient] {operation} {url} 网络错误: {e}")
            raise AdminApiError(f"{operation} failed: {e}") from e

        status = response.status_code
        try:
            payload = response.json()
        except ValueError:
            text = response.text.strip()
            raise AdminApiError(text or f"{operation} failed {status}", status)

        # 信封中的 success 字段才是权威的成功信号
        if not isinstance(payload, dict) or "success" not in payload:
            detail = payload.get("message") or payload.get("detail") if isinstance(payload, dict) else None
            raise AdminApiError(str(detail or f"{operation} failed {status}"), status)

        payload = dict(payload)
        payload["message"] = message_text(payload.get("message"))
        try:
            envelope = ApiEnvelope.model_validate(payload)
        except ValidationError as e:
            print(f"[AdminClient] {operation} {url} 响应信封格式错误: {e}")
            raise AdminApiError(f"{operation} failed: malformed response", status) from e

        if not envelope.success:
            message = envelope.message or message_text(payload.get("error")) or f"{operation} failed {status}"
            raise AdminApiError(message, status)

        return envelope

    async def list(
        self,
        resource_path: str,
        page: int = 1,
        page_size: int = 10,
        params: Optional[Dict[str, Any]] = None
    ) -> ListResult:
        """
        获取一页记录

        Args:
            resource_path: 资源路径
            page: 页码（从 1 开始）
            page_size: 每页行数
            params: 额外查询参数

        Returns:
            ListResult（rows + meta）
        """
        query = {"page": page, "pageSize": page_size}
        query.update(params or {})
        envelope = await self._request("GET", f"/{resource_path}", "List", params=query)
        rows: List[AdminRow] = envelope.data if isinstance(envelope.data, list) else []
        return ListResult(rows=rows, meta=envelope.meta)

    async def get(self, resource_path: str, id_path: str) -> AdminRow:
        """
        按主键路径获取单条记录

        Args:
            resource_path: 资源路径
            id_path: 已编码的主键路径（见 build_id_path）

        Returns:
            记录字典
        """
        envelope = await self._request("GET", f"/{resource_path}/{id_path}", "Get")
        return envelope.data or {}

    async def create(self, resource_path: str, data: Dict[str, Any]) -> AdminRow:
        """
        新建记录

        Returns:
            服务端返回的新记录
        """
        envelope = await self._request("POST", f"/{resource_path}", "Create", json=data)
        return envelope.data or {}

    async def update(
        self,
        resource_path: str,
        primary_keys: Sequence[str],
        row: AdminRow,
        data: Dict[str, Any]
    ) -> Optional[AdminRow]:
        """
        更新记录，主键值取自原始记录

        Raises:
            MissingPrimaryKeyError: 原始记录缺少主键值（不会发出请求）
        """
        id_path = build_id_path(primary_keys, row)
        envelope = await self._request("PUT", f"/{resource_path}/{id_path}", "Update", json=data)
        return envelope.data

    async def remove(self, resource_path: str, primary_keys: Sequence[str], row: AdminRow) -> Optional[AdminRow]:
        """
        删除记录

        Raises:
            MissingPrimaryKeyError: 记录缺少主键值（不会发出请求）
        """
        id_path = build_id_path(primary_keys, row)
        envelope = await self._request("DELETE", f"/{resource_path}/{id_path}", "Delete")
        return envelope.data

    async def upload(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        """
        上传文件

        Args:
            filename: 文件名
            content: 文件内容
            content_type: MIME 类型

        Returns:
            文件的访问 URL

        Raises:
            AdminApiError: 上传失败或响应中没有 URL
        """
        files = {"file": (filename, content, content_type)}
        envelope = await self._request("POST", "/upload", "Upload", files=files)
        url = envelope.url
        if not url and isinstance(envelope.data, dict):
            url = envelope.data.get("url")
        if not url:
            raise AdminApiError(envelope.message or "Upload failed")
        return str(url)
