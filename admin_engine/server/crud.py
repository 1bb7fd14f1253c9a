"""
通用 CRUD 路由
为每个数据表生成 list / get / create / update / delete 五个接口，
响应统一使用 {success, data, message, meta} 信封
"""

import re
from typing import Any, Callable, Dict, List, Optional, Tuple, Type
from urllib.parse import unquote

from fastapi import APIRouter, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, ValidationError
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, func, select

from .tables import Category, Company, Job, JobCategory, JobSkill, Skill

DEFAULT_PAGE_SIZE = 20
# 不小于客户端多对多同步和概览统计的单页行数（200）
MAX_PAGE_SIZE = 500

# 由服务端维护，忽略请求体中的同名字段
READONLY_COLUMNS = frozenset({"id", "created_at", "updated_at"})

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")
_UNIQUE_COLUMNS = re.compile(r"UNIQUE constraint failed: (.+)$")


def to_snake(name: str) -> str:
    """camelCase -> snake_case"""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def to_camel(name: str) -> str:
    """snake_case -> camelCase"""
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)


class ServerResource(BaseModel):
    """
    一个可通过 REST 访问的数据表

    Attributes:
        path: 路由前缀（不含 "/"）
        table: SQLModel 表
        filter_fields: 除 *Id 外允许作为查询条件的 camelCase 字段
        order_by: 列表排序列（snake_case）
        descending: 是否倒序
        hidden_fields: 不出现在响应中的列
        include: 为单条记录附加关联数据的函数
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: str
    table: Type[SQLModel]
    filter_fields: Tuple[str, ...] = ()
    order_by: Optional[str] = "created_at"
    descending: bool = True
    hidden_fields: Tuple[str, ...] = ()
    include: Optional[Callable[[Session, Dict[str, Any], Any], Dict[str, Any]]] = None

    @property
    def columns(self) -> Dict[str, Any]:
        return {column.name: column for column in self.table.__table__.columns}

    @property
    def primary_key_columns(self) -> List[str]:
        return [column.name for column in self.table.__table__.primary_key.columns]


def serialize_record(record: Any, hidden: Tuple[str, ...] = ()) -> Optional[Dict[str, Any]]:
    """把表记录转成 camelCase 字典"""
    if record is None:
        return None
    return {to_camel(k): v for k, v in record.model_dump().items() if k not in hidden}


def serialize(resource: ServerResource, session: Session, record: Any) -> Dict[str, Any]:
    data = serialize_record(record, resource.hidden_fields)
    if resource.include is not None:
        data = resource.include(session, data, record)
    return data


def include_job_relations(session: Session, data: Dict[str, Any], job: Job) -> Dict[str, Any]:
    """职位附带公司、技能和分类（关联行中嵌套被引用的记录）"""
    data["company"] = serialize_record(session.get(Company, job.company_id))

    skill_links = session.exec(select(JobSkill).where(JobSkill.job_id == job.id)).all()
    data["skills"] = [
        {**serialize_record(link), "skill": serialize_record(session.get(Skill, link.skill_id))}
        for link in skill_links
    ]

    category_links = session.exec(select(JobCategory).where(JobCategory.job_id == job.id)).all()
    data["categories"] = [
        {**serialize_record(link), "category": serialize_record(session.get(Category, link.category_id))}
        for link in category_links
    ]
    return data


# ==================== 响应信封 ====================

def ok(data: Any = None, status_code: int = 200, **extra: Any) -> JSONResponse:
    content = {"success": True, "data": data, **extra}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def fail(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def integrity_message(error: IntegrityError) -> str:
    """
    把数据库完整性错误转成对外消息

    唯一约束冲突统一以 "Unique constraint failed" 开头，客户端据此识别"记录已存在"
    """
    text = str(error.orig)
    match = _UNIQUE_COLUMNS.search(text)
    if match:
        fields = [to_camel(part.strip().split(".")[-1]) for part in match.group(1).split(",")]
        return f"Unique constraint failed on the fields: ({', '.join(fields)})"
    return f"Integrity error: {text}"


def validation_message(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(to_camel(str(loc)) for loc in item.get("loc", ()))
        parts.append(f"{field}: {item.get('msg')}" if field else str(item.get("msg")))
    return "; ".join(parts) or "Invalid payload"


# ==================== 请求解析 ====================

def pick_payload(resource: ServerResource, body: Dict[str, Any], exclude: frozenset) -> Dict[str, Any]:
    """
    从请求体中挑出可写列

    未知字段忽略；非空列收到 null 时跳过该字段
    """
    columns = resource.columns
    data = {}
    for key, value in body.items():
        name = to_snake(key)
        if name not in columns or name in exclude:
            continue
        if value is None and not columns[name].nullable:
            continue
        data[name] = value
    return data


def parse_identity(resource: ServerResource, id_path: str) -> Optional[Dict[str, str]]:
    """把 "a/b" 形式的路径按主键列顺序解析为 {列: 值}，段数不符时返回 None"""
    keys = resource.primary_key_columns
    parts = [unquote(part) for part in id_path.strip("/").split("/")] if id_path.strip("/") else []
    if len(parts) != len(keys) or any(p == "" for p in parts):
        return None
    return dict(zip(keys, parts))


def coerce_query_value(column: Any, raw: str) -> Any:
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw
    if python_type is bool:
        return raw.lower() in ("true", "1")
    if python_type in (int, float):
        try:
            return python_type(raw)
        except ValueError:
            return raw
    return raw


async def read_json_body(request: Request) -> Optional[Dict[str, Any]]:
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


# ==================== 路由工厂 ====================

def create_crud_router(resource: ServerResource, engine) -> APIRouter:
    """
    为资源生成 CRUD 路由

    每个接口在自己的 Session 中完成读写；SQLite 上的操作都在事件循环线程中串行执行

    Args:
        resource: 资源配置
        engine: 数据库引擎

    Returns:
        挂载在 /{path} 下的 APIRouter
    """
    router = APIRouter(prefix=f"/{resource.path}")
    columns = resource.columns
    key_columns = frozenset(resource.primary_key_columns)

    def build_filters(request: Request) -> List[Any]:
        conditions = []
        for key, raw in request.query_params.items():
            if key in ("page", "pageSize"):
                continue
            name = to_snake(key)
            if name not in columns:
                continue
            if key.endswith("Id") or key in resource.filter_fields:
                conditions.append(columns[name] == coerce_query_value(columns[name], raw))
        return conditions

    @router.get("")
    async def list_records(
        request: Request,
        page: int = Query(1),
        page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize")
    ):
        page = max(page, 1)
        take = min(max(page_size, 1), MAX_PAGE_SIZE)
        conditions = build_filters(request)

        statement = select(resource.table)
        count_statement = select(func.count()).select_from(resource.table)
        for condition in conditions:
            statement = statement.where(condition)
            count_statement = count_statement.where(condition)

        if resource.order_by and resource.order_by in columns:
            order_column = columns[resource.order_by]
            statement = statement.order_by(order_column.desc() if resource.descending else order_column.asc())
        else:
            statement = statement.order_by(*(columns[k] for k in resource.primary_key_columns))

        with Session(engine) as session:
            records = session.exec(statement.offset((page - 1) * take).limit(take)).all()
            total = session.exec(count_statement).one()
            data = [serialize(resource, session, record) for record in records]

        return ok(data, meta={"page": page, "pageSize": take, "total": total})

    @router.post("", status_code=201)
    async def create_record(request: Request):
        body = await read_json_body(request)
        if body is None:
            return fail("Invalid JSON body")
        data = pick_payload(resource, body, READONLY_COLUMNS)

        with Session(engine) as session:
            try:
                record = resource.table.model_validate(data)
            except ValidationError as e:
                return fail(validation_message(e))
            session.add(record)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                print(f"[crud:{resource.path}] 新建失败: {e.orig}")
                return fail(integrity_message(e))
            session.refresh(record)
            return ok(serialize(resource, session, record), status_code=201)

    @router.get("/{id_path:path}")
    async def get_record(id_path: str):
        identity = parse_identity(resource, id_path)
        with Session(engine) as session:
            record = session.get(resource.table, identity) if identity else None
            if record is None:
                return fail("Record not found", 404)
            return ok(serialize(resource, session, record))

    @router.put("/{id_path:path}")
    async def update_record(id_path: str, request: Request):
        identity = parse_identity(resource, id_path)
        body = await read_json_body(request)
        if body is None:
            return fail("Invalid JSON body")
        data = pick_payload(resource, body, READONLY_COLUMNS | key_columns)

        with Session(engine) as session:
            record = session.get(resource.table, identity) if identity else None
            if record is None:
                return fail("Record not found", 404)

            # 合并后整体校验，只把请求中出现的字段写回
            try:
                validated = resource.table.model_validate({**record.model_dump(), **data})
            except ValidationError as e:
                return fail(validation_message(e))
            for name in data:
                setattr(record, name, getattr(validated, name))

            session.add(record)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                print(f"[crud:{resource.path}] 更新失败: {e.orig}")
                return fail(integrity_message(e))
            session.refresh(record)
            return ok(serialize(resource, session, record))

    @router.delete("/{id_path:path}")
    async def delete_record(id_path: str):
        identity = parse_identity(resource, id_path)
        with Session(engine) as session:
            record = session.get(resource.table, identity) if identity else None
            if record is None:
                return fail("Record not found", 404)
            data = serialize(resource, session, record)
            session.delete(record)
            session.commit()
            return ok(data)

    return router
