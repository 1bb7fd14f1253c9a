"""
参考后端应用
把各数据表的 CRUD 路由和上传路由挂到一个 FastAPI 应用上

启动：
    uvicorn admin_engine.server.main:create_app --factory --port 9999
"""

import os
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from admin_engine.db.init_db import create_tables, get_engine
from .crud import ServerResource, create_crud_router, include_job_relations
from .tables import Application, Category, Company, Interview, Job, JobCategory, JobSkill, Skill, User
from .upload import create_upload_router

DEFAULT_UPLOAD_DIR = Path(__file__).parent.parent.parent / "public" / "uploads"


SERVER_RESOURCES: List[ServerResource] = [
    ServerResource(path="users", table=User, filter_fields=("role", "isVerified", "isActive"),
                   hidden_fields=("password_hash",)),
    ServerResource(path="companies", table=Company, filter_fields=("isVerified",)),
    ServerResource(path="skills", table=Skill, order_by="name", descending=False),
    ServerResource(path="categories", table=Category, order_by="name", descending=False),
    ServerResource(path="jobs", table=Job, filter_fields=("status", "type"), include=include_job_relations),
    ServerResource(path="job-skills", table=JobSkill, order_by=None),
    ServerResource(path="job-categories", table=JobCategory, order_by=None),
    ServerResource(path="applications", table=Application, filter_fields=("status",), order_by="applied_at"),
    ServerResource(path="interviews", table=Interview, filter_fields=("status", "type")),
]


def create_app(engine=None, upload_dir: Optional[Path] = None) -> FastAPI:
    """
    创建应用

    Args:
        engine: 数据库引擎，缺省时按 ADMIN_DATABASE_PATH 创建并建表
        upload_dir: 上传目录，缺省为 ADMIN_UPLOAD_DIR 或项目下的 public/uploads

    Returns:
        FastAPI 应用
    """
    if engine is None:
        engine = get_engine()
        create_tables(engine)
    if upload_dir is None:
        upload_dir = Path(os.environ.get("ADMIN_UPLOAD_DIR", DEFAULT_UPLOAD_DIR))

    app = FastAPI(title="Admin Reference Backend")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for resource in SERVER_RESOURCES:
        app.include_router(create_crud_router(resource, engine))
    app.include_router(create_upload_router(Path(upload_dir)))

    @app.get("/health")
    async def health():
        return {"success": True, "status": "ok"}

    return app

