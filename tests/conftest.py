"""
Pytest 测试配置
提供内存数据库、参考后端应用、记录请求的传输层等测试基础设施
"""

import sys
from pathlib import Path
from typing import Callable, Dict, Generator, List, Tuple

import httpx
import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine, select

# 添加项目根目录到 sys.path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from admin_engine.client.admin_client import AdminClient
from admin_engine.db.init_db import create_default_data, create_tables
from admin_engine.server.main import create_app
from admin_engine.server.tables import Category, Company, Job, Skill, User


class RecordingTransport(httpx.AsyncBaseTransport):
    """
    包装另一个传输层，记录每个请求的方法和路径
    """

    def __init__(self, inner: httpx.AsyncBaseTransport):
        self.inner = inner
        self.requests: List[Tuple[str, str]] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        return await self.inner.handle_async_request(request)

    def writes(self) -> List[Tuple[str, str]]:
        """只返回写请求（POST / PUT / DELETE）"""
        return [r for r in self.requests if r[0] in ("POST", "PUT", "DELETE")]

    def clear(self) -> None:
        self.requests.clear()


# ==================== 数据库 Fixtures ====================

@pytest.fixture(scope="function")
def test_db_engine():
    """
    创建测试用的内存数据库引擎
    每个测试函数都会获得一个全新的数据库；StaticPool 让所有会话共享同一个连接
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )

    # 创建所有表
    create_tables(engine)

    yield engine


@pytest.fixture(scope="function")
def test_db_session(test_db_engine) -> Generator[Session, None, None]:
    """
    创建测试用的数据库会话
    """
    with Session(test_db_engine) as session:
        yield session


@pytest.fixture(scope="function")
def seeded_data(test_db_engine) -> Dict[str, object]:
    """
    写入演示数据并返回关键记录的 ID

    Returns:
        {"skills": {name: id}, "categories": {name: id}, "company_id", "recruiter_id", "job_id"}
    """
    with Session(test_db_engine) as session:
        create_default_data(session)
        skills = {s.name: s.id for s in session.exec(select(Skill)).all()}
        categories = {c.name: c.id for c in session.exec(select(Category)).all()}
        company = session.exec(select(Company)).first()
        recruiter = session.exec(select(User)).first()
        job = session.exec(select(Job)).first()
        return {
            "skills": skills,
            "categories": categories,
            "company_id": company.id,
            "recruiter_id": recruiter.id,
            "job_id": job.id,
        }


# ==================== 后端与客户端 Fixtures ====================

@pytest.fixture(scope="function")
def backend_app(test_db_engine, tmp_path):
    """
    参考后端应用，使用测试数据库和临时上传目录
    """
    return create_app(engine=test_db_engine, upload_dir=tmp_path / "uploads")


@pytest.fixture(scope="function")
def recording_transport(backend_app) -> RecordingTransport:
    """
    指向参考后端的传输层，同时记录所有请求
    """
    return RecordingTransport(httpx.ASGITransport(app=backend_app))


@pytest.fixture(scope="function")
def admin_client(recording_transport) -> AdminClient:
    """
    连接参考后端的客户端（不读取配置文件，不带令牌）
    """
    return AdminClient(
        base_url="http://testserver",
        token_provider=lambda: None,
        timeout=5.0,
        transport=recording_transport
    )


@pytest.fixture(scope="function")
def mock_client() -> Callable[..., AdminClient]:
    """
    创建使用 MockTransport 的客户端
    用于测试失败路径，避免依赖真实后端

    用法：
        client = mock_client(handler)
        client = mock_client(handler, token="secret")
    """
    def factory(handler: Callable[[httpx.Request], httpx.Response], token: str = None) -> AdminClient:
        return AdminClient(
            base_url="http://admin.test",
            token_provider=lambda: token,
            timeout=5.0,
            transport=httpx.MockTransport(handler)
        )

    return factory


# ==================== Pytest 配置 ====================

def pytest_configure(config):
    """
    Pytest 初始化配置
    """
    # 标记测试分类
    config.addinivalue_line(
        "markers", "unit: Unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: Slow running tests"
    )
