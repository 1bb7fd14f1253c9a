"""
数据库初始化单元测试
验证参考后端表结构和演示数据的生成
"""

from sqlmodel import Session, create_engine, select

from admin_engine.db.init_db import (
    DEFAULT_CATEGORIES,
    DEFAULT_SKILLS,
    create_default_company,
    create_default_data,
    create_named_rows,
    create_tables,
    get_database_url,
)
from admin_engine.server.tables import Category, Company, Job, JobCategory, JobSkill, Skill, User


def make_engine():
    engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})
    create_tables(engine)
    return engine


class TestDatabaseInit:
    """测试数据库初始化"""

    def test_create_tables(self):
        """测试创建所有表"""
        engine = make_engine()

        with Session(engine) as session:
            assert session.exec(select(Job)).all() == []
            assert session.exec(select(JobSkill)).all() == []

    def test_create_named_rows(self):
        """测试字典表按名称创建，重复调用不会重复插入"""
        engine = make_engine()

        with Session(engine) as session:
            first = create_named_rows(session, Skill, ["Go", "Rust"])
            second = create_named_rows(session, Skill, ["Rust", "Go", "Zig"])

            assert [s.name for s in second] == ["Rust", "Go", "Zig"]
            assert second[0].id == first[1].id
            assert len(session.exec(select(Skill)).all()) == 3

    def test_create_default_company(self):
        engine = make_engine()

        with Session(engine) as session:
            company = create_default_company(session)
            assert company.slug == "acme"
            assert company.is_verified is True
            assert len(company.id) == 32

            # 再次调用应该返回已存在的公司
            assert create_default_company(session).id == company.id

    def test_create_default_data(self):
        """测试完整演示数据"""
        engine = make_engine()

        with Session(engine) as session:
            create_default_data(session)

            assert len(session.exec(select(Skill)).all()) == len(DEFAULT_SKILLS)
            job = session.exec(select(Job)).one()
            assert job.status == "PUBLISHED"
            assert job.currency == "USD"
            assert job.quantity == 1

            recruiter = session.exec(select(User)).one()
            assert recruiter.role == "RECRUITER"
            assert job.recruiter_id == recruiter.id

            links = session.exec(select(JobSkill).where(JobSkill.job_id == job.id)).all()
            assert len(links) == 2
            categories = session.exec(select(JobCategory).where(JobCategory.job_id == job.id)).all()
            assert len(categories) == 1

    def test_create_default_data_is_idempotent(self):
        """测试重复初始化不产生重复数据"""
        engine = make_engine()

        with Session(engine) as session:
            create_default_data(session)
            create_default_data(session)

            assert len(session.exec(select(Company)).all()) == 1
            assert len(session.exec(select(Job)).all()) == 1
            assert len(session.exec(select(JobSkill)).all()) == 2
            assert len(session.exec(select(Category)).all()) == len(DEFAULT_CATEGORIES)


class TestDatabaseUrl:
    """测试数据库地址解析"""

    def test_default_path(self, monkeypatch):
        monkeypatch.delenv("ADMIN_DATABASE_PATH", raising=False)
        url = get_database_url()
        assert url.startswith("sqlite:///")
        assert url.endswith("admin.db")

    def test_memory(self, monkeypatch):
        monkeypatch.setenv("ADMIN_DATABASE_PATH", ":memory:")
        assert get_database_url() == "sqlite://"

    def test_absolute_path(self, monkeypatch, tmp_path):
        path = tmp_path / "data.db"
        monkeypatch.setenv("ADMIN_DATABASE_PATH", str(path))
        assert get_database_url() == f"sqlite:///{path}"
