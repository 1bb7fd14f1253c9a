"""
数据库初始化脚本
负责创建参考后端的表结构和演示数据
"""

import os
from pathlib import Path
from typing import List

from sqlmodel import SQLModel, Session, create_engine, select

from admin_engine.server.tables import Category, Company, Job, JobCategory, JobSkill, Skill, User

DEFAULT_SKILLS = ["Python", "TypeScript", "React", "PostgreSQL", "Docker"]
DEFAULT_CATEGORIES = ["Engineering", "Design", "Marketing"]


def get_database_url() -> str:
    """
    获取数据库连接 URL
    优先使用环境变量 ADMIN_DATABASE_PATH，否则使用项目根目录下的 SQLite 文件
    """
    db_path = os.environ.get("ADMIN_DATABASE_PATH", "admin.db")
    if db_path == ":memory:":
        return "sqlite://"
    # 相对路径从项目根目录解析
    if not os.path.isabs(db_path):
        project_root = Path(__file__).parent.parent.parent
        db_path = str(project_root / db_path)
    return f"sqlite:///{db_path}"


def get_engine():
    """
    创建并返回数据库引擎
    """
    engine = create_engine(
        get_database_url(),
        echo=False,  # 设置为 True 可查看 SQL 语句
        connect_args={"check_same_thread": False}  # SQLite 特有配置
    )
    return engine


def create_tables(engine) -> None:
    """
    创建所有数据库表
    """
    SQLModel.metadata.create_all(engine)
    print(f"Database tables created successfully at {engine.url}")


def create_named_rows(session: Session, model, names: List[str]) -> list:
    """
    按名称创建字典表记录（技能、分类），已存在的跳过

    Returns:
        按 names 顺序排列的记录
    """
    rows = []
    created_count = 0
    for name in names:
        row = session.exec(select(model).where(model.name == name)).first()
        if row is None:
            row = model(name=name)
            session.add(row)
            created_count += 1
        rows.append(row)
    if created_count > 0:
        session.commit()
        for row in rows:
            session.refresh(row)
    print(f"Created {created_count} default {model.__tablename__}")
    return rows


def create_default_company(session: Session) -> Company:
    """
    创建演示公司，已存在则返回现有记录
    """
    result = session.exec(select(Company).where(Company.slug == "acme")).first()
    if result:
        print(f"Default company already exists (ID: {result.id})")
        return result

    company = Company(
        name="Acme",
        slug="acme",
        industry="Software",
        company_size="51-200",
        city="Ho Chi Minh City",
        country="Vietnam",
        is_verified=True
    )
    session.add(company)
    session.commit()
    session.refresh(company)
    print(f"Created default company (ID: {company.id})")
    return company


def create_default_recruiter(session: Session, company: Company) -> User:
    """
    创建演示招聘者账号，已存在则返回现有记录
    """
    email = f"recruiter@{company.slug}.example"
    result = session.exec(select(User).where(User.email == email)).first()
    if result:
        print(f"Default recruiter already exists (ID: {result.id})")
        return result

    recruiter = User(email=email, first_name="Rita", last_name="Recruiter", role="RECRUITER", is_verified=True)
    session.add(recruiter)
    session.commit()
    session.refresh(recruiter)
    print(f"Created default recruiter (ID: {recruiter.id})")
    return recruiter


def create_default_job(
    session: Session,
    company: Company,
    recruiter: User,
    skills: List[Skill],
    categories: List[Category]
) -> Job:
    """
    创建一个已发布的演示职位，并关联前两个技能和第一个分类
    """
    result = session.exec(select(Job).where(Job.company_id == company.id)).first()
    if result:
        print(f"Default job already exists (ID: {result.id})")
        return result

    job = Job(
        title="Backend Engineer",
        company_id=company.id,
        recruiter_id=recruiter.id,
        description="Build and operate the hiring platform APIs.",
        location="Ho Chi Minh City",
        salary_min=1500,
        salary_max=2500,
        currency="USD",
        status="PUBLISHED"
    )
    session.add(job)
    session.commit()
    session.refresh(job)

    for skill in skills[:2]:
        session.add(JobSkill(job_id=job.id, skill_id=skill.id, is_required=True))
    for category in categories[:1]:
        session.add(JobCategory(job_id=job.id, category_id=category.id))
    session.commit()
    print(f"Created default job (ID: {job.id})")
    return job


def create_default_data(session: Session) -> None:
    """
    创建所有演示数据
    包括技能、分类、公司、招聘者和一个职位
    """
    print("\n=== Creating default data ===")

    skills = create_named_rows(session, Skill, DEFAULT_SKILLS)
    categories = create_named_rows(session, Category, DEFAULT_CATEGORIES)
    company = create_default_company(session)
    recruiter = create_default_recruiter(session, company)
    create_default_job(session, company, recruiter, skills, categories)

    print("=== Default data creation completed ===\n")


def init_db() -> None:
    """
    完整的数据库初始化流程
    1. 创建数据库引擎
    2. 创建所有表结构
    3. 创建演示数据
    """
    print("\n=== Initializing database ===")

    # 创建引擎
    engine = get_engine()

    # 创建表结构
    create_tables(engine)

    # 创建演示数据
    with Session(engine) as session:
        create_default_data(session)

    print("=== Database initialization completed ===\n")


if __name__ == "__main__":
    # 直接运行此脚本时，执行数据库初始化
    init_db()
