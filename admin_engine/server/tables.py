"""
参考后端的数据表

列名使用 snake_case，接口层统一转换为 camelCase
"""

from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from .base import EntityModel, utc_now


class User(EntityModel, table=True):
    """用户表"""
    __tablename__ = "users"

    # 唯一约束：重复邮箱返回 Unique constraint 错误
    email: str = Field(unique=True, index=True, nullable=False)
    password_hash: Optional[str] = Field(default=None)
    first_name: Optional[str] = Field(default=None)
    last_name: Optional[str] = Field(default=None)
    phone: Optional[str] = Field(default=None)
    avatar_url: Optional[str] = Field(default=None)
    role: str = Field(default="CANDIDATE", nullable=False)
    is_verified: bool = Field(default=False, nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    last_login_at: Optional[datetime] = Field(default=None)


class Company(EntityModel, table=True):
    """公司表"""
    __tablename__ = "companies"

    name: str = Field(nullable=False)
    slug: str = Field(unique=True, index=True, nullable=False)
    description: Optional[str] = Field(default=None)
    logo_url: Optional[str] = Field(default=None)
    cover_url: Optional[str] = Field(default=None)
    industry: Optional[str] = Field(default=None)
    company_size: Optional[str] = Field(default=None)
    founded_year: Optional[int] = Field(default=None)
    address: Optional[str] = Field(default=None)
    city: Optional[str] = Field(default=None)
    country: Optional[str] = Field(default=None)
    website: Optional[str] = Field(default=None)
    is_verified: bool = Field(default=False, nullable=False, index=True)


class Skill(EntityModel, table=True):
    """技能字典"""
    __tablename__ = "skills"

    name: str = Field(unique=True, nullable=False)
    icon_url: Optional[str] = Field(default=None)


class Category(EntityModel, table=True):
    """职位分类字典"""
    __tablename__ = "categories"

    name: str = Field(unique=True, nullable=False)
    icon_url: Optional[str] = Field(default=None)


class Job(EntityModel, table=True):
    """职位表"""
    __tablename__ = "jobs"

    title: str = Field(nullable=False)
    company_id: str = Field(foreign_key="companies.id", index=True, nullable=False)
    recruiter_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)
    description: Optional[str] = Field(default=None)
    requirements: Optional[str] = Field(default=None)
    benefits: Optional[str] = Field(default=None)
    location: Optional[str] = Field(default=None)
    is_remote: bool = Field(default=False, nullable=False)
    salary_min: Optional[int] = Field(default=None)
    salary_max: Optional[int] = Field(default=None)
    currency: str = Field(default="VND", nullable=False)
    is_salary_negotiable: bool = Field(default=False, nullable=False)
    experience_level: Optional[str] = Field(default=None)
    quantity: Optional[int] = Field(default=1)
    status: str = Field(default="DRAFT", nullable=False, index=True)
    type: str = Field(default="FULL_TIME", nullable=False)
    views_count: int = Field(default=0, nullable=False)
    clicks_count: int = Field(default=0, nullable=False)


class JobSkill(SQLModel, table=True):
    """职位-技能关联表，复合主键 (job_id, skill_id)"""
    __tablename__ = "job_skills"

    job_id: str = Field(foreign_key="jobs.id", primary_key=True)
    skill_id: str = Field(foreign_key="skills.id", primary_key=True)
    is_required: bool = Field(default=True, nullable=False)


class JobCategory(SQLModel, table=True):
    """职位-分类关联表，复合主键 (job_id, category_id)"""
    __tablename__ = "job_categories"

    job_id: str = Field(foreign_key="jobs.id", primary_key=True)
    category_id: str = Field(foreign_key="categories.id", primary_key=True)


class Application(EntityModel, table=True):
    """职位申请"""
    __tablename__ = "applications"

    job_id: str = Field(foreign_key="jobs.id", index=True, nullable=False)
    candidate_id: str = Field(foreign_key="users.id", index=True, nullable=False)
    resume_url: Optional[str] = Field(default=None)
    cover_letter: Optional[str] = Field(default=None)
    status: str = Field(default="APPLIED", nullable=False)
    rejection_reason: Optional[str] = Field(default=None)
    applied_at: Optional[datetime] = Field(default_factory=utc_now, nullable=False)


class Interview(EntityModel, table=True):
    """AI 面试记录"""
    __tablename__ = "interviews"

    application_id: str = Field(foreign_key="applications.id", index=True, nullable=False)
    title: Optional[str] = Field(default=None)
    type: str = Field(default="AI_CHAT", nullable=False)
    status: str = Field(default="PENDING", nullable=False)
    expires_at: Optional[datetime] = Field(default=None)
    duration_seconds: Optional[int] = Field(default=None)
    overall_score: Optional[float] = Field(default=None)
    summary: Optional[str] = Field(default=None)
    recommendation: Optional[str] = Field(default=None)


__all__ = [
    "User",
    "Company",
    "Skill",
    "Category",
    "Job",
    "JobSkill",
    "JobCategory",
    "Application",
    "Interview"
]
