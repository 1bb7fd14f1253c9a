"""
参考后端
基于 FastAPI + SQLModel 的通用 CRUD 接口，应用入口见 main.create_app
"""

from .tables import (
    User,
    Company,
    Skill,
    Category,
    Job,
    JobSkill,
    JobCategory,
    Application,
    Interview
)

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
