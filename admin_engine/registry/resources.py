"""
资源注册表
静态声明所有可管理资源：REST 路径、列、可编辑字段、主键和枚举取值
"""

from typing import Dict, List, Optional, Tuple

from admin_engine.errors import UnknownResourceError
from admin_engine.models.resource import ResourceDescriptor


# ==================== 枚举取值 ====================

JOB_STATUSES = ("DRAFT", "PUBLISHED", "CLOSED", "ARCHIVED")
JOB_TYPES = ("FULL_TIME", "PART_TIME", "CONTRACT", "FREELANCE", "INTERNSHIP", "REMOTE")
CURRENCIES = ("VND", "USD", "EUR", "JPY")
USER_ROLES = ("CANDIDATE", "RECRUITER", "ADMIN")
APPLICATION_STATUSES = (
    "APPLIED",
    "REVIEWING",
    "SHORTLISTED",
    "INTERVIEW_SCHEDULED",
    "INTERVIEWED",
    "OFFER_SENT",
    "HIRED",
    "REJECTED",
    "WITHDRAWN",
)
INTERVIEW_TYPES = ("AI_VIDEO", "AI_VOICE", "AI_CHAT", "CODING_TEST")
INTERVIEW_STATUSES = ("PENDING", "IN_PROGRESS", "PROCESSING", "COMPLETED", "FAILED", "EXPIRED")
COMPANY_SIZES = ("1-10", "11-50", "51-200", "201-500", "501-1000", "1001-5000", "5000+")


# ==================== 资源目录 ====================

ADMIN_RESOURCES: Tuple[ResourceDescriptor, ...] = (
    ResourceDescriptor(
        key="users",
        path="users",
        label="Users",
        columns=(
            "id", "email", "firstName", "lastName", "phone", "avatarUrl",
            "role", "isVerified", "isActive", "lastLoginAt", "createdAt", "updatedAt",
        ),
        # role / isVerified / email 不允许在后台直接修改
        allowed_fields=("firstName", "lastName", "phone", "avatarUrl", "isActive"),
        field_enums={"role": USER_ROLES},
    ),
    ResourceDescriptor(
        key="candidate-profiles",
        path="candidate-profiles",
        label="Candidate Profiles",
        columns=("id", "userId", "headline", "bio", "website", "linkedin", "github", "cvUrl", "createdAt"),
    ),
    ResourceDescriptor(
        key="recruiter-profiles",
        path="recruiter-profiles",
        label="Recruiter Profiles",
        columns=("id", "userId", "companyId", "position", "createdAt"),
    ),
    ResourceDescriptor(
        key="experiences",
        path="experiences",
        label="Experiences",
        columns=(
            "id", "candidateId", "companyName", "position", "location",
            "startDate", "endDate", "isCurrent", "description",
        ),
    ),
    ResourceDescriptor(
        key="educations",
        path="educations",
        label="Educations",
        columns=("id", "candidateId", "institution", "degree", "fieldOfStudy", "startDate", "endDate", "grade"),
    ),
    ResourceDescriptor(
        key="skills",
        path="skills",
        label="Skills",
        columns=("id", "name", "iconUrl"),
    ),
    ResourceDescriptor(
        key="candidate-skills",
        path="candidate-skills",
        label="Candidate Skills",
        columns=("id", "candidateId", "skillId", "level"),
    ),
    ResourceDescriptor(
        key="companies",
        path="companies",
        label="Companies",
        columns=(
            "id", "name", "slug", "logoUrl", "industry", "companySize",
            "city", "country", "isVerified", "website", "createdAt",
        ),
        # isVerified 通过审核动作切换，不在编辑表单中出现
        allowed_fields=(
            "description", "industry", "companySize", "foundedYear", "address",
            "city", "country", "logoUrl", "coverUrl", "website",
        ),
        field_enums={"companySize": COMPANY_SIZES},
        numeric_fields=("foundedYear",),
    ),
    ResourceDescriptor(
        key="jobs",
        path="jobs",
        label="Jobs",
        columns=(
            "id", "title", "companyId", "status", "type", "skills", "categories",
            "location", "isRemote", "salaryMin", "salaryMax", "currency", "createdAt",
        ),
        # status 通过审核动作切换，不在编辑表单中出现
        allowed_fields=(
            "description", "requirements", "benefits", "location", "salaryMin", "salaryMax",
            "currency", "isSalaryNegotiable", "experienceLevel", "quantity",
        ),
        field_enums={"status": JOB_STATUSES, "type": JOB_TYPES, "currency": CURRENCIES},
        numeric_fields=("salaryMin", "salaryMax", "quantity", "viewsCount", "clicksCount"),
    ),
    ResourceDescriptor(
        key="categories",
        path="categories",
        label="Categories",
        columns=("id", "name", "iconUrl"),
    ),
    ResourceDescriptor(
        key="job-categories",
        path="job-categories",
        label="Job Categories",
        columns=("jobId", "categoryId"),
        primary_keys=("jobId", "categoryId"),
    ),
    ResourceDescriptor(
        key="job-skills",
        path="job-skills",
        label="Job Skills",
        columns=("jobId", "skillId", "isRequired"),
        primary_keys=("jobId", "skillId"),
    ),
    ResourceDescriptor(
        key="saved-jobs",
        path="saved-jobs",
        label="Saved Jobs",
        columns=("id", "candidateId", "jobId", "savedAt"),
    ),
    ResourceDescriptor(
        key="applications",
        path="applications",
        label="Applications",
        columns=(
            "id", "jobId", "candidateId", "resumeUrl", "coverLetter",
            "status", "rejectionReason", "appliedAt", "updatedAt",
        ),
        field_enums={"status": APPLICATION_STATUSES},
    ),
    ResourceDescriptor(
        key="application-histories",
        path="application-histories",
        label="Application Histories",
        columns=("id", "applicationId", "status", "changedBy", "note", "createdAt"),
        field_enums={"status": APPLICATION_STATUSES},
    ),
    ResourceDescriptor(
        key="application-notes",
        path="application-notes",
        label="Application Notes",
        columns=("id", "applicationId", "authorId", "content", "createdAt"),
    ),
    ResourceDescriptor(
        key="interviews",
        path="interviews",
        label="Interviews",
        columns=(
            "id", "applicationId", "title", "type", "status", "expiresAt",
            "durationSeconds", "overallScore", "summary", "recommendation", "createdAt",
        ),
        field_enums={"type": INTERVIEW_TYPES, "status": INTERVIEW_STATUSES},
        numeric_fields=("durationSeconds", "overallScore"),
    ),
    ResourceDescriptor(
        key="interview-exchanges",
        path="interview-exchanges",
        label="Interview Exchanges",
        columns=(
            "id", "interviewId", "orderIndex", "questionText", "questionCategory",
            "answerText", "score", "feedback", "durationSeconds",
        ),
        numeric_fields=("orderIndex", "score", "durationSeconds"),
    ),
    ResourceDescriptor(
        key="question-banks",
        path="question-banks",
        label="Question Banks",
        columns=("id", "content", "category", "difficulty", "expectedKeywords", "createdAt"),
    ),
    ResourceDescriptor(
        key="messages",
        path="messages",
        label="Messages",
        columns=("id", "senderId", "receiverId", "content", "isRead", "jobId", "applicationId", "createdAt"),
    ),
    ResourceDescriptor(
        key="notifications",
        path="notifications",
        label="Notifications",
        columns=("id", "userId", "title", "message", "type", "isRead", "link", "createdAt"),
    ),
)

_BY_KEY: Dict[str, ResourceDescriptor] = {r.key: r for r in ADMIN_RESOURCES}
_BY_PATH: Dict[str, ResourceDescriptor] = {r.path: r for r in ADMIN_RESOURCES}


# ==================== 字段过滤规则 ====================

# 后台表单永远不允许编辑的字段（外键关系、系统维护字段、凭据）
EDIT_DENYLIST = frozenset({
    "id",
    "createdAt",
    "updatedAt",
    "passwordHash",
    "email",
    "userId",
    "candidateId",
    "recruiterId",
    "companyId",
    "jobId",
    "applicationId",
    "senderId",
    "receiverId",
    "lastLoginAt",
})

# 详情页与编辑表单都不展示的字段
DISPLAY_DENYLIST = frozenset({"passwordHash"})

# 列表视图隐藏的系统时间戳列
LIST_HIDDEN_COLUMNS = frozenset({"createdAt", "updatedAt"})


def resource_by_key_or_path(identifier: str) -> Optional[ResourceDescriptor]:
    """
    按 key 或 REST 路径查找资源

    Args:
        identifier: 资源 key（如 "jobs"）或路径

    Returns:
        ResourceDescriptor，不存在则返回 None
    """
    return _BY_KEY.get(identifier) or _BY_PATH.get(identifier)


def get_resource(identifier: str) -> ResourceDescriptor:
    """
    按 key 或路径查找资源，不存在时抛出异常

    Raises:
        UnknownResourceError: 资源未注册
    """
    resource = resource_by_key_or_path(identifier)
    if resource is None:
        raise UnknownResourceError(identifier)
    return resource


def list_resources() -> List[ResourceDescriptor]:
    """按声明顺序返回全部资源"""
    return list(ADMIN_RESOURCES)


def editable_fields(resource: ResourceDescriptor) -> List[str]:
    """
    计算编辑器可以修改的字段

    allowed_fields（或 columns）去掉固定黑名单和资源自身的主键

    Args:
        resource: 资源描述

    Returns:
        保持声明顺序的字段列表
    """
    exclude = EDIT_DENYLIST | set(resource.primary_keys)
    return [f for f in resource.editable_source if f not in exclude]


def visible_columns(resource: ResourceDescriptor, limit: int = 8) -> List[str]:
    """
    列表视图展示的列：去掉时间戳列，最多 limit 列

    Args:
        resource: 资源描述
        limit: 最大列数

    Returns:
        列名列表
    """
    return [c for c in resource.columns if c not in LIST_HIDDEN_COLUMNS][:limit]
