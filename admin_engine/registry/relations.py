"""
关系映射
外键字段 -> 目标资源 + 标签函数，以及资源的多对多关系声明
"""

from typing import Dict, List, Optional, Tuple

from admin_engine.models.resource import AdminRow, ManyToManySpec, RelationSpec


def _user_label(row: AdminRow) -> str:
    return f"{row.get('firstName') or ''} {row.get('lastName') or ''} ({row.get('email') or ''})".strip()


def _company_label(row: AdminRow) -> str:
    return f"{row.get('name') or 'Company'} ({row.get('slug') or ''})"


def _recruiter_label(row: AdminRow) -> str:
    # 优先使用嵌入的 user 对象拼出姓名
    user = row.get("user") if isinstance(row.get("user"), dict) else {}
    full = " ".join(str(v) for v in (user.get("firstName"), user.get("lastName")) if v).strip()
    return str(full or user.get("email") or row.get("userId") or row.get("id") or "Recruiter")


def _candidate_label(row: AdminRow) -> str:
    return f"{row.get('userId') or ''}"


def _job_label(row: AdminRow) -> str:
    return f"{row.get('title') or 'Job'} ({row.get('id') or ''})"


def _category_label(row: AdminRow) -> str:
    return f"{row.get('name') or 'Category'}"


def _skill_label(row: AdminRow) -> str:
    return f"{row.get('name') or 'Skill'}"


def _application_label(row: AdminRow) -> str:
    return f"{row.get('id') or ''} ({row.get('status') or ''})"


RELATION_MAP: Dict[str, RelationSpec] = {
    "userId": RelationSpec(path="users", label=_user_label),
    "companyId": RelationSpec(path="companies", label=_company_label),
    "recruiterId": RelationSpec(path="recruiter-profiles", label=_recruiter_label),
    "candidateId": RelationSpec(path="candidate-profiles", label=_candidate_label),
    "jobId": RelationSpec(path="jobs", label=_job_label),
    "categoryId": RelationSpec(path="categories", label=_category_label),
    "skillId": RelationSpec(path="skills", label=_skill_label),
    "applicationId": RelationSpec(path="applications", label=_application_label),
}


# 资源 key -> 该资源拥有的多对多关系
MANY_TO_MANY: Dict[str, Tuple[ManyToManySpec, ...]] = {
    "jobs": (
        ManyToManySpec(
            name="skills",
            join_path="job-skills",
            owner_field="jobId",
            counterpart_field="skillId",
            nested_key="skill",
            extra_fields={"isRequired": True},
        ),
        ManyToManySpec(
            name="categories",
            join_path="job-categories",
            owner_field="jobId",
            counterpart_field="categoryId",
            nested_key="category",
        ),
    ),
}


def relation_for(field: str) -> Optional[RelationSpec]:
    """返回字段的关系映射，非关系字段返回 None"""
    return RELATION_MAP.get(field)


def many_to_many_for(resource_key: str) -> Tuple[ManyToManySpec, ...]:
    """返回资源声明的多对多关系，没有则返回空元组"""
    return MANY_TO_MANY.get(resource_key, ())


def relation_fields_for(resource_key: str, fields: List[str]) -> List[str]:
    """
    计算一个资源需要预加载选项的关系字段

    编辑字段中的外键字段，加上多对多关系的对端字段（如 jobs 的 skillId、categoryId）

    Args:
        resource_key: 资源 key
        fields: 编辑器字段

    Returns:
        去重且保持顺序的字段列表
    """
    needed = [f for f in fields if f in RELATION_MAP]
    for spec in many_to_many_for(resource_key):
        if spec.counterpart_field not in needed:
            needed.append(spec.counterpart_field)
    return needed
