"""
后台概览统计

并发拉取用户、公司、职位、申请和面试的列表，
计算总数、按字段分布以及最近 N 天的增长趋势
"""

import asyncio
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

import httpx
from pydantic import BaseModel, Field

from admin_engine.client.admin_client import AdminClient
from admin_engine.errors import AdminApiError
from admin_engine.models.resource import AdminRow

# 用于分布统计的拉取行数；公司只需要总数
SAMPLE_PAGE_SIZE = 200


class DashboardStats(BaseModel):
    """概览统计结果"""

    totals: Dict[str, int] = Field(default_factory=dict)
    users_by_role: Dict[str, int] = Field(default_factory=dict)
    jobs_by_status: Dict[str, int] = Field(default_factory=dict)
    applications_by_status: Dict[str, int] = Field(default_factory=dict)
    interviews_by_status: Dict[str, int] = Field(default_factory=dict)
    interviews_by_type: Dict[str, int] = Field(default_factory=dict)
    growth: List[Dict[str, Any]] = Field(default_factory=list)
    error: Optional[str] = None


def count_by(rows: Iterable[AdminRow], field: str) -> Dict[str, int]:
    """按字段值计数，缺失值记为 "Unknown" """
    counter = Counter(str(r.get(field)) if r.get(field) is not None else "Unknown" for r in rows)
    return dict(counter)


def last_n_days(n: int, today: Optional[date] = None) -> List[str]:
    """最近 n 天的日期（ISO 格式，升序，包含今天）"""
    today = today or date.today()
    return [(today - timedelta(days=i)).isoformat() for i in range(n - 1, -1, -1)]


def _day_of(value: Any) -> Optional[str]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return None


def growth_trend(
    users: Iterable[AdminRow],
    jobs: Iterable[AdminRow],
    applications: Iterable[AdminRow],
    days: int = 30,
    today: Optional[date] = None
) -> List[Dict[str, Any]]:
    """
    最近 days 天每天新增的用户、职位和申请数量

    申请优先使用 appliedAt，其余使用 createdAt

    Returns:
        [{"date": "MM-DD", "users": int, "jobs": int, "applications": int}, ...]
    """
    window = last_n_days(days, today)
    window_set = set(window)

    def bucket(rows: Iterable[AdminRow], *fields: str) -> Counter:
        counts: Counter = Counter()
        for row in rows:
            day = next((d for d in (_day_of(row.get(f)) for f in fields) if d), None)
            if day in window_set:
                counts[day] += 1
        return counts

    user_counts = bucket(users, "createdAt")
    job_counts = bucket(jobs, "createdAt")
    app_counts = bucket(applications, "appliedAt", "createdAt")

    return [
        {
            "date": day[5:],
            "users": user_counts.get(day, 0),
            "jobs": job_counts.get(day, 0),
            "applications": app_counts.get(day, 0),
        }
        for day in window
    ]


class DashboardService:
    """概览统计服务"""

    def __init__(self, client: AdminClient):
        self.client = client

    async def load(self, today: Optional[date] = None) -> DashboardStats:
        """
        拉取并计算概览统计

        任一请求失败时返回全零统计，错误消息保存在 error 字段

        Returns:
            DashboardStats
        """
        try:
            users, companies, jobs, applications, interviews = await asyncio.gather(
                self.client.list("users", page=1, page_size=SAMPLE_PAGE_SIZE),
                self.client.list("companies", page=1, page_size=1),
                self.client.list("jobs", page=1, page_size=SAMPLE_PAGE_SIZE),
                self.client.list("applications", page=1, page_size=SAMPLE_PAGE_SIZE),
                self.client.list("interviews", page=1, page_size=SAMPLE_PAGE_SIZE),
            )
        except (AdminApiError, httpx.HTTPError) as e:
            print(f"[DashboardService] 加载概览失败: {e}")
            return DashboardStats(
                totals={k: 0 for k in ("users", "companies", "jobs", "applications", "interviews")},
                error=str(e)
            )

        return DashboardStats(
            totals={
                "users": users.total,
                "companies": companies.total,
                "jobs": jobs.total,
                "applications": applications.total,
                "interviews": interviews.total,
            },
            users_by_role=count_by(users.rows, "role"),
            jobs_by_status=count_by(jobs.rows, "status"),
            applications_by_status=count_by(applications.rows, "status"),
            interviews_by_status=count_by(interviews.rows, "status"),
            interviews_by_type=count_by(interviews.rows, "type"),
            growth=growth_trend(users.rows, jobs.rows, applications.rows, today=today),
        )
