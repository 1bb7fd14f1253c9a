"""
审核动作服务
公司认证切换、职位通过/驳回，以及公司认证状态的计数
"""

import asyncio
from typing import Dict

from admin_engine.client.admin_client import AdminClient
from admin_engine.models.resource import AdminRow
from admin_engine.registry.resources import get_resource


class ModerationService:
    """
    审核服务

    这些动作绕过编辑表单，直接写入表单中不可编辑的字段（isVerified、status）
    """

    def __init__(self, client: AdminClient):
        self.client = client
        self.companies = get_resource("companies")
        self.jobs = get_resource("jobs")

    async def toggle_company_verification(self, row: AdminRow) -> AdminRow:
        """
        切换公司的认证状态

        Args:
            row: 公司记录

        Returns:
            更新后的记录
        """
        verified = not bool(row.get("isVerified"))
        updated = await self.client.update(
            self.companies.path, self.companies.primary_keys, row, {"isVerified": verified}
        )
        print(f"[ModerationService] 公司 {row.get('id')} isVerified -> {verified}")
        return updated or {**row, "isVerified": verified}

    async def _set_job_status(self, row: AdminRow, status: str) -> AdminRow:
        updated = await self.client.update(self.jobs.path, self.jobs.primary_keys, row, {"status": status})
        print(f"[ModerationService] 职位 {row.get('id')} status -> {status}")
        return updated or {**row, "status": status}

    async def approve_job(self, row: AdminRow) -> AdminRow:
        """通过职位：status -> PUBLISHED"""
        return await self._set_job_status(row, "PUBLISHED")

    async def reject_job(self, row: AdminRow) -> AdminRow:
        """驳回职位：status -> ARCHIVED"""
        return await self._set_job_status(row, "ARCHIVED")

    async def company_counts(self) -> Dict[str, int]:
        """
        统计未认证/已认证公司数量（各请求一行，只读取 meta.total）

        Returns:
            {"unverified": int, "verified": int}
        """
        unverified, verified = await asyncio.gather(
            self.client.list(self.companies.path, page=1, page_size=1, params={"isVerified": False}),
            self.client.list(self.companies.path, page=1, page_size=1, params={"isVerified": True}),
        )
        return {"unverified": unverified.total, "verified": verified.total}
