"""
服务层模块
列表、关系解析、编辑、多对多同步、详情、会话、审核与概览统计
"""

from .list_controller import ListController
from .relation_resolver import RelationResolver
from .join_sync import JoinSynchronizer, plan_join_sync
from .record_editor import RecordEditor
from .detail_view import DetailView
from .admin_session import AdminSession
from .moderation_service import ModerationService
from .dashboard_service import DashboardService, DashboardStats

__all__ = [
    "ListController",
    "RelationResolver",
    "JoinSynchronizer",
    "plan_join_sync",
    "RecordEditor",
    "DetailView",
    "AdminSession",
    "ModerationService",
    "DashboardService",
    "DashboardStats"
]
