"""
REST 客户端模块
"""

from .admin_client import AdminClient, build_id_path, build_query

__all__ = [
    "AdminClient",
    "build_id_path",
    "build_query"
]
