"""
数据库初始化模块
"""

from .init_db import init_db, get_engine, create_tables, create_default_data

__all__ = ["init_db", "get_engine", "create_tables", "create_default_data"]
