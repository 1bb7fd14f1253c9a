"""
Admin Engine

通用的、由资源描述驱动的后台管理 CRUD 引擎：
资源注册表、列表控制器、关系解析、记录编辑、多对多同步与详情视图
"""

__version__ = "0.1.0"
