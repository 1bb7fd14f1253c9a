"""
异常定义模块
引擎内所有可预期失败的异常层级
"""

from typing import Optional


class AdminEngineError(Exception):
    """引擎异常基类"""


class AdminApiError(AdminEngineError):
    """
    REST 请求失败

    包括网络错误、非 JSON 的错误响应，以及 success=false 的响应信封。
    success 字段是唯一权威的失败信号，HTTP 状态码仅作为附加信息保存。
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NoRowSelectedError(AdminEngineError):
    """编辑提交时没有可定位的记录（程序错误，直接中止提交）"""


class MissingPrimaryKeyError(NoRowSelectedError):
    """记录缺少某个主键字段的值，无法拼接资源路径"""

    def __init__(self, field: str):
        super().__init__(f'Missing primary key "{field}"')
        self.field = field


class UnknownResourceError(AdminEngineError, KeyError):
    """注册表中找不到指定的资源"""

    def __init__(self, identifier: str):
        super().__init__(f"Unknown admin resource: {identifier}")
        self.identifier = identifier

    def __str__(self) -> str:
        return self.args[0]


class UnknownFieldError(AdminEngineError, KeyError):
    """对表单草稿中不存在的字段赋值"""

    def __init__(self, field: str):
        super().__init__(f"Field is not editable: {field}")
        self.field = field

    def __str__(self) -> str:
        return self.args[0]
