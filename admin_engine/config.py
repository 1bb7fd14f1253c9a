"""配置加载模块

根据配置文件创建后台引擎的运行参数。
遵循安全协议：从不读取 .env 文件，只从系统环境变量获取访问令牌。
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator


class AdminSettings(BaseModel):
    """后台引擎运行参数"""

    api_base_url: str = Field(default="http://localhost:9999", description="REST 后端根地址")
    request_timeout: float = Field(default=10.0, gt=0, description="单次请求超时（秒）")
    default_page_size: int = Field(default=10, gt=0)
    page_size_options: List[int] = Field(default_factory=lambda: [5, 10, 20, 50])
    relation_page_size: int = Field(default=100, gt=0, description="关系选项每次拉取的行数")
    join_page_size: int = Field(default=200, gt=0, description="多对多同步时拉取连接表的行数")
    max_visible_columns: int = Field(default=8, gt=0)
    token_env: str = Field(default="ADMIN_API_TOKEN", description="存放 Bearer 令牌的环境变量名")

    @field_validator("page_size_options")
    @classmethod
    def _check_page_sizes(cls, value: List[int]) -> List[int]:
        if not value or any(size <= 0 for size in value):
            raise ValueError("page_size_options 必须是非空的正整数列表")
        return sorted(set(value))

    def get_token(self) -> Optional[str]:
        """
        从系统环境变量获取访问令牌

        Returns:
            令牌字符串，未设置时返回 None（请求以匿名方式发送）
        """
        token = os.getenv(self.token_env)
        return token or None


class AdminConfigLoader:
    """配置加载类，负责读取并缓存 admin_config.json"""

    def __init__(self, config_path: str = None):
        """初始化加载器

        Args:
            config_path: 配置文件路径，如果为 None 则使用项目根目录下的 admin_config.json
        """
        if config_path is None:
            # 默认路径：从 admin_engine/config.py 到项目根目录的 admin_config.json
            default_path = Path(__file__).parent.parent / "admin_config.json"
            self.config_path = str(default_path)
        else:
            self.config_path = config_path
        self._loaded_config = None
        self._settings = None

    def _load_config(self) -> Dict[str, Any]:
        """加载配置文件

        Returns:
            配置字典

        Raises:
            FileNotFoundError: 配置文件不存在
            json.JSONDecodeError: JSON 格式错误
        """
        if self._loaded_config is None:
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    self._loaded_config = json.load(f)
            except FileNotFoundError:
                raise FileNotFoundError(f"配置文件不存在: {self.config_path}")
            except json.JSONDecodeError as e:
                raise json.JSONDecodeError(f"JSON 格式错误: {e}", e.doc, e.pos)

        return self._loaded_config

    def get_settings(self) -> AdminSettings:
        """获取运行参数

        环境变量 ADMIN_API_URL 优先于配置文件中的 api_base_url。

        Returns:
            AdminSettings 实例

        Raises:
            ValueError: 配置项取值非法
        """
        if self._settings is None:
            config = dict(self._load_config())

            env_url = os.getenv("ADMIN_API_URL")
            if env_url:
                config["api_base_url"] = env_url

            try:
                self._settings = AdminSettings(**config)
            except ValidationError as e:
                raise ValueError(f"配置文件内容非法: {e}") from e

        return self._settings


# 全局加载器实例
config_loader = AdminConfigLoader()


def get_settings() -> AdminSettings:
    """获取运行参数的便捷函数

    Returns:
        AdminSettings 实例
    """
    return config_loader.get_settings()
