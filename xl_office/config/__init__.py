"""
配置管理模块

处理应用程序配置和环境变量管理。
"""

from .settings import Config, Settings
from .environment import (
    EnvManager,
    get_default_settings,
    load_settings,
    validate_settings,
)

__all__ = [
    "Config",
    "Settings",
    "EnvManager",
    "get_default_settings",
    "load_settings",
    "validate_settings",
]
