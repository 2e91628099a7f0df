"""
环境变量管理

处理环境变量的加载，支持 .env 文件配置。
环境变量优先级高于 JSON 配置文件。
"""

import logging
import os
from dataclasses import replace
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from ..exceptions import ConfigError
from .settings import Config, DEFAULT_CONFIG_FILE, Settings

logger = logging.getLogger(__name__)

ENV_PREFIX = "XL_OFFICE_"
VALID_ENGINES = ("auto", "com", "openpyxl")
TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")


class EnvManager:
    """环境变量管理器 - 支持环境变量和 .env 文件"""

    def __init__(self, env_file: Optional[str] = None):
        """
        初始化环境变量管理器

        Args:
            env_file: .env 文件路径，默认从当前目录向上查找
        """
        self.env_file = env_file
        self.load_environment()

    def load_environment(self):
        """加载环境变量（已存在的环境变量不会被 .env 覆盖）"""
        if self.env_file:
            load_dotenv(self.env_file)
        else:
            load_dotenv()

    def get_str(self, key: str, default: str = "") -> str:
        return os.getenv(ENV_PREFIX + key, default).strip()

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get_str(key)
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning(f"无效的整数配置 {ENV_PREFIX + key}: {value}，使用默认值 {default}")
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get_str(key)
        if not value:
            return default
        if value.lower() in TRUE_VALUES:
            return True
        if value.lower() in FALSE_VALUES:
            return False
        logger.warning(f"无效的布尔配置 {ENV_PREFIX + key}: {value}，使用默认值 {default}")
        return default

    def apply_to(self, settings: Settings) -> Settings:
        """
        用环境变量覆盖设置

        Args:
            settings: 基础设置

        Returns:
            Settings: 覆盖后的新设置对象
        """
        engine = self.get_str("ENGINE", settings.engine).lower()
        if engine not in VALID_ENGINES:
            logger.warning(f"无效的引擎配置 {ENV_PREFIX}ENGINE: {engine}，已忽略")
            engine = settings.engine

        default_sheet = self.get_int("DEFAULT_SHEET", settings.default_sheet)
        if default_sheet < 1:
            logger.warning(
                f"无效的工作表配置 {ENV_PREFIX}DEFAULT_SHEET: {default_sheet}，已忽略"
            )
            default_sheet = settings.default_sheet

        log_level = self.get_str("LOG_LEVEL", settings.log_level).upper()
        if not is_valid_log_level(log_level):
            logger.warning(f"无效的日志级别 {ENV_PREFIX}LOG_LEVEL: {log_level}，已忽略")
            log_level = settings.log_level

        return replace(
            settings,
            engine=engine,
            default_sheet=default_sheet,
            visible=self.get_bool("VISIBLE", settings.visible),
            display_alerts=self.get_bool("DISPLAY_ALERTS", settings.display_alerts),
            save_to_open_path=self.get_bool(
                "SAVE_TO_OPEN_PATH", settings.save_to_open_path
            ),
            log_level=log_level,
        )


def is_valid_log_level(level) -> bool:
    """判断是否为 logging 模块认可的日志级别名称（如 DEBUG、INFO）"""
    if not isinstance(level, str):
        return False
    return isinstance(logging.getLevelName(level.upper()), int)


def validate_settings(settings: Settings) -> Settings:
    """
    校验设置值

    Args:
        settings: 设置对象

    Returns:
        Settings: 原设置对象
    """
    if settings.engine not in VALID_ENGINES:
        raise ConfigError(
            "无效的引擎配置", details=f"{settings.engine}（可选: {', '.join(VALID_ENGINES)}）"
        )
    if (
        isinstance(settings.default_sheet, bool)
        or not isinstance(settings.default_sheet, int)
        or settings.default_sheet < 1
    ):
        raise ConfigError("无效的默认工作表序号", details=str(settings.default_sheet))
    if not is_valid_log_level(settings.log_level):
        raise ConfigError("无效的日志级别", details=str(settings.log_level))
    return settings


def load_settings(
    config_file: str = DEFAULT_CONFIG_FILE, env_file: Optional[str] = None
) -> Settings:
    """
    加载设置：JSON 配置文件（如存在）+ 环境变量覆盖

    Args:
        config_file: JSON 配置文件路径
        env_file: .env 文件路径

    Returns:
        Settings: 最终设置
    """
    if os.path.exists(config_file):
        settings = Config(config_file).settings
    else:
        settings = Settings()
    return validate_settings(EnvManager(env_file).apply_to(settings))


@lru_cache(maxsize=None)
def get_default_settings() -> Settings:
    """
    获取默认设置，每个进程只加载一次（.env 也只读取一次）

    修改配置文件或环境变量后，调用 get_default_settings.cache_clear() 重新加载。

    Returns:
        Settings: 当前工作目录下的配置文件 + 环境变量得到的设置
    """
    return load_settings()
