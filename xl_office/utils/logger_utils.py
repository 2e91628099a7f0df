"""
日志工具

提供日志配置和管理的工具函数。
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from colorama import Fore, Style, just_fix_windows_console

from .file_utils import FileUtils


class LoggerUtils:
    """日志工具类"""

    @staticmethod
    def _get_log_directory(log_dir: str) -> str:
        """
        获取日志目录路径，优先使用当前工作目录，否则使用用户主目录

        Args:
            log_dir: 日志目录名称

        Returns:
            str: 日志目录的绝对路径
        """
        preferred_log_dir = os.path.join(os.getcwd(), log_dir)
        if FileUtils.ensure_directory_exists(preferred_log_dir) and os.access(
            preferred_log_dir, os.W_OK
        ):
            return preferred_log_dir

        # 如果没有写入权限，使用用户主目录
        fallback_log_dir = os.path.join(os.path.expanduser("~"), ".xl_office", log_dir)
        os.makedirs(fallback_log_dir, exist_ok=True)
        return fallback_log_dir

    @staticmethod
    def setup_logging(
        log_level: Optional[str] = None,
        log_dir: str = "logs",
        log_file: str = "xl_office.log",
        quiet_console: bool = True,
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
    ):
        """
        设置日志配置

        库本身不会配置日志，应用程序在启动时调用一次即可。

        Args:
            log_level: 日志级别，默认使用设置中的 log_level（XL_OFFICE_LOG_LEVEL）
            log_dir: 日志目录名称（相对路径）
            log_file: 日志文件名
            quiet_console: 是否静默控制台输出（只显示 WARNING 及以上）
            max_bytes: 单个日志文件最大字节数（默认10MB）
            backup_count: 保留的备份文件数量（默认5个）
        """
        if log_level is None:
            from ..config.environment import get_default_settings

            log_level = get_default_settings().log_level

        actual_log_dir = LoggerUtils._get_log_directory(log_dir)

        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        console_formatter = ColoredFormatter("%(levelname)s: %(message)s")

        # 清除现有的处理器
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()

        level = getattr(logging, log_level.upper(), logging.INFO)
        root_logger.setLevel(level)

        file_handler = RotatingFileHandler(
            os.path.join(actual_log_dir, log_file),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        if quiet_console:
            # Windows 控制台需要转换 ANSI 颜色码
            just_fix_windows_console()
            console_handler.setFormatter(console_formatter)
            console_handler.setLevel(logging.WARNING)
        else:
            console_handler.setFormatter(file_formatter)
            console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

        logging.info(
            f"日志系统已初始化：目录={actual_log_dir}, 级别={log_level}, "
            f"最大={max_bytes/1024/1024:.1f}MB, 备份={backup_count}"
        )


class ColoredFormatter(logging.Formatter):
    """彩色日志格式化器"""

    COLORS = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.GREEN,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.MAGENTA,
    }

    def format(self, record):
        """格式化日志记录"""
        # 复制记录，避免颜色码写入其他处理器（如日志文件）
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[record.levelname]}{record.levelname}{Style.RESET_ALL}"
            )
        return super().format(record)
