"""
文件操作工具

提供文件和目录操作的工具函数。
"""

import logging
import os
from typing import List

logger = logging.getLogger(__name__)


class FileUtils:
    """文件操作工具类"""

    @staticmethod
    def ensure_directory_exists(directory: str) -> bool:
        """
        确保目录存在，如果不存在则创建

        Args:
            directory: 目录路径

        Returns:
            bool: 是否成功（目录存在或创建成功）
        """
        if not directory:
            return False

        if os.path.exists(directory):
            return os.path.isdir(directory)

        try:
            os.makedirs(directory, exist_ok=True)
            logger.info(f"创建目录: {directory}")
            return True
        except OSError as e:
            logger.error(f"创建目录失败: {directory}, 错误: {e}")
            return False

    @staticmethod
    def resolve_path(path) -> str:
        """
        将路径转换为绝对路径（Excel 打开/保存文件时需要绝对路径）

        Args:
            path: 文件路径（str 或 PathLike）

        Returns:
            str: 绝对路径
        """
        path_str = os.fspath(path)
        if not path_str:
            raise ValueError("文件路径不能为空")
        return os.path.abspath(os.path.expanduser(path_str))

    @staticmethod
    def get_file_extension(file_path: str) -> str:
        """获取小写的文件扩展名（包含点号）"""
        return os.path.splitext(file_path)[1].lower()

    @staticmethod
    def has_extension(file_path: str, extensions: List[str]) -> bool:
        """
        检查文件扩展名是否在给定列表中

        Args:
            file_path: 文件路径
            extensions: 扩展名列表，如 [".xlsx", ".xlsm"]

        Returns:
            bool: 是否匹配
        """
        file_ext = FileUtils.get_file_extension(file_path)
        return file_ext in [ext.lower() for ext in extensions]
