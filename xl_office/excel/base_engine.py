"""
Excel 引擎抽象基类

定义所有引擎必须实现的接口。引擎负责与 Excel 进程（COM）或文件（openpyxl）
交互，行列地址一律从1开始。
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Tuple

logger = logging.getLogger(__name__)


class SpreadsheetEngine(ABC):
    """Excel 引擎抽象基类"""

    name = "base"

    @abstractmethod
    def open(self, path: str):
        """
        打开已存在的工作簿

        Args:
            path: 文件绝对路径
        """
        pass

    @abstractmethod
    def add(self):
        """新建一个空白工作簿"""
        pass

    @abstractmethod
    def sheet_count(self) -> int:
        """工作表数量"""
        pass

    @abstractmethod
    def sheet_names(self) -> List[str]:
        """工作表名称列表"""
        pass

    @abstractmethod
    def select_sheet(self, n: int):
        """
        选择要操作的工作表，并获取其已用区域

        Args:
            n: 工作表序号（从1开始，调用方已校验范围）
        """
        pass

    @abstractmethod
    def used_range(self) -> Tuple[int, int, int, int, bool]:
        """
        当前工作表的已用区域，在选择工作表后调用

        Returns:
            Tuple: (首行, 首列, 行数, 列数, 是否为单个空单元格)
        """
        pass

    @abstractmethod
    def get_value(self, row: int, col: int) -> Any:
        """读取单元格值，空单元格返回 None"""
        pass

    @abstractmethod
    def set_value(self, row: int, col: int, value: Any):
        """写入单元格值"""
        pass

    @abstractmethod
    def save(self):
        """保存到当前路径"""
        pass

    @abstractmethod
    def save_as(self, path: str):
        """另存为指定路径"""
        pass

    @abstractmethod
    def release(self) -> List[Exception]:
        """
        按依赖顺序释放所有资源（区域、工作表、工作簿、应用程序）

        每一步失败都不应阻止后续步骤。

        Returns:
            List[Exception]: 释放过程中出现的错误，空列表表示全部成功
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.name}')"
