"""
Excel 工具函数

提供单元格索引转换、已用区域计算和单元格值检查的工具函数。
"""

import logging
from typing import Any, Tuple

from openpyxl.utils import get_column_letter

from ..exceptions import CellValueError

logger = logging.getLogger(__name__)

# 允许写入单元格的标量类型
SCALAR_TYPES = (str, int, float, bool, type(None))


def to_excel_index(
    row: int, col: int, first_row: int = 1, first_col: int = 1
) -> Tuple[int, int]:
    """
    将从0开始的 (行, 列) 转换为 Excel 从1开始的地址。

    (0, 0) 对应已用区域的左上角单元格 (first_row, first_col)。

    Args:
        row: 行号（从0开始）
        col: 列号（从0开始）
        first_row: 已用区域首行（从1开始）
        first_col: 已用区域首列（从1开始）

    Returns:
        Tuple[int, int]: Excel 行号和列号（从1开始）
    """
    for name, value in (("row", row), ("col", col)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{name} 必须是整数，当前为 {type(value).__name__}")
        if value < 0:
            raise IndexError(f"{name} 不能为负数: {value}")
    return first_row + row, first_col + col


def cell_coordinate(xl_row: int, xl_col: int) -> str:
    """返回从1开始的 Excel 地址对应的 A1 样式坐标，用于日志"""
    return f"{get_column_letter(xl_col)}{xl_row}"


def used_extent(row_count: int, col_count: int, is_blank: bool) -> Tuple[int, int]:
    """
    根据已用区域计算行数和列数。

    行列数就是已用区域的行数和列数，(0, 0) 对应已用区域的左上角单元格
    （例如数据位于 C3:E4 时为 2 行 3 列，(0, 0) 即 C3）。
    只包含一个空单元格的已用区域视为空表。

    Args:
        row_count: 已用区域行数
        col_count: 已用区域列数
        is_blank: 已用区域是否为单个空单元格

    Returns:
        Tuple[int, int]: (行数, 列数)
    """
    if row_count <= 0 or col_count <= 0:
        return 0, 0
    if row_count == 1 and col_count == 1 and is_blank:
        return 0, 0
    return row_count, col_count


def check_cell_value(value: Any) -> Any:
    """
    检查要写入的单元格值是否为支持的标量类型。

    Args:
        value: 单元格值

    Returns:
        Any: 原值
    """
    if not isinstance(value, SCALAR_TYPES):
        raise CellValueError(
            "不支持的单元格值类型",
            details=f"{type(value).__name__}（仅支持文本、数字、布尔值或 None）",
        )
    return value
