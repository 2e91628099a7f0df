"""
openpyxl 文件引擎

直接读写 .xlsx/.xlsm 文件，不启动 Excel 进程。
与 COM 引擎相比功能有所缩减：不重新计算公式、不执行宏、没有界面，
公式以文本形式保存。
"""

import logging
from typing import Any, List, Optional, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.cell import MergedCell
from openpyxl.worksheet.worksheet import Worksheet

from ..exceptions import WorkbookError
from ..utils.file_utils import FileUtils
from .base_engine import SpreadsheetEngine

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = [".xlsx", ".xlsm", ".xltx", ".xltm"]


def write_cell_safely(worksheet: Worksheet, row: int, col: int, value: Any):
    """
    安全地写入 Excel 单元格，处理合并单元格的情况。
    如果目标单元格是合并单元格的一部分，则写入合并区域的左上角单元格。

    Args:
        worksheet: Excel 工作表对象
        row: 行号（从1开始）
        col: 列号（从1开始）
        value: 要写入的值
    """
    cell_obj = worksheet.cell(row=row, column=col)
    if isinstance(cell_obj, MergedCell):
        for merged_range in worksheet.merged_cells.ranges:
            if cell_obj.coordinate in merged_range:
                min_col, min_row, max_col, max_row = merged_range.bounds
                worksheet.cell(row=min_row, column=min_col).value = value  # type: ignore
                return
    else:
        cell_obj.value = value


class OpenpyxlEngine(SpreadsheetEngine):
    """基于 openpyxl 的文件引擎"""

    name = "openpyxl"

    def __init__(self):
        self._workbook: Optional[Workbook] = None
        self._sheet: Optional[Worksheet] = None
        self._path: Optional[str] = None

    def open(self, path: str):
        if not FileUtils.has_extension(path, SUPPORTED_EXTENSIONS):
            raise WorkbookError(
                "openpyxl 引擎不支持该文件格式",
                details=f"{path}（支持: {', '.join(SUPPORTED_EXTENSIONS)}）",
            )
        keep_vba = FileUtils.has_extension(path, [".xlsm", ".xltm"])
        self._workbook = load_workbook(path, keep_vba=keep_vba)
        self._path = path
        logger.debug(f"openpyxl 已加载工作簿: {path}")

    def add(self):
        self._workbook = Workbook()
        logger.debug("openpyxl 已新建工作簿")

    def sheet_count(self) -> int:
        return len(self._workbook.worksheets)

    def sheet_names(self) -> List[str]:
        return [ws.title for ws in self._workbook.worksheets]

    def select_sheet(self, n: int):
        self._sheet = self._workbook.worksheets[n - 1]

    def used_range(self) -> Tuple[int, int, int, int, bool]:
        ws = self._sheet
        row_count = ws.max_row - ws.min_row + 1
        col_count = ws.max_column - ws.min_column + 1
        is_blank = (
            row_count == 1
            and col_count == 1
            and self._read(ws.min_row, ws.min_column) is None
        )
        return ws.min_row, ws.min_column, row_count, col_count, is_blank

    def get_value(self, row: int, col: int) -> Any:
        return self._read(row, col)

    def _read(self, row: int, col: int) -> Any:
        # ws.cell() 会为空地址创建单元格并改变已用区域，读取时只查已有单元格
        cell = self._sheet._cells.get((row, col))
        return cell.value if cell is not None else None

    def set_value(self, row: int, col: int, value: Any):
        write_cell_safely(self._sheet, row, col, value)

    def save(self):
        self._workbook.save(self._path)

    def save_as(self, path: str):
        if not FileUtils.has_extension(path, SUPPORTED_EXTENSIONS):
            raise ValueError(
                f"openpyxl 引擎只能保存为 {', '.join(SUPPORTED_EXTENSIONS)} 格式"
            )
        self._workbook.save(path)
        self._path = path

    def release(self) -> List[Exception]:
        errors: List[Exception] = []
        self._sheet = None
        if self._workbook is not None:
            try:
                self._workbook.close()
            except Exception as e:
                logger.error(f"关闭工作簿失败: {e}")
                errors.append(e)
            self._workbook = None
        return errors
