"""
COM 自动化引擎

通过 pywin32 驱动真实的 Excel 进程。每个引擎实例独占一个 Excel 进程
（DispatchEx），不与其他实例共享。需要本机安装 Microsoft Excel。
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

from ..exceptions import HostError, friendly_error_message
from .base_engine import SpreadsheetEngine

logger = logging.getLogger(__name__)

EXCEL_PROG_ID = "Excel.Application"


class ComEngine(SpreadsheetEngine):
    """基于 Excel COM 对象模型的引擎"""

    name = "com"

    def __init__(
        self,
        visible: bool = False,
        display_alerts: bool = False,
        dispatch: Optional[Callable[[str], Any]] = None,
    ):
        """
        启动 Excel 进程

        Args:
            visible: 是否显示 Excel 窗口
            display_alerts: 是否显示 Excel 弹窗提示
            dispatch: 创建 COM 对象的工厂函数，默认使用 win32com.client.DispatchEx
        """
        self._pythoncom = None
        self._app = None
        self._workbook = None
        self._sheet = None
        self._range = None

        if dispatch is None:
            try:
                import pythoncom  # type: ignore
                import win32com.client  # type: ignore
            except ImportError as e:
                raise HostError(
                    "COM 引擎不可用", details=f"需要 Windows 平台和 pywin32: {e}"
                ) from e
            pythoncom.CoInitialize()
            self._pythoncom = pythoncom
            dispatch = win32com.client.DispatchEx

        try:
            self._app = dispatch(EXCEL_PROG_ID)
            self._app.Visible = visible
            self._app.DisplayAlerts = display_alerts
        except Exception as e:
            self._quit_app()
            self._uninitialize()
            raise HostError(
                "无法启动 Excel", details=friendly_error_message(str(e))
            ) from e

        logger.info("已启动 Excel 进程")

    def open(self, path: str):
        self._workbook = self._app.Workbooks.Open(path)
        logger.debug(f"COM 已打开工作簿: {path}")

    def add(self):
        self._workbook = self._app.Workbooks.Add()
        logger.debug("COM 已新建工作簿")

    def sheet_count(self) -> int:
        return int(self._workbook.Worksheets.Count)

    def sheet_names(self) -> List[str]:
        return [
            str(self._workbook.Worksheets(i).Name)
            for i in range(1, self.sheet_count() + 1)
        ]

    def select_sheet(self, n: int):
        self._range = None
        self._sheet = self._workbook.Worksheets(n)
        self._range = self._sheet.UsedRange

    def used_range(self) -> Tuple[int, int, int, int, bool]:
        # 选择工作表时获取的 UsedRange 快照
        used = self._range
        row_count = int(getattr(used.Rows, "Count", 0) or 0)
        col_count = int(getattr(used.Columns, "Count", 0) or 0)
        is_blank = row_count == 1 and col_count == 1 and used.Value2 is None
        return int(used.Row), int(used.Column), row_count, col_count, is_blank

    def get_value(self, row: int, col: int) -> Any:
        return self._sheet.Cells(row, col).Value2

    def set_value(self, row: int, col: int, value: Any):
        self._sheet.Cells(row, col).Value2 = value

    def save(self):
        self._workbook.Save()

    def save_as(self, path: str):
        self._workbook.SaveAs(path)

    def release(self) -> List[Exception]:
        errors: List[Exception] = []

        self._range = None
        self._sheet = None

        if self._workbook is not None:
            try:
                self._workbook.Close(SaveChanges=False)
            except Exception as e:
                logger.error(f"关闭工作簿失败: {e}")
                errors.append(e)
            self._workbook = None

        error = self._quit_app()
        if error is not None:
            errors.append(error)

        self._uninitialize()
        return errors

    def _quit_app(self) -> Optional[Exception]:
        """退出 Excel 进程，返回失败时的异常"""
        if self._app is None:
            return None
        app, self._app = self._app, None
        try:
            app.Quit()
        except Exception as e:
            logger.error(f"退出 Excel 进程失败: {e}")
            return e
        logger.info("已退出 Excel 进程")
        return None

    def _uninitialize(self):
        if self._pythoncom is not None:
            self._pythoncom.CoUninitialize()
            self._pythoncom = None
