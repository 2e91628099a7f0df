"""
Excel 文档包装器

按 (行, 列) 读写单元格，并管理底层 Excel 进程（或文件）的生命周期。

用法示例::

    with Excel("Document.xlsx") as excel:
        for row in range(excel.rows):
            for col in range(excel.cols):
                value = excel[row, col]      # 读取
                excel[row, col] = "新值"      # 写入
        excel.save()

释放（close）非常重要：不释放会在内存中残留 Excel 进程，文件也会一直处于只读锁定状态。
使用 with 语句可以保证在任何退出路径上释放。
"""

import logging
import os
import sys
from typing import Any, Iterator, List, Optional, Tuple, Union

import pandas as pd

from ..config.environment import get_default_settings, validate_settings
from ..config.settings import Settings
from ..exceptions import (
    ClosedError,
    ConfigError,
    ExcelError,
    HostError,
    ReleaseError,
    SaveError,
    SheetError,
    WorkbookError,
    friendly_error_message,
)
from ..utils.file_utils import FileUtils
from .base_engine import SpreadsheetEngine
from .com_engine import ComEngine
from .openpyxl_engine import OpenpyxlEngine
from .utils import cell_coordinate, check_cell_value, to_excel_index, used_extent

logger = logging.getLogger(__name__)

ENGINES = ("com", "openpyxl")


def resolve_engine_name(name: Optional[str]) -> str:
    """
    解析引擎名称，auto 在 Windows 上使用 COM，其他平台使用 openpyxl

    Args:
        name: 引擎名称（auto / com / openpyxl）

    Returns:
        str: 实际使用的引擎名称
    """
    if name is None or name == "auto":
        return "com" if sys.platform == "win32" else "openpyxl"
    if name not in ENGINES:
        raise ConfigError("未知的引擎", details=f"{name}（可选: auto, {', '.join(ENGINES)}）")
    return name


def create_engine(name: Optional[str], settings: Settings) -> SpreadsheetEngine:
    """
    根据名称创建引擎实例

    Args:
        name: 引擎名称
        settings: 设置对象

    Returns:
        SpreadsheetEngine: 引擎实例
    """
    engine_name = resolve_engine_name(name)
    if engine_name == "com":
        return ComEngine(visible=settings.visible, display_alerts=settings.display_alerts)
    return OpenpyxlEngine()


class Excel:
    """Excel 文档包装器"""

    def __init__(
        self,
        path: Union[str, "os.PathLike[str]"],
        sheet: Optional[int] = None,
        engine: Union[str, SpreadsheetEngine, None] = None,
        settings: Optional[Settings] = None,
    ):
        """
        打开已存在的文档，如果文件不存在则新建工作簿

        Args:
            path: 文件路径
            sheet: 工作表序号（从1开始），默认使用设置中的 default_sheet
            engine: 引擎名称或引擎实例，默认使用设置中的 engine
            settings: 设置对象，默认使用进程内首次加载的配置文件和环境变量
        """
        self.settings = (
            validate_settings(settings)
            if settings is not None
            else get_default_settings()
        )
        self._file_path = FileUtils.resolve_path(path)
        self._in_drive = False
        self._closed = False
        self._sheet_index: Optional[int] = None
        # 已用区域左上角（从1开始），(0, 0) 对应该单元格
        self._first_row = 1
        self._first_col = 1
        self._rows = 0
        self._cols = 0

        if isinstance(engine, SpreadsheetEngine):
            self._engine = engine
        else:
            self._engine = create_engine(engine or self.settings.engine, self.settings)

        try:
            if os.path.isfile(self._file_path):
                self._open_workbook()
            else:
                self._add_workbook()
            self.set_sheet(sheet if sheet is not None else self.settings.default_sheet)
        except Exception:
            # 构造失败时释放已获取的资源，再抛出原始错误
            self._closed = True
            for error in self._engine.release():
                logger.error(f"构造失败后释放资源出错: {error}")
            raise

    def _open_workbook(self):
        try:
            self._engine.open(self._file_path)
        except ExcelError:
            raise
        except Exception as e:
            raise WorkbookError(
                f"无法打开工作簿: {self._file_path}",
                details=friendly_error_message(str(e)),
            ) from e
        self._in_drive = True
        logger.info(f"已打开工作簿: {self._file_path}")

    def _add_workbook(self):
        try:
            self._engine.add()
        except Exception as e:
            raise HostError("无法新建工作簿", details=friendly_error_message(str(e))) from e
        logger.info(f"文件不存在，已新建工作簿: {self._file_path}")

    def _ensure_open(self):
        if self._closed:
            raise ClosedError("Excel 文档已释放，不能再执行操作", details=self._file_path)

    def _refresh_dimensions(self):
        first_row, first_col, row_count, col_count, is_blank = self._engine.used_range()
        self._first_row, self._first_col = first_row, first_col
        self._rows, self._cols = used_extent(row_count, col_count, is_blank)

    @property
    def rows(self) -> int:
        """当前工作表已用区域的行数"""
        return self._rows

    @property
    def cols(self) -> int:
        """当前工作表已用区域的列数"""
        return self._cols

    @property
    def path(self) -> str:
        return self._file_path

    @property
    def in_drive(self) -> bool:
        """文档是否已保存到磁盘"""
        return self._in_drive

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def sheet_index(self) -> Optional[int]:
        return self._sheet_index

    @property
    def engine_name(self) -> str:
        return self._engine.name

    @property
    def sheet_count(self) -> int:
        self._ensure_open()
        return self._engine.sheet_count()

    def sheet_names(self) -> List[str]:
        self._ensure_open()
        return self._engine.sheet_names()

    def set_sheet(self, n: int):
        """
        选择要操作的工作表，并重新计算行数和列数

        Args:
            n: 工作表序号（从1开始）
        """
        self._ensure_open()
        if isinstance(n, bool) or not isinstance(n, int):
            raise SheetError("工作表序号必须是整数", details=repr(n))

        count = self._engine.sheet_count()
        if n < 1 or n > count:
            raise SheetError("工作表序号无效", details=f"{n}（共 {count} 张工作表）")

        self._engine.select_sheet(n)
        self._sheet_index = n
        self._refresh_dimensions()
        logger.debug(f"已选择工作表 {n}: {self._rows} 行 x {self._cols} 列")

    def get(self, row: int, col: int) -> Any:
        """
        读取单元格值

        Args:
            row: 行号（从0开始，相对已用区域首行）
            col: 列号（从0开始，相对已用区域首列）

        Returns:
            Any: 单元格值，空单元格返回 None
        """
        self._ensure_open()
        xl_row, xl_col = to_excel_index(row, col, self._first_row, self._first_col)
        return self._engine.get_value(xl_row, xl_col)

    def set(self, row: int, col: int, value: Any):
        """
        写入单元格值

        写入超出当前范围时行列数随之扩大；清空单元格不会缩小行列数，
        重新选择工作表时按已用区域重新计算。

        Args:
            row: 行号（从0开始，相对已用区域首行）
            col: 列号（从0开始，相对已用区域首列）
            value: 文本、数字、布尔值，None 表示清空
        """
        self._ensure_open()
        xl_row, xl_col = to_excel_index(row, col, self._first_row, self._first_col)
        self._engine.set_value(xl_row, xl_col, check_cell_value(value))
        self._rows = max(self._rows, row + 1)
        self._cols = max(self._cols, col + 1)
        logger.debug(f"写入 {cell_coordinate(xl_row, xl_col)} = {value!r}")

    def __getitem__(self, key: Tuple[int, int]) -> Any:
        row, col = key
        return self.get(row, col)

    def __setitem__(self, key: Tuple[int, int], value: Any):
        row, col = key
        self.set(row, col, value)

    def iter_rows(self) -> Iterator[List[Any]]:
        """逐行返回当前工作表已用范围内的值"""
        self._ensure_open()
        return self._iter_rows()

    def _iter_rows(self) -> Iterator[List[Any]]:
        for row in range(self.rows):
            yield [self.get(row, col) for col in range(self.cols)]

    def to_dataframe(self, header: bool = False) -> pd.DataFrame:
        """
        将当前工作表已用范围转换为 DataFrame

        Args:
            header: 是否把第一行作为列名

        Returns:
            pd.DataFrame: 表格数据
        """
        self._ensure_open()
        data = list(self.iter_rows())
        if header and data:
            columns = [str(value) if value is not None else "" for value in data[0]]
            return pd.DataFrame(data[1:], columns=columns)
        return pd.DataFrame(data)

    def save(self, path: Union[str, "os.PathLike[str]", None] = None):
        """
        保存文档

        已保存到磁盘的文档保存到原路径；新建文档必须指定路径
        （或启用 save_to_open_path 设置，保存到打开时的路径）。

        Args:
            path: 保存路径，指定时等同于 save_as(path)
        """
        self._ensure_open()
        if path is not None:
            self.save_as(path)
            return

        if not self._in_drive:
            if not self.settings.save_to_open_path:
                raise SaveError(
                    "文档尚未保存到磁盘，请指定保存路径", details="使用 save_as(path)"
                )
            self.save_as(self._file_path)
            return

        self._run_save(self._engine.save, self._file_path)

    def save_as(self, path: Union[str, "os.PathLike[str]"]):
        """
        另存为指定路径，之后 save() 会保存到该路径

        Args:
            path: 保存路径
        """
        self._ensure_open()
        target = FileUtils.resolve_path(path)
        self._run_save(lambda: self._engine.save_as(target), target)
        self._file_path = target
        self._in_drive = True

    def _run_save(self, action, target: str):
        try:
            action()
        except Exception as e:
            raise SaveError(
                f"保存工作簿失败: {target}", details=friendly_error_message(str(e))
            ) from e
        logger.info(f"工作簿已保存: {target}")

    def close(self):
        """
        释放并关闭文档（区域、工作表、工作簿、Excel 进程，按此顺序）

        重复调用不会产生任何效果。释放失败时，剩余步骤仍会执行，
        最后统一抛出 ReleaseError。
        """
        if self._closed:
            logger.debug(f"文档已释放，忽略重复的 close 调用: {self._file_path}")
            return

        self._closed = True
        errors = self._engine.release()
        if errors:
            raise ReleaseError(
                "释放 Excel 资源时出错",
                details="; ".join(str(e) for e in errors),
                errors=errors,
            )
        logger.info(f"已释放文档: {self._file_path}")

    dispose = close

    def __enter__(self) -> "Excel":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.close()
            return False
        # 已有异常在传播时，释放错误只记录，不覆盖原始异常
        try:
            self.close()
        except ReleaseError as e:
            logger.error(f"异常退出时释放资源失败: {e}")
        return False

    def __repr__(self) -> str:
        return (
            f"Excel(path='{self._file_path}', engine='{self.engine_name}', "
            f"sheet={self._sheet_index}, rows={self._rows}, cols={self._cols}, "
            f"closed={self._closed})"
        )
