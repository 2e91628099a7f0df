"""
XL Office

让处理 Excel 文档更轻松的包装器：按 (行, 列) 读写单元格，
并管理 Excel 进程的打开、保存和释放。
"""

from .excel import Excel
from .exceptions import (
    CellValueError,
    ClosedError,
    ConfigError,
    ExcelError,
    HostError,
    ReleaseError,
    SaveError,
    SheetError,
    WorkbookError,
    XLOfficeError,
)
from .utils import LoggerUtils

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    "Excel",
    "LoggerUtils",
    "XLOfficeError",
    "ConfigError",
    "ExcelError",
    "HostError",
    "WorkbookError",
    "SheetError",
    "CellValueError",
    "SaveError",
    "ReleaseError",
    "ClosedError",
]
