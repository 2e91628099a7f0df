"""
Excel 处理模块

处理 Excel 文档的打开、单元格读写、保存和释放。
"""

from .base_engine import SpreadsheetEngine
from .com_engine import ComEngine
from .openpyxl_engine import OpenpyxlEngine
from .spreadsheet import Excel, create_engine, resolve_engine_name

__all__ = [
    "Excel",
    "SpreadsheetEngine",
    "ComEngine",
    "OpenpyxlEngine",
    "create_engine",
    "resolve_engine_name",
]
