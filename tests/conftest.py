"""
测试共享夹具

提供 openpyxl 设置和一个模拟 Excel COM 对象模型的假 Application，
使 COM 引擎的测试可以在任何平台上运行。
"""

from types import SimpleNamespace

import pytest

from xl_office.config.environment import get_default_settings
from xl_office.config.settings import Settings


class FakeCell:
    def __init__(self, sheet, row, col):
        self._sheet = sheet
        self._key = (row, col)

    @property
    def Value2(self):
        return self._sheet.cells.get(self._key)

    @Value2.setter
    def Value2(self, value):
        if value is None:
            self._sheet.cells.pop(self._key, None)
        else:
            # Excel 把数字统一存为 double
            if isinstance(value, int) and not isinstance(value, bool):
                value = float(value)
            self._sheet.cells[self._key] = value


class FakeUsedRange:
    def __init__(self, sheet):
        if sheet.cells:
            rows = [r for r, _ in sheet.cells]
            cols = [c for _, c in sheet.cells]
            self.Row, self.Column = min(rows), min(cols)
            row_count = max(rows) - self.Row + 1
            col_count = max(cols) - self.Column + 1
        else:
            self.Row, self.Column = 1, 1
            row_count = col_count = 1
        self.Rows = SimpleNamespace(Count=row_count)
        self.Columns = SimpleNamespace(Count=col_count)
        if row_count == 1 and col_count == 1:
            self.Value2 = sheet.cells.get((self.Row, self.Column))
        else:
            self.Value2 = ("...",)


class FakeSheet:
    def __init__(self, name, cells=None):
        self.Name = name
        self.cells = dict(cells or {})
        self.used_range_reads = 0

    def Cells(self, row, col):
        return FakeCell(self, row, col)

    @property
    def UsedRange(self):
        self.used_range_reads += 1
        return FakeUsedRange(self)


class FakeSheets:
    def __init__(self, sheets):
        self._sheets = sheets

    @property
    def Count(self):
        return len(self._sheets)

    def __call__(self, index):
        if index < 1 or index > len(self._sheets):
            raise Exception("(-2147352565, 'Invalid index.', None, None)")
        return self._sheets[index - 1]


class FakeWorkbook:
    def __init__(self, app, sheets, path=None):
        self._app = app
        self.sheets = sheets
        self.Worksheets = FakeSheets(sheets)
        self.path = path
        self.save_error = None
        self.close_error = None

    def Save(self):
        if self.save_error:
            raise self.save_error
        self._app.events.append(("Save", self.path))
        self._app.files[self.path] = self.sheets

    def SaveAs(self, path):
        if self.save_error:
            raise self.save_error
        self._app.events.append(("SaveAs", path))
        self.path = path
        self._app.files[path] = self.sheets

    def Close(self, SaveChanges=True):
        self._app.events.append(("Close", SaveChanges))
        if self.close_error:
            raise self.close_error


class FakeWorkbooks:
    def __init__(self, app):
        self._app = app

    def Open(self, path):
        self._app.events.append(("Open", path))
        if path not in self._app.files:
            raise Exception("Excel cannot open the file because the file format is not valid")
        return FakeWorkbook(self._app, self._app.files[path], path)

    def Add(self):
        self._app.events.append(("Add",))
        self.last_added = FakeWorkbook(self._app, [FakeSheet("Sheet1")])
        return self.last_added


class FakeExcelApp:
    """模拟 Excel.Application，记录调用顺序"""

    def __init__(self, files=None):
        self.files = dict(files or {})
        self.events = []
        self.Visible = True
        self.DisplayAlerts = True
        self.Workbooks = FakeWorkbooks(self)
        self.quit_error = None

    def Quit(self):
        self.events.append(("Quit",))
        if self.quit_error:
            raise self.quit_error


@pytest.fixture
def fake_app():
    return FakeExcelApp()


@pytest.fixture
def fake_dispatch(fake_app):
    calls = []

    def dispatch(prog_id):
        calls.append(prog_id)
        return fake_app

    dispatch.calls = calls
    return dispatch


@pytest.fixture
def openpyxl_settings():
    return Settings(engine="openpyxl")


@pytest.fixture
def make_sheet():
    return FakeSheet


@pytest.fixture
def fresh_default_settings():
    """清空进程内缓存的默认设置，测试结束后再次清空"""
    get_default_settings.cache_clear()
    yield
    get_default_settings.cache_clear()
