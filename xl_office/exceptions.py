"""
统一异常处理模块

定义项目中使用的异常层次结构，提供清晰的错误分类和友好的错误信息。
"""


class XLOfficeError(Exception):
    """基础异常类 - 所有项目异常的父类"""

    def __init__(self, message: str = "", details: str = ""):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigError(XLOfficeError):
    """配置相关错误"""

    pass


class ExcelError(XLOfficeError):
    """Excel 处理相关错误"""

    pass


class HostError(ExcelError):
    """自动化宿主（Excel 进程）无法启动或引擎不可用"""

    pass


class WorkbookError(ExcelError):
    """工作簿无法打开或解析"""

    pass


class SheetError(ExcelError):
    """工作表索引无效"""

    pass


class CellValueError(ExcelError):
    """不支持的单元格值类型"""

    pass


class SaveError(ExcelError):
    """保存失败或缺少保存路径"""

    pass


class ClosedError(ExcelError):
    """在已释放的文档上执行操作"""

    pass


class ReleaseError(ExcelError):
    """释放资源时一个或多个步骤失败"""

    def __init__(self, message: str = "", details: str = "", errors=None):
        super().__init__(message, details)
        self.errors = list(errors or [])


def friendly_error_message(error_msg: str) -> str:
    """将 Excel / 文件系统的底层错误信息转换为用户友好的中文提示

    Args:
        error_msg: 原始错误信息

    Returns:
        str: 用户友好的错误提示
    """
    lowered = error_msg.lower()

    lock_keywords = [
        "being used by another process",
        "is locked",
        "sharing violation",
        "cannot access",
    ]
    if any(k in lowered for k in lock_keywords):
        return "文件已被其他程序占用，请关闭后重试。"

    permission_keywords = ["permission denied", "access is denied", "errno 13"]
    if any(k in lowered for k in permission_keywords):
        return "没有写入权限，请检查文件或目录权限。"

    host_keywords = [
        "invalid class string",
        "class not registered",
        "server execution failed",
    ]
    if any(k in lowered for k in host_keywords):
        return "无法启动 Excel，请确认本机已安装 Microsoft Excel。"

    if "no such file or directory" in lowered or "errno 2" in lowered:
        return "目标路径不存在，请检查目录是否正确。"

    # 默认返回原始信息
    return error_msg
