"""
应用程序设置

管理 Excel 包装器的配置设置。
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Dict

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "xl_office.json"


@dataclass
class Settings:
    """应用程序设置数据类"""

    engine: str = "auto"  # auto / com / openpyxl
    default_sheet: int = 1  # 打开文档时默认选择的工作表（从1开始）
    visible: bool = False  # 是否显示 Excel 窗口（仅 COM 引擎）
    display_alerts: bool = False  # 是否显示 Excel 弹窗（仅 COM 引擎）
    save_to_open_path: bool = False  # 新建文档调用 save() 时是否保存到打开时的路径
    log_level: str = "INFO"  # LoggerUtils.setup_logging() 未指定级别时使用

    @classmethod
    def from_dict(cls, data: Dict) -> "Settings":
        """从字典创建设置"""
        return cls(**data)


class Config:
    """配置管理器"""

    def __init__(self, config_file: str = DEFAULT_CONFIG_FILE):
        """
        初始化配置管理器

        Args:
            config_file: 配置文件路径
        """
        self.config_file = config_file
        self.settings = self._load_settings()

    def _load_settings(self) -> Settings:
        """
        加载设置

        Returns:
            Settings: 设置对象
        """
        if os.path.exists(self.config_file):
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                    settings = Settings.from_dict(data)
                    logger.info(f"成功加载配置文件: {self.config_file}")
                    return settings
            except (OSError, ValueError, TypeError) as e:
                logger.warning(f"加载配置文件失败: {e}，使用默认设置")
        else:
            logger.info("配置文件不存在，使用默认设置")

        return Settings()
