"""
工具模块 - 配置管理与日志
"""

from .config import Config
from .logger import get_logger, LoggerManager

__all__ = [
    # Config
    "Config",
    # Logger
    "get_logger",
    "LoggerManager",
]
