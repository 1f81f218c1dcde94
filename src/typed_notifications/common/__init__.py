"""
公共模块

包含共享的日志和配置功能。
"""
from .logger import get_logger
from .config import (
    load_config,
    get_config,
    get_notification_center_config,
    get_logging_config,
)

__all__ = [
    "get_logger",
    "load_config",
    "get_config",
    "get_notification_center_config",
    "get_logging_config",
]
