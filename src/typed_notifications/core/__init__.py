"""
类型化通知层核心模块。

此模块包含底层通知中心接口、通知信封、通知目录、订阅句柄、常量和异常。
"""

from .catalog import NotificationEnum, NotificationRegistry, get_registry, registry
from .constants import ErrorMessages, NotificationConstants
from .exceptions import (
    DeliveryError,
    MissingPayloadError,
    NotificationError,
    ObserverError,
    PayloadTypeMismatchError,
    PostError,
    RegistrationError,
    UnknownNotificationError,
)
from .interfaces import INotificationCenter
from .models import Notification, ObserverHandle, build_notification
from .subscription_manager import NotificationSubscriptionManager
from .token import NotificationToken

__all__ = [
    # 接口
    "INotificationCenter",

    # 数据模型
    "Notification",
    "ObserverHandle",
    "build_notification",

    # 通知目录
    "NotificationEnum",
    "NotificationRegistry",
    "get_registry",
    "registry",

    # 订阅
    "NotificationToken",
    "NotificationSubscriptionManager",

    # 常量
    "NotificationConstants",
    "ErrorMessages",

    # 异常
    "NotificationError",
    "RegistrationError",
    "UnknownNotificationError",
    "PayloadTypeMismatchError",
    "MissingPayloadError",
    "PostError",
    "ObserverError",
    "DeliveryError",
]
