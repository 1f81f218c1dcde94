"""
Typed Notifications

构建在按名称路由的无类型通知中心之上的类型化发布/订阅层。
"""

# 导出核心接口与模型
from .core.interfaces import INotificationCenter
from .core.models import Notification, ObserverHandle, build_notification
from .core.constants import ErrorMessages, NotificationConstants

# 导出通知目录
from .core.catalog import NotificationEnum, NotificationRegistry, get_registry

# 导出订阅组件
from .core.token import NotificationToken
from .core.subscription_manager import NotificationSubscriptionManager

# 导出异常
from .core.exceptions import (
    DeliveryError,
    MissingPayloadError,
    NotificationError,
    ObserverError,
    PayloadTypeMismatchError,
    PostError,
    RegistrationError,
    UnknownNotificationError,
)

# 导出实现
from .adapters.memory import InMemoryNotificationCenter, default_center, reset_default_center

# 导出类型化通知中心
from .typed_center import (
    TypedNotificationCenter,
    add_observer,
    default_typed_center,
    extract_payload,
    post,
)

# 导出工厂模式
from .factory import (
    NotificationCenterFactory,
    InMemoryNotificationCenterFactory,
    NotificationCenterFactoryRegistry,
    create_notification_center,
    get_default_queue,
)

# 导出common模块组件
from .common.logger import get_logger
from .common.config import load_config, get_notification_center_config

# 版本信息
__version__ = "0.1.0"

__all__ = [
    # 核心接口
    "INotificationCenter",
    "Notification",
    "ObserverHandle",
    "build_notification",

    # 通知目录
    "NotificationEnum",
    "NotificationRegistry",
    "get_registry",

    # 类型化通知中心
    "TypedNotificationCenter",
    "default_typed_center",
    "extract_payload",
    "post",
    "add_observer",

    # 订阅组件
    "NotificationToken",
    "NotificationSubscriptionManager",

    # 实现
    "InMemoryNotificationCenter",
    "default_center",
    "reset_default_center",

    # 工厂模式
    "NotificationCenterFactory",
    "InMemoryNotificationCenterFactory",
    "NotificationCenterFactoryRegistry",
    "create_notification_center",
    "get_default_queue",

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

    # 公共组件
    "get_logger",
    "load_config",
    "get_notification_center_config",
]
