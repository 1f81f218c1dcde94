"""
类型化通知层的自定义异常定义。
"""
from typing import List, Optional


class NotificationError(Exception):
    """类型化通知层的基础异常类"""
    pass


class RegistrationError(NotificationError):
    """注册通知变体时违反名称或目录约束"""
    pass


class UnknownNotificationError(NotificationError):
    """按名称查找时通知名称尚未注册"""
    pass


class PayloadTypeMismatchError(NotificationError, TypeError):
    """通知载荷类型与观察者期望的类型不一致"""

    def __init__(self, message: str, name: Optional[str] = None,
                 expected: Optional[type] = None, actual: Optional[type] = None):
        super().__init__(message)
        self.name = name
        self.expected = expected
        self.actual = actual


class MissingPayloadError(NotificationError):
    """通知的 user_info 中没有类型化载荷"""

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message)
        self.name = name


class PostError(NotificationError):
    """发布通知时发生的异常"""
    pass


class ObserverError(NotificationError):
    """添加或移除观察者时发生的异常"""
    pass


class DeliveryError(NotificationError):
    """同步投递时一个或多个观察者抛出异常"""

    def __init__(self, message: str, name: Optional[str] = None,
                 errors: Optional[List[BaseException]] = None):
        super().__init__(message)
        self.name = name
        self.errors = list(errors or [])
