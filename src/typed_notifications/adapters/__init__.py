"""
通知中心适配器包

此包包含底层通知中心的实现。
"""

from .memory import InMemoryNotificationCenter, default_center, reset_default_center

__all__ = ["InMemoryNotificationCenter", "default_center", "reset_default_center"]
