"""
类型化通知层的核心数据模型。

此模块定义了底层无类型通知中心传递的通知信封，以及观察者句柄。
"""
from concurrent.futures import Executor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class Notification(BaseModel):
    """
    无类型通知信封，由底层通知中心投递给每个观察者。

    名称是唯一的路由依据，载荷以松散结构的 user_info 字典承载。
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    # 通知名称，底层通知中心按此键路由
    name: str

    # 发布通知的对象，可为 None
    sender: Any = None

    # 松散结构的附加数据
    user_info: Optional[Dict[str, Any]] = None

    # 通知的唯一标识符
    notification_id: str = Field(default_factory=lambda: str(uuid4()))

    # 发布时间，ISO 8601格式
    posted_at_utc: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class ObserverHandle(BaseModel):
    """
    底层通知中心在添加观察者时返回的不透明句柄。

    只用于之后调用 remove_observer。
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    observer_id: str = Field(default_factory=lambda: str(uuid4()))

    # None 表示观察所有名称
    name: Optional[str] = None

    # 按身份匹配的发送者过滤条件
    sender: Any = None

    # None 表示在发布线程上同步投递
    queue: Optional[Executor] = None

    callback: Callable[[Notification], Any]

    def matches(self, notification: Notification) -> bool:
        """判断此观察者是否应当收到给定通知"""
        if self.name is not None and self.name != notification.name:
            return False
        if self.sender is not None and self.sender is not notification.sender:
            return False
        return True


def build_notification(
    name: str,
    sender: Any = None,
    user_info: Optional[Dict[str, Any]] = None
) -> Notification:
    """
    构建通知信封。

    Args:
        name: 通知名称
        sender: 发布通知的对象
        user_info: 附加数据，会被浅拷贝

    Returns:
        通知信封对象
    """
    return Notification(
        name=name,
        sender=sender,
        user_info=dict(user_info) if user_info is not None else None
    )
