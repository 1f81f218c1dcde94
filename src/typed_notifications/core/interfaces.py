"""
底层广播机制的抽象接口定义。

类型化层只依赖此接口，任何满足它的通知中心都可以被包装。
"""
from concurrent.futures import Executor
from typing import Any, Callable, Dict, Optional, Protocol

from .models import Notification, ObserverHandle


class INotificationCenter(Protocol):
    """
    按名称路由的进程内通知中心接口。

    同一名称可以有多个相互独立的观察者，投递可以同步进行，也可以交给队列。
    """

    def add_observer(
        self,
        name: Optional[str],
        callback: Callable[[Notification], Any],
        sender: Any = None,
        queue: Optional[Executor] = None
    ) -> ObserverHandle:
        """
        添加一个观察者。

        Args:
            name: 要观察的通知名称，None 表示观察所有通知
            callback: 收到通知时调用的函数，参数为通知信封
            sender: 只接收该对象发布的通知，None 表示不过滤
            queue: 投递所用的执行器，None 表示在发布线程上同步调用

        Returns:
            用于移除观察者的句柄
        """
        ...

    def remove_observer(self, handle: ObserverHandle) -> bool:
        """
        移除观察者。重复移除是安全的。

        Returns:
            是否确实移除了观察者
        """
        ...

    def has_observer(self, handle: ObserverHandle) -> bool:
        """句柄对应的观察者是否仍在通知中心中"""
        ...

    def post(
        self,
        name: str,
        sender: Any = None,
        user_info: Optional[Dict[str, Any]] = None
    ) -> int:
        """
        发布通知。

        Returns:
            通知被分发到的观察者数量
        """
        ...
