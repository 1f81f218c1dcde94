"""
通用通知订阅管理器

为一个观察者对象集中管理多个类型化订阅，统一建立和统一取消。
"""
import threading
from concurrent.futures import Executor
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Union

from ..common.logger import get_logger
from .constants import NotificationConstants
from .token import NotificationToken

if TYPE_CHECKING:
    from ..typed_center import TypedNotificationCenter

logger = get_logger("subscription_manager")


class NotificationSubscriptionManager:
    """
    通用的通知订阅管理器

    主要职责：
    1. 注册 观察目标 -> 处理器 的映射关系
    2. 在类型化通知中心上建立订阅并持有订阅句柄
    3. 控制订阅生命周期：取消注册、整体清除

    管理器被回收时，它持有的句柄随之被回收，观察者也会被自动移除。
    处理器是所属对象的绑定方法时，通知中心只弱引用该对象，
    对象与管理器之间的循环引用在垃圾回收时一并释放。
    """

    def __init__(
        self,
        typed_center: "TypedNotificationCenter",
        owner_name: Optional[str] = None,
        queue: Optional[Executor] = None
    ):
        """
        初始化通知订阅管理器

        Args:
            typed_center: TypedNotificationCenter 实例
            owner_name: 订阅者名称，用于日志标识
            queue: 所有订阅默认使用的执行器，None 表示同步投递
        """
        self.typed_center = typed_center
        self.owner_name = owner_name or NotificationConstants.DEFAULT_OWNER_NAME
        self.queue = queue

        # 目标处理器映射：target -> handler
        self.target_handlers: Dict[Any, Callable] = {}

        # 已建立的订阅：target -> token
        self.tokens: Dict[Any, NotificationToken] = {}

        self._lock = threading.Lock()

    def register_handler(self, target: Union[str, type], handler: Callable) -> None:
        """
        注册观察目标的处理器

        Args:
            target: 变体类、目录类或通知名称
            handler: 处理函数，签名: (notification, sender) -> None
        """
        with self._lock:
            self.target_handlers[target] = handler
        logger.debug(f"[{self.owner_name}] 已注册处理器: {self._label(target)}")

    def register_handlers(self, handlers: Dict[Union[str, type], Callable]) -> None:
        """
        批量注册处理器

        Args:
            handlers: 观察目标到处理器的映射字典
        """
        for target, handler in handlers.items():
            self.register_handler(target, handler)

    def setup_subscriptions(self) -> None:
        """
        为所有已注册且尚未订阅的目标建立订阅

        任一目标订阅失败时（例如名称与期望类型不符），
        本次新建立的订阅全部撤销后重新抛出异常。
        """
        if not self.target_handlers:
            logger.warning(f"[{self.owner_name}] 没有注册的处理器")
            return

        created: List[Any] = []
        with self._lock:
            try:
                for target, handler in self.target_handlers.items():
                    if target in self.tokens and self.tokens[target].is_active:
                        continue
                    self.tokens[target] = self.typed_center.add_observer(
                        target, handler, queue=self.queue
                    )
                    created.append(target)
                    logger.debug(f"[{self.owner_name}] 成功建立订阅: {self._label(target)}")
            except Exception as e:
                logger.error(f"[{self.owner_name}] 建立订阅失败: {e}")
                for target in created:
                    self.tokens.pop(target).cancel()
                raise

    def get_registered_targets(self) -> list:
        """获取已注册的观察目标列表"""
        return list(self.target_handlers.keys())

    def is_subscribed(self, target: Union[str, type]) -> bool:
        token = self.tokens.get(target)
        return token is not None and token.is_active

    def unregister_handler(self, target: Union[str, type]) -> bool:
        """
        取消注册处理器，并取消对应的订阅

        Returns:
            bool: 是否成功取消注册
        """
        with self._lock:
            if target not in self.target_handlers:
                return False
            del self.target_handlers[target]
            token = self.tokens.pop(target, None)

        if token is not None:
            token.cancel()
        logger.debug(f"[{self.owner_name}] 已取消注册处理器: {self._label(target)}")
        return True

    def clear_handlers(self) -> None:
        """取消所有订阅并清除所有处理器"""
        with self._lock:
            tokens = list(self.tokens.values())
            self.tokens.clear()
            self.target_handlers.clear()

        for token in tokens:
            token.cancel()
        logger.debug(f"[{self.owner_name}] 已清除所有处理器")

    @staticmethod
    def _label(target: Union[str, type]) -> str:
        return target if isinstance(target, str) else getattr(target, "__name__", repr(target))
