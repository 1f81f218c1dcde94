"""
内存通知中心适配器

基于进程内字典实现的按名称路由的通知中心，是类型化层默认包装的底层广播机制。
"""
import threading
from concurrent.futures import Executor, Future
from typing import Any, Callable, Dict, List, Optional

from ..common.config import get_notification_center_config
from ..common.logger import get_logger
from ..core.constants import ErrorMessages, NotificationConstants
from ..core.exceptions import DeliveryError, ObserverError, PostError
from ..core.interfaces import INotificationCenter
from ..core.models import Notification, ObserverHandle, build_notification

logger = get_logger("memory_center")


class InMemoryNotificationCenter(INotificationCenter):
    """
    内存实现的通知中心

    - 同一名称可以注册多个独立的观察者，按注册顺序投递
    - 发布时对匹配的观察者做快照，回调中增删观察者不影响本次投递
    - 观察者可以指定执行器，通知将通过 executor.submit 排队投递
    """

    def __init__(
        self,
        raise_errors: bool = True,
        name: str = NotificationConstants.DEFAULT_CENTER_NAME
    ):
        """
        初始化内存通知中心

        Args:
            raise_errors: 同步投递时观察者抛出的异常是否在所有观察者执行完后
                          以 DeliveryError 重新抛给发布者；否则只记录日志
            name: 通知中心名称，用于日志标识
        """
        self.raise_errors = raise_errors
        self.name = name

        # observer_id -> handle，dict 保持插入顺序
        self._observers: Dict[str, ObserverHandle] = {}
        self._lock = threading.RLock()

    def add_observer(
        self,
        name: Optional[str],
        callback: Callable[[Notification], Any],
        sender: Any = None,
        queue: Optional[Executor] = None
    ) -> ObserverHandle:
        if not callable(callback):
            raise ObserverError(f"观察者回调不可调用: {callback!r}")
        if name is not None and (not isinstance(name, str) or not name):
            raise ObserverError(f"{ErrorMessages.EMPTY_NAME}: {name!r}")

        handle = ObserverHandle(name=name, sender=sender, queue=queue, callback=callback)
        with self._lock:
            self._observers[handle.observer_id] = handle

        logger.debug(f"[{self.name}] 已添加观察者 {handle.observer_id}: 名称={name or '*'}")
        return handle

    def remove_observer(self, handle: ObserverHandle) -> bool:
        with self._lock:
            removed = self._observers.pop(handle.observer_id, None)

        if removed is None:
            return False
        logger.debug(f"[{self.name}] 已移除观察者 {handle.observer_id}: 名称={handle.name or '*'}")
        return True

    def has_observer(self, handle: ObserverHandle) -> bool:
        with self._lock:
            return handle.observer_id in self._observers

    def post(
        self,
        name: str,
        sender: Any = None,
        user_info: Optional[Dict[str, Any]] = None
    ) -> int:
        if not isinstance(name, str) or not name:
            raise PostError(f"{ErrorMessages.EMPTY_NAME}: {name!r}")

        notification = build_notification(name=name, sender=sender, user_info=user_info)

        with self._lock:
            targets = [h for h in self._observers.values() if h.matches(notification)]

        if not targets:
            logger.debug(f"[{self.name}] 通知 {name} 没有观察者")
            return 0

        errors: List[BaseException] = []
        for handle in targets:
            if handle.queue is not None:
                self._enqueue(handle, notification)
                continue
            try:
                handle.callback(notification)
            except Exception as e:
                logger.error(f"[{self.name}] 观察者 {handle.observer_id} 处理通知 {name} 时出错: {e}")
                errors.append(e)

        logger.debug(f"[{self.name}] 已发布通知 {name} 给 {len(targets)} 个观察者")

        if errors and self.raise_errors:
            if len(errors) == 1:
                raise DeliveryError(
                    f"{ErrorMessages.DELIVERY_FAILED}: {name}", name=name, errors=errors
                ) from errors[0]
            raise DeliveryError(
                f"{ErrorMessages.DELIVERY_FAILED}: {name} ({len(errors)} 个)", name=name, errors=errors
            )

        return len(targets)

    def _enqueue(self, handle: ObserverHandle, notification: Notification) -> None:
        """通过观察者的执行器排队投递"""
        try:
            future = handle.queue.submit(handle.callback, notification)
        except RuntimeError as e:
            # 执行器已关闭
            logger.warning(f"[{self.name}] 无法排队投递通知 {notification.name}: {e}")
            return

        def _log_failure(done: Future) -> None:
            if done.cancelled():
                logger.warning(f"[{self.name}] 排队投递被取消: {notification.name}")
                return
            error = done.exception()
            if error is not None:
                logger.error(
                    f"[{self.name}] 观察者 {handle.observer_id} 异步处理通知 {notification.name} 时出错: {error}"
                )

        future.add_done_callback(_log_failure)

    def observer_count(self, name: Optional[str] = None) -> int:
        """
        统计观察者数量

        Args:
            name: 只统计观察该名称的观察者（含通配观察者），None 表示全部
        """
        with self._lock:
            if name is None:
                return len(self._observers)
            return sum(1 for h in self._observers.values() if h.name is None or h.name == name)

    def remove_all_observers(self) -> None:
        with self._lock:
            self._observers.clear()
        logger.debug(f"[{self.name}] 已移除所有观察者")


_default_center: Optional[InMemoryNotificationCenter] = None
_default_lock = threading.Lock()


def default_center() -> InMemoryNotificationCenter:
    """获取进程级默认通知中心"""
    global _default_center
    with _default_lock:
        if _default_center is None:
            config = get_notification_center_config()
            _default_center = InMemoryNotificationCenter(
                raise_errors=config.get("raise_errors", True)
            )
            logger.debug("已创建进程级默认通知中心")
        return _default_center


def reset_default_center() -> None:
    """丢弃进程级默认通知中心（仅用于测试）"""
    global _default_center
    with _default_lock:
        _default_center = None
