"""
类型化通知中心

在无类型、按名称路由的通知中心之上恢复载荷的类型：
发布时把类型化的通知实例注入 user_info 的保留键，
投递时再把它取出并校验类型，然后交给观察者。
"""
import asyncio
import inspect
import weakref
from concurrent.futures import Executor
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Type, Union

from .adapters.memory import default_center
from .common.logger import get_logger
from .core.catalog import NotificationEnum, NotificationRegistry, get_registry
from .core.constants import ErrorMessages, NotificationConstants
from .core.exceptions import (
    MissingPayloadError,
    ObserverError,
    PayloadTypeMismatchError,
    PostError,
)
from .core.interfaces import INotificationCenter
from .core.models import Notification, ObserverHandle
from .core.token import NotificationToken

logger = get_logger("typed_center")

# 观察目标：变体类、目录类或通知名称
ObserveTarget = Union[str, Type[NotificationEnum]]

# 观察者签名: (notification, sender) -> None，可以是协程函数
NotificationHandler = Callable[[Any, Any], Any]


def extract_payload(notification: Notification, expected: Type[NotificationEnum]) -> NotificationEnum:
    """
    从无类型通知中取出类型化载荷

    Args:
        notification: 底层通知中心投递的通知
        expected: 观察者期望的载荷类型

    Returns:
        类型化的通知实例

    Raises:
        MissingPayloadError: user_info 中没有保留键
        PayloadTypeMismatchError: 载荷不是 expected 的实例
    """
    user_info = notification.user_info or {}
    if NotificationConstants.PAYLOAD_KEY not in user_info:
        raise MissingPayloadError(
            f"{ErrorMessages.MISSING_PAYLOAD}: '{notification.name}'", name=notification.name
        )

    payload = user_info[NotificationConstants.PAYLOAD_KEY]
    if not isinstance(payload, expected):
        raise PayloadTypeMismatchError(
            f"{ErrorMessages.TYPE_MISMATCH}: '{notification.name}' 承载 {type(payload).__name__}，"
            f"观察者期望 {expected.__name__}",
            name=notification.name,
            expected=expected,
            actual=type(payload),
        )
    return payload


class TypedNotificationCenter:
    """
    类型化通知中心

    包装任意 INotificationCenter，名称与载荷类型的对应关系在添加观察者时
    通过注册表检查一次，投递时再做一次防御性检查。
    """

    def __init__(
        self,
        center: Optional[INotificationCenter] = None,
        registry: Optional[NotificationRegistry] = None
    ):
        """
        Args:
            center: 底层通知中心，默认为进程级默认通知中心
            registry: 通知名称注册表，默认为进程级注册表
        """
        self.center = center if center is not None else default_center()
        self.registry = registry if registry is not None else get_registry()

        # 持有尚未完成的协程任务，避免被提前回收
        self._pending_tasks: Set[asyncio.Task] = set()

    def post(
        self,
        notification: NotificationEnum,
        sender: Any = None,
        user_info: Optional[Dict[str, Any]] = None
    ) -> int:
        """
        发布类型化通知

        Args:
            notification: 目录中某个变体的实例
            sender: 发布通知的对象
            user_info: 额外的无类型附加数据，不能包含保留键

        Returns:
            通知被分发到的观察者数量
        """
        if not isinstance(notification, NotificationEnum) or not notification.notification_name:
            raise PostError(f"{ErrorMessages.INVALID_NOTIFICATION}: {notification!r}")

        payload_key = NotificationConstants.PAYLOAD_KEY
        if user_info and payload_key in user_info:
            raise PostError(f"user_info 不能包含保留键 '{payload_key}'")

        info = dict(user_info or {})
        info[payload_key] = notification

        name = notification.notification_name
        logger.debug(f"发布类型化通知: {name}")
        return self.center.post(name, sender=sender, user_info=info)

    def add_observer(
        self,
        target: ObserveTarget,
        handler: NotificationHandler,
        sender: Any = None,
        queue: Optional[Executor] = None,
        expected: Optional[Type[NotificationEnum]] = None
    ) -> NotificationToken:
        """
        添加类型化观察者

        Args:
            target: 变体类、目录类（订阅目录中当前所有变体）或通知名称
            handler: 观察者函数，签名 (notification, sender)，可以是协程函数
            sender: 只接收该对象发布的通知
            queue: 投递所用的执行器，None 表示同步投递
            expected: 观察者期望的载荷类型；按名称订阅时用于注册期检查

        Returns:
            订阅句柄，取消或被回收时自动移除观察者

        Raises:
            UnknownNotificationError: 按名称订阅但名称未注册
            PayloadTypeMismatchError: 名称绑定的变体与 expected 不符
            ObserverError: 目标无效或处理器不可调用
        """
        if not callable(handler):
            raise ObserverError(f"观察者不可调用: {handler!r}")

        bindings = self._resolve_target(target, expected)

        handles = []
        try:
            for name, payload_type in bindings:
                owned: List[ObserverHandle] = []
                callback = self._make_callback(payload_type, handler, owned)
                handle = self.center.add_observer(name, callback, sender=sender, queue=queue)
                owned.append(handle)
                handles.append(handle)
        except Exception:
            for handle in handles:
                self.center.remove_observer(handle)
            raise

        label = target if isinstance(target, str) else target.__name__
        logger.debug(f"已添加类型化观察者: {label} ({len(handles)} 个名称)")
        return NotificationToken(self.center, handles, label=label)

    def observe(
        self,
        target: ObserveTarget,
        sender: Any = None,
        queue: Optional[Executor] = None,
        expected: Optional[Type[NotificationEnum]] = None
    ) -> Callable[[NotificationHandler], NotificationHandler]:
        """
        装饰器形式的 add_observer，订阅句柄保存在函数的 notification_token 属性上
        """
        def decorator(func: NotificationHandler) -> NotificationHandler:
            func.notification_token = self.add_observer(
                target, func, sender=sender, queue=queue, expected=expected
            )
            return func
        return decorator

    def _resolve_target(
        self,
        target: ObserveTarget,
        expected: Optional[Type[NotificationEnum]]
    ) -> List[Tuple[str, Type[NotificationEnum]]]:
        """把观察目标解析为 (通知名称, 载荷类型) 列表"""
        if isinstance(target, str):
            variant = self.registry.resolve(target, expected or NotificationEnum)
            return [(target, variant)]

        if not isinstance(target, type) or not issubclass(target, NotificationEnum) \
                or target is NotificationEnum:
            raise ObserverError(f"{ErrorMessages.INVALID_TARGET}: {target!r}")

        if expected is not None and not issubclass(target, expected):
            raise PayloadTypeMismatchError(
                f"{ErrorMessages.TYPE_MISMATCH}: {target.__name__} 不是 {expected.__name__}",
                name=target.notification_name,
                expected=expected,
                actual=target,
            )

        if self.registry.is_catalog(target):
            variants = self.registry.variants_of(target)
            if not variants:
                raise ObserverError(f"{ErrorMessages.EMPTY_CATALOG}: {target.__name__}")
            return [(variant.notification_name, variant) for variant in variants]

        if self.registry.is_variant(target):
            return [(target.notification_name, target)]

        raise ObserverError(f"{ErrorMessages.INVALID_TARGET}: {target!r}")

    def _make_callback(
        self,
        payload_type: Type[NotificationEnum],
        handler: NotificationHandler,
        owned: List[ObserverHandle]
    ) -> Callable[[Notification], None]:
        """
        把类型化观察者包装成底层通知中心的回调

        绑定方法只以弱引用持有，通知中心不会让方法所属的对象一直存活；
        对象被回收后，owned 中的底层句柄随即被移除。
        """
        is_async = inspect.iscoroutinefunction(handler)
        center = self.center

        def release(_ref: Any = None) -> None:
            for handle in list(owned):
                center.remove_observer(handle)
            owned.clear()

        if inspect.ismethod(handler):
            method_ref = weakref.WeakMethod(handler, release)
            label = handler.__qualname__
        else:
            def method_ref() -> NotificationHandler:
                return handler
            label = getattr(handler, "__qualname__", repr(handler))

        def deliver(notification: Notification) -> None:
            target = method_ref()
            if target is None:
                logger.debug(f"观察者 {label} 的所属对象已被回收，跳过通知 {notification.name}")
                release()
                return
            payload = extract_payload(notification, payload_type)
            if is_async:
                self._schedule(target(payload, notification.sender), notification.name)
            else:
                target(payload, notification.sender)

        return deliver

    def _schedule(self, coroutine, name: str) -> None:
        """在运行中的事件循环上调度协程观察者，没有事件循环时直接运行"""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(coroutine)
            return

        task = loop.create_task(coroutine)
        self._pending_tasks.add(task)

        def _done(finished: asyncio.Task) -> None:
            self._pending_tasks.discard(finished)
            if not finished.cancelled() and finished.exception() is not None:
                logger.error(f"异步观察者处理通知 {name} 时出错: {finished.exception()}")

        task.add_done_callback(_done)


_default_typed_center: Optional[TypedNotificationCenter] = None


def default_typed_center() -> TypedNotificationCenter:
    """获取包装进程级默认通知中心的类型化通知中心"""
    global _default_typed_center
    if _default_typed_center is None or _default_typed_center.center is not default_center():
        _default_typed_center = TypedNotificationCenter()
    return _default_typed_center


def post(
    notification: NotificationEnum,
    sender: Any = None,
    user_info: Optional[Dict[str, Any]] = None
) -> int:
    """在默认通知中心上发布类型化通知"""
    return default_typed_center().post(notification, sender=sender, user_info=user_info)


def add_observer(
    target: ObserveTarget,
    handler: NotificationHandler,
    sender: Any = None,
    queue: Optional[Executor] = None,
    expected: Optional[Type[NotificationEnum]] = None
) -> NotificationToken:
    """在默认通知中心上添加类型化观察者"""
    return default_typed_center().add_observer(
        target, handler, sender=sender, queue=queue, expected=expected
    )
