"""
订阅句柄

把观察者的生命周期与句柄绑定：句柄被取消或被垃圾回收时，
底层通知中心中的观察者会被自动移除。
"""
import threading
import weakref
from typing import List, Optional, Sequence

from ..common.logger import get_logger
from .interfaces import INotificationCenter
from .models import ObserverHandle

logger = get_logger("token")


def _remove_handles(center: INotificationCenter, handles: List[ObserverHandle], label: str) -> None:
    # 由 weakref.finalize 调用，不能引用令牌本身
    removed = 0
    for handle in handles:
        if center.remove_observer(handle):
            removed += 1
    handles.clear()
    logger.debug(f"已移除观察者 {removed} 个: {label}")


class NotificationToken:
    """
    观察者订阅句柄

    持有一个或多个底层观察者句柄。调用 cancel()、退出 with 块，
    或令牌不再被引用时，这些观察者都会被移除。
    """

    def __init__(
        self,
        center: INotificationCenter,
        handles: Sequence[ObserverHandle],
        label: Optional[str] = None
    ):
        self.center = center
        self.label = label or ",".join(str(h.name) for h in handles)
        self._handles: List[ObserverHandle] = list(handles)
        self._lock = threading.Lock()
        self._finalizer = weakref.finalize(self, _remove_handles, center, self._handles, self.label)

    @property
    def handles(self) -> List[ObserverHandle]:
        """仍在通知中心中的底层句柄，已被直接移除的句柄不计入"""
        if not self._finalizer.alive:
            return []
        return [h for h in list(self._handles) if self.center.has_observer(h)]

    @property
    def is_active(self) -> bool:
        return len(self.handles) > 0

    def cancel(self) -> None:
        """移除所有观察者，重复调用是安全的"""
        with self._lock:
            self._finalizer()

    def __enter__(self) -> "NotificationToken":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cancel()

    def __len__(self) -> int:
        return len(self.handles)

    def __repr__(self) -> str:
        live = len(self.handles)
        state = "active" if live else "cancelled"
        return f"<NotificationToken {self.label!r} handles={live} {state}>"
