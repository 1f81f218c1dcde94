"""
Notification Center Factory

Abstract factory pattern for creating the untyped notification centers that
the typed layer wraps. This decouples application code from a specific
broadcast implementation.
"""
import atexit
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

from .adapters.memory import InMemoryNotificationCenter
from .common.config import get_notification_center_config
from .common.logger import get_logger
from .core.constants import NotificationConstants
from .core.interfaces import INotificationCenter

logger = get_logger("notification_center_factory")


class NotificationCenterFactory(ABC):
    """Abstract factory for creating notification center instances"""

    @abstractmethod
    def create_notification_center(self, config: Dict[str, Any]) -> INotificationCenter:
        """
        Create a notification center instance

        Args:
            config: Notification center configuration

        Returns:
            INotificationCenter instance
        """
        pass


class InMemoryNotificationCenterFactory(NotificationCenterFactory):
    """Factory for creating in-process notification centers"""

    def create_notification_center(self, config: Dict[str, Any]) -> INotificationCenter:
        raise_errors = config.get('raise_errors', True)
        if isinstance(raise_errors, str):
            raise_errors = raise_errors.lower() in ('true', '1', 'yes', 'on')

        center = InMemoryNotificationCenter(
            raise_errors=raise_errors,
            name=config.get('name', NotificationConstants.DEFAULT_CENTER_NAME)
        )
        logger.debug(f"Created in-memory notification center '{center.name}' (raise_errors={raise_errors})")
        return center


class NotificationCenterFactoryRegistry:
    """Registry for notification center factories"""

    _factories: Dict[str, NotificationCenterFactory] = {}

    @classmethod
    def register_factory(cls, center_type: str, factory: NotificationCenterFactory) -> None:
        """
        Register a notification center factory

        Args:
            center_type: Type identifier for the center (e.g., 'memory')
            factory: Factory instance
        """
        cls._factories[center_type] = factory
        logger.debug(f"Registered notification center factory for type: {center_type}")

    @classmethod
    def get_factory(cls, center_type: str) -> NotificationCenterFactory:
        """
        Get a factory for the specified center type

        Raises:
            ValueError: If no factory is registered for the center type
        """
        if center_type not in cls._factories:
            raise ValueError(f"No factory registered for notification center type: {center_type}")

        return cls._factories[center_type]

    @classmethod
    def create_notification_center(
        cls,
        config: Dict[str, Any],
        center_type: Optional[str] = None
    ) -> INotificationCenter:
        """
        Create a notification center using the appropriate factory

        Args:
            config: Notification center configuration
            center_type: Type of center to create (auto-detected if None)
        """
        if center_type is None:
            center_type = cls._detect_center_type(config)

        factory = cls.get_factory(center_type)
        return factory.create_notification_center(config)

    @classmethod
    def _detect_center_type(cls, config: Dict[str, Any]) -> str:
        center_type = config.get('type')
        if center_type:
            return str(center_type)

        logger.debug(f"No notification center type configured, defaulting to "
                     f"'{NotificationConstants.DEFAULT_CENTER_TYPE}'")
        return NotificationConstants.DEFAULT_CENTER_TYPE


# Register default factories
NotificationCenterFactoryRegistry.register_factory(
    NotificationConstants.DEFAULT_CENTER_TYPE, InMemoryNotificationCenterFactory()
)


def create_notification_center(
    config: Optional[Dict[str, Any]] = None,
    center_type: Optional[str] = None
) -> INotificationCenter:
    """
    Convenience function to create a notification center

    Args:
        config: Notification center configuration (loaded from the config file if None)
        center_type: Type of center to create (auto-detected if None)
    """
    if config is None:
        config = get_notification_center_config()
    return NotificationCenterFactoryRegistry.create_notification_center(config, center_type)


_default_queue: Optional[ThreadPoolExecutor] = None
_queue_lock = threading.Lock()


def get_default_queue() -> ThreadPoolExecutor:
    """
    Shared executor for queued delivery

    Sized by `notification_center.queue_workers`; shut down at interpreter exit.
    """
    global _default_queue
    with _queue_lock:
        if _default_queue is None:
            workers = get_notification_center_config().get(
                'queue_workers', NotificationConstants.DEFAULT_QUEUE_WORKERS
            )
            _default_queue = ThreadPoolExecutor(
                max_workers=int(workers),
                thread_name_prefix=NotificationConstants.QUEUE_THREAD_PREFIX
            )
            atexit.register(_default_queue.shutdown, wait=True)
            logger.debug(f"Created default delivery queue with {workers} workers")
        return _default_queue
