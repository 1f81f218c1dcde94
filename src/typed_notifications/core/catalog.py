"""
通知目录

把一组封闭的、强类型的通知变体映射到字符串名称。

每个目录是 NotificationEnum 的直接子类，目录的子类即为它的变体。
变体在类创建时注册，名称冲突、继承变体等错误在那一刻被发现，
而不是等到第一次投递时。

示例::

    class AppNotifications(NotificationEnum):
        pass

    class DownloadedData(AppNotifications):
        title: str
        index: int

    DownloadedData.notification_name  # "AppNotifications.downloadedData"
"""
import threading
from typing import Any, ClassVar, Dict, List, Optional, Set, Type

from pydantic import BaseModel, ConfigDict

from ..common.logger import get_logger
from .constants import ErrorMessages, NotificationConstants
from .exceptions import (
    PayloadTypeMismatchError,
    RegistrationError,
    UnknownNotificationError,
)

logger = get_logger("catalog")


def _lower_camel(name: str) -> str:
    """把类名转换为小驼峰形式，连续的大写前缀视为一个缩写词"""
    if not name:
        return name
    upper_run = 0
    while upper_run < len(name) and name[upper_run].isupper():
        upper_run += 1
    if upper_run <= 1:
        return name[:1].lower() + name[1:]
    if upper_run == len(name):
        return name.lower()
    return name[:upper_run - 1].lower() + name[upper_run - 1:]


def _qualified(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


class NotificationRegistry:
    """
    进程级的通知名称注册表

    维护 名称 -> 变体类 的一一映射，以及每个目录的有序变体列表。
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._variants: Dict[str, type] = {}
        self._catalogs: Dict[type, List[type]] = {}
        self._sealed: Set[type] = set()

    def register_catalog(self, catalog: type) -> None:
        with self._lock:
            self._catalogs.setdefault(catalog, [])
        logger.debug(f"已注册通知目录: {catalog.__name__}")

    def is_catalog(self, cls: Any) -> bool:
        with self._lock:
            return cls in self._catalogs

    def is_variant(self, cls: Any) -> bool:
        name = getattr(cls, "notification_name", None)
        if not name:
            return False
        with self._lock:
            return self._variants.get(name) is cls

    def register(self, name: str, variant: type, catalog: type) -> None:
        """
        注册一个变体

        Args:
            name: 通知名称
            variant: 变体类
            catalog: 变体所属的目录

        Raises:
            RegistrationError: 名称为空、已被其他变体占用，或目录已封闭
        """
        if not name or not isinstance(name, str):
            raise RegistrationError(f"{ErrorMessages.EMPTY_NAME}: {variant.__name__}")

        with self._lock:
            if catalog in self._sealed:
                raise RegistrationError(
                    f"{ErrorMessages.SEALED_CATALOG}: {catalog.__name__} (变体 {variant.__name__})"
                )

            existing = self._variants.get(name)
            if existing is not None and existing is not variant:
                if _qualified(existing) != _qualified(variant):
                    raise RegistrationError(
                        f"{ErrorMessages.DUPLICATE_NAME}: '{name}' "
                        f"已绑定到 {_qualified(existing)}，不能再绑定到 {_qualified(variant)}"
                    )
                # 同一定义被重新执行（例如模块重载），以新类替换旧类
                logger.debug(f"重新定义通知变体: {name}")
                self._discard_variant(existing)

            self._variants[name] = variant
            self._catalogs.setdefault(catalog, []).append(variant)

        logger.debug(f"已注册通知变体: {name} -> {_qualified(variant)}")

    def _discard_variant(self, variant: type) -> None:
        for variants in self._catalogs.values():
            if variant in variants:
                variants.remove(variant)

    def unregister(self, name: str) -> bool:
        """取消注册一个名称，返回是否存在"""
        with self._lock:
            variant = self._variants.pop(name, None)
            if variant is None:
                return False
            self._discard_variant(variant)
        logger.debug(f"已取消注册通知变体: {name}")
        return True

    def lookup(self, name: str) -> Optional[type]:
        with self._lock:
            return self._variants.get(name)

    def resolve(self, name: str, expected: Optional[type] = None) -> type:
        """
        按名称解析变体，并检查它是否满足观察者期望的类型

        Args:
            name: 通知名称
            expected: 观察者期望收到的类型，None 表示不检查

        Returns:
            绑定到该名称的变体类

        Raises:
            UnknownNotificationError: 名称未注册
            PayloadTypeMismatchError: 变体不是 expected 的子类
        """
        variant = self.lookup(name)
        if variant is None:
            raise UnknownNotificationError(f"{ErrorMessages.UNKNOWN_NAME}: '{name}'")
        if expected is not None and not issubclass(variant, expected):
            raise PayloadTypeMismatchError(
                f"{ErrorMessages.TYPE_MISMATCH}: '{name}' 承载 {variant.__name__}，"
                f"观察者期望 {expected.__name__}",
                name=name,
                expected=expected,
                actual=variant,
            )
        return variant

    def variants_of(self, catalog: type) -> List[type]:
        with self._lock:
            return list(self._catalogs.get(catalog, []))

    def seal(self, catalog: type) -> None:
        with self._lock:
            self._sealed.add(catalog)
        logger.debug(f"通知目录已封闭: {catalog.__name__}")

    def is_sealed(self, catalog: type) -> bool:
        with self._lock:
            return catalog in self._sealed

    def names(self) -> List[str]:
        with self._lock:
            return list(self._variants.keys())

    def clear(self) -> None:
        """清空注册表（仅用于测试）"""
        with self._lock:
            self._variants.clear()
            self._catalogs.clear()
            self._sealed.clear()


# 进程级默认注册表
registry = NotificationRegistry()


def get_registry() -> NotificationRegistry:
    """获取进程级默认注册表"""
    return registry


class NotificationEnum(BaseModel):
    """
    类型化通知的基类

    直接子类声明一个通知目录；目录的子类是目录中的变体，
    各自携带经过校验、不可变的载荷字段。

    变体名称默认为 "<目录名>.<小驼峰变体名>"，
    可以通过类属性 __notification_name__ 指定。
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    # 变体的通知名称，目录本身为 None
    notification_name: ClassVar[Optional[str]] = None

    # 子类可覆盖的显式名称
    __notification_name__: ClassVar[Optional[str]] = None

    def __init__(self, **data: Any):
        cls = type(self)
        if cls is NotificationEnum or registry.is_catalog(cls):
            raise TypeError(f"{ErrorMessages.CATALOG_INSTANTIATION}: {cls.__name__}")
        super().__init__(**data)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)

        if NotificationEnum in cls.__bases__:
            registry.register_catalog(cls)
            return

        for base in cls.__bases__:
            if registry.is_variant(base):
                raise RegistrationError(
                    f"{ErrorMessages.VARIANT_SUBCLASS}: {cls.__name__} 继承自 {base.__name__}"
                )

        catalog = cls.catalog()
        explicit = cls.__dict__.get("__notification_name__")
        if explicit is not None:
            name = explicit
        else:
            name = f"{catalog.__name__}{NotificationConstants.NAME_SEPARATOR}{_lower_camel(cls.__name__)}"

        registry.register(name, cls, catalog)
        cls.notification_name = name

    @classmethod
    def catalog(cls) -> Type["NotificationEnum"]:
        """返回此类所属的目录（目录本身返回自身）"""
        for klass in cls.__mro__:
            if isinstance(klass, type) and NotificationEnum in klass.__bases__:
                return klass
        raise TypeError(f"{cls.__name__} 不属于任何通知目录")

    @classmethod
    def variants(cls) -> List[Type["NotificationEnum"]]:
        """按定义顺序列出目录中的所有变体"""
        return registry.variants_of(cls.catalog())

    @classmethod
    def names(cls) -> List[str]:
        return [variant.notification_name for variant in cls.variants()]

    @classmethod
    def variant_for(cls, name: str) -> Type["NotificationEnum"]:
        """
        在本目录内按名称解析变体

        Raises:
            UnknownNotificationError: 名称未注册
            PayloadTypeMismatchError: 名称属于其他目录
        """
        return registry.resolve(name, cls.catalog())

    @classmethod
    def seal(cls) -> None:
        """封闭目录，之后再定义变体会抛出 RegistrationError"""
        registry.seal(cls.catalog())

    @classmethod
    def is_sealed(cls) -> bool:
        return registry.is_sealed(cls.catalog())

    @classmethod
    def is_catalog_root(cls) -> bool:
        return registry.is_catalog(cls)
