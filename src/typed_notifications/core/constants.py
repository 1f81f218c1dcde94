"""
类型化通知层使用的常量定义。
"""


class NotificationConstants:
    """通知相关常量"""
    # user_info 中承载类型化通知实例的保留键
    PAYLOAD_KEY = "_$key$_"

    # 通知名称中目录名与变体名之间的分隔符
    NAME_SEPARATOR = "."

    # 默认通知中心类型与名称
    DEFAULT_CENTER_TYPE = "memory"
    DEFAULT_CENTER_NAME = "default"

    # 队列投递线程池默认大小
    DEFAULT_QUEUE_WORKERS = 4
    QUEUE_THREAD_PREFIX = "notification-queue"

    # 默认订阅者名称，用于日志标识
    DEFAULT_OWNER_NAME = "unknown_owner"


class ErrorMessages:
    """错误消息常量"""
    EMPTY_NAME = "通知名称不能为空"
    DUPLICATE_NAME = "通知名称已被其他变体注册"
    SEALED_CATALOG = "通知目录已封闭，不能再添加变体"
    VARIANT_SUBCLASS = "通知变体不能被继承"
    CATALOG_INSTANTIATION = "不能直接实例化通知目录，请使用其中的变体"
    UNKNOWN_NAME = "未注册的通知名称"
    TYPE_MISMATCH = "通知载荷类型与观察者期望的类型不匹配"
    MISSING_PAYLOAD = "通知中缺少类型化载荷"
    INVALID_NOTIFICATION = "只能发布通知目录中的变体实例"
    INVALID_TARGET = "无效的观察目标"
    EMPTY_CATALOG = "通知目录中没有任何变体"
    DELIVERY_FAILED = "通知投递过程中观察者抛出异常"
