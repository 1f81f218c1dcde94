"""
日志系统模块

此模块为类型化通知层提供统一的日志记录功能，支持控制台和文件输出，
并可通过JSON格式记录结构化信息。
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler

from pythonjsonlogger import jsonlogger

# 默认日志格式
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# 默认日志级别
DEFAULT_LOG_LEVEL = logging.INFO

# 默认日志目录
DEFAULT_LOG_DIR = "logs"

# 所有模块日志器的公共前缀
ROOT_LOGGER_NAME = "typed_notifications"

# 全局标记，确保只初始化一次
_logging_configured = False


def _configure_logging(
    log_level=DEFAULT_LOG_LEVEL,
    log_format=DEFAULT_LOG_FORMAT,
    json_format=DEFAULT_JSON_FORMAT,
    log_to_console=True,
    log_to_file=False,
    log_dir=DEFAULT_LOG_DIR,
    log_file_name="typed_notifications.log",
    log_file_max_size=10 * 1024 * 1024,  # 10MB
    log_file_backup_count=5,
    use_rotating_file=True,
    use_json_formatter=False,
):
    """
    配置日志系统

    只配置包自身的日志器，不触碰宿主应用的根日志器。

    Args:
        log_level: 日志级别
        log_format: 日志格式字符串
        json_format: JSON日志格式字符串
        log_to_console: 是否输出到控制台
        log_to_file: 是否输出到文件
        log_dir: 日志文件目录
        log_file_name: 日志文件名
        log_file_max_size: 日志文件最大大小（字节）
        log_file_backup_count: 日志文件备份数量
        use_rotating_file: 是否使用滚动文件
        use_json_formatter: 是否使用JSON格式
    """
    global _logging_configured

    if _logging_configured:
        return

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(log_level)

    # 清除已有处理器
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    if use_json_formatter:
        formatter = jsonlogger.JsonFormatter(json_format)
    else:
        formatter = logging.Formatter(log_format)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)

    if log_to_file:
        os.makedirs(log_dir, exist_ok=True)
        log_file_path = os.path.join(log_dir, log_file_name)

        if use_rotating_file:
            file_handler = RotatingFileHandler(
                log_file_path,
                maxBytes=log_file_max_size,
                backupCount=log_file_backup_count,
                encoding="utf-8"
            )
        else:
            file_handler = TimedRotatingFileHandler(
                log_file_path,
                when="midnight",
                backupCount=log_file_backup_count,
                encoding="utf-8"
            )

        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    _logging_configured = True


def _initialize_logging():
    """初始化日志系统，基于配置文件进行一次性配置"""
    try:
        # 延迟导入避免循环依赖
        from .config import get_logging_config
        logging_config = get_logging_config()

        if logging_config:
            log_level = getattr(logging, str(logging_config.get('level', 'INFO')).upper(), logging.INFO)

            _configure_logging(
                log_level=log_level,
                log_to_console=logging_config.get('console', True),
                log_to_file=logging_config.get('to_file', False),
                log_dir=logging_config.get('dir', DEFAULT_LOG_DIR),
                log_file_name=logging_config.get('file', 'typed_notifications.log'),
                use_json_formatter=logging_config.get('use_json', False),
            )
        else:
            _configure_logging()

    except Exception as e:
        # 配置加载失败，记录错误并使用默认配置
        _configure_logging()
        logging.getLogger(ROOT_LOGGER_NAME).warning(f"加载日志配置失败，使用默认配置: {e}")


# 系统启动时进行一次性初始化
_initialize_logging()


def get_logger(name):
    """
    获取指定名称的日志记录器

    名称会被挂到包日志器之下，以便共享处理器和级别。

    Args:
        name: 日志记录器名称

    Returns:
        配置好的日志记录器
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
