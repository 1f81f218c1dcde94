"""
配置管理模块

从YAML文件加载通知中心和日志配置，支持环境变量插值。
"""
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict

import yaml

# 此模块在日志系统初始化期间被导入，不能经由 get_logger 获取日志器
logger = logging.getLogger("typed_notifications.config")

DEFAULT_CONFIG_PATH = "config/config.yml"


def _get_config_path() -> Path:
    """获取配置文件路径"""
    config_path = Path(os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH))
    if not config_path.exists():
        config_path = Path(DEFAULT_CONFIG_PATH)
    return config_path


def _resolve_env_vars(value: str) -> str:
    """解析环境变量 ${VAR:default} 或 ${VAR:-default}"""
    if not isinstance(value, str):
        return value

    pattern = re.compile(r'\${([^}:]+)(?::(-?)([^}]*?))?}')

    def replace_var(match):
        var_name, dash, default = match.groups()
        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value
        return default if default is not None else ""

    return pattern.sub(replace_var, value)


def _resolve_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """递归解析字典中的环境变量并转换数据类型"""
    result = {}
    for key, value in data.items():
        if isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, str):
            resolved_value = _resolve_env_vars(value)
            if resolved_value.isdigit():
                result[key] = int(resolved_value)
            elif resolved_value.lower() in ('true', 'false'):
                result[key] = resolved_value.lower() == 'true'
            else:
                result[key] = resolved_value
        else:
            result[key] = value
    return result


def load_config() -> Dict[str, Any]:
    """加载配置文件，文件不存在或无法解析时返回空字典"""
    config_file = _get_config_path()
    if not config_file.exists():
        logger.debug(f"配置文件不存在: {config_file}")
        return {}

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"加载配置失败: {e}")
        return {}

    if not isinstance(config, dict):
        logger.warning(f"配置文件顶层不是映射: {config_file}")
        return {}

    config = _resolve_dict(config)
    logger.debug(f"成功加载配置: {config_file}")
    return config


def get_notification_center_config() -> Dict[str, Any]:
    """获取通知中心配置"""
    return load_config().get('notification_center', {}) or {}


def get_logging_config() -> Dict[str, Any]:
    """获取日志配置"""
    return load_config().get('logging', {}) or {}


def get_config() -> Dict[str, Any]:
    """获取原始配置字典"""
    return load_config()
