"""
全局测试配置
"""
import os
import sys
from concurrent.futures import ThreadPoolExecutor

import pytest

# 确保能导入项目模块（未安装时）
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from typed_notifications import (  # noqa: E402
    InMemoryNotificationCenter,
    TypedNotificationCenter,
    reset_default_center,
)


@pytest.fixture
def center():
    """独立的内存通知中心"""
    return InMemoryNotificationCenter(name="test-center")


@pytest.fixture
def typed_center(center):
    """包装测试通知中心的类型化通知中心"""
    return TypedNotificationCenter(center)


@pytest.fixture
def executor():
    """排队投递用的线程池"""
    pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="test-queue")
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture(autouse=True)
def fresh_default_center():
    """每个测试使用新的进程级默认通知中心"""
    reset_default_center()
    yield
    reset_default_center()
