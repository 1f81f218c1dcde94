"""
配置文件加载单元测试
"""
import os
import shutil
import tempfile

import pytest

from typed_notifications.common.config import (
    _resolve_dict,
    _resolve_env_vars,
    get_logging_config,
    get_notification_center_config,
    load_config,
)

# 测试用的配置文件内容
TEST_CONFIG = """
notification_center:
  type: "${TEST_CENTER_TYPE:-memory}"
  raise_errors: "${TEST_RAISE_ERRORS:-false}"
  queue_workers: "${TEST_QUEUE_WORKERS:-8}"

logging:
  level: "${LOG_LEVEL:-DEBUG}"
  use_json: true
"""


class TestConfigUnit:
    """配置文件加载单元测试"""

    @pytest.fixture
    def config_file(self, monkeypatch):
        """创建临时测试配置文件"""
        temp_dir = tempfile.mkdtemp()
        path = os.path.join(temp_dir, "config.yml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(TEST_CONFIG)

        monkeypatch.setenv("CONFIG_PATH", path)
        for var in ("TEST_CENTER_TYPE", "TEST_RAISE_ERRORS", "TEST_QUEUE_WORKERS", "LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)

        yield path
        shutil.rmtree(temp_dir)

    def test_load_config(self, config_file):
        config = load_config()

        assert config["notification_center"]["type"] == "memory"
        assert config["notification_center"]["raise_errors"] is False
        assert config["notification_center"]["queue_workers"] == 8
        assert config["logging"]["use_json"] is True

    def test_env_overrides(self, config_file, monkeypatch):
        monkeypatch.setenv("TEST_CENTER_TYPE", "custom")
        monkeypatch.setenv("TEST_QUEUE_WORKERS", "2")

        center_config = get_notification_center_config()

        assert center_config["type"] == "custom"
        assert center_config["queue_workers"] == 2

    def test_logging_section(self, config_file):
        assert get_logging_config()["level"] == "DEBUG"

    def test_missing_file_yields_empty_config(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "missing.yml"))
        monkeypatch.chdir(tmp_path)

        assert load_config() == {}
        assert get_notification_center_config() == {}

    def test_invalid_yaml_yields_empty_config(self, monkeypatch, tmp_path):
        path = tmp_path / "broken.yml"
        path.write_text("notification_center: [unclosed", encoding="utf-8")
        monkeypatch.setenv("CONFIG_PATH", str(path))

        assert load_config() == {}

    def test_non_mapping_yields_empty_config(self, monkeypatch, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        monkeypatch.setenv("CONFIG_PATH", str(path))

        assert load_config() == {}


class TestEnvResolution:
    """环境变量解析单元测试"""

    def test_resolve_with_default(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_FOR_TEST", raising=False)

        assert _resolve_env_vars("${UNSET_VAR_FOR_TEST:-fallback}") == "fallback"
        assert _resolve_env_vars("${UNSET_VAR_FOR_TEST:fallback}") == "fallback"
        assert _resolve_env_vars("${UNSET_VAR_FOR_TEST}") == ""

    def test_resolve_from_environment(self, monkeypatch):
        monkeypatch.setenv("SET_VAR_FOR_TEST", "value")

        assert _resolve_env_vars("prefix-${SET_VAR_FOR_TEST:-x}") == "prefix-value"

    def test_non_string_passthrough(self):
        assert _resolve_env_vars(5) == 5

    def test_resolve_dict_converts_types(self):
        result = _resolve_dict({
            "a": "10",
            "b": "True",
            "c": "text",
            "d": {"e": "false"},
            "f": [1, 2],
        })

        assert result == {"a": 10, "b": True, "c": "text", "d": {"e": False}, "f": [1, 2]}
