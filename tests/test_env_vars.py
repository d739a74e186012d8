"""
Test environment variable expansion in configuration and ScanConfig building
"""

import dataclasses
import os
import tempfile
from pathlib import Path

import pytest

from core.config import ScanConfig
from utils.error_handler import ConfigError
from utils.helpers import load_config


def _write_config(content: str) -> str:
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write(content)
        return f.name


def test_env_var_expansion_basic():
    """Test basic environment variable expansion"""
    os.environ["TEST_ZAP_KEY"] = "test_value_123"
    os.environ["TEST_ZAP_PORT"] = "8090"

    config_path = _write_config("""
    zap:
      api_key: "${TEST_ZAP_KEY}"
      proxy_port: "${TEST_ZAP_PORT}"
    """)

    try:
        config = load_config(config_path)

        assert config["zap"]["api_key"] == "test_value_123"
        assert config["zap"]["proxy_port"] == "8090"
    finally:
        Path(config_path).unlink()
        del os.environ["TEST_ZAP_KEY"]
        del os.environ["TEST_ZAP_PORT"]


def test_env_var_expansion_with_defaults():
    """Test environment variable expansion with default values"""
    for var in ("NONEXISTENT_ZAP_HOST", "MISSING_ZAP_TARGET"):
        os.environ.pop(var, None)

    config_path = _write_config("""
    zap:
      proxy_host: "${NONEXISTENT_ZAP_HOST:-zap.internal}"
      target_url: "${MISSING_ZAP_TARGET:-}"
    """)

    try:
        config = load_config(config_path)

        assert config["zap"]["proxy_host"] == "zap.internal"
        assert config["zap"]["target_url"] == ""
    finally:
        Path(config_path).unlink()


def test_env_var_expansion_in_ignore_list():
    """Ignored alert names can come from the environment too"""
    os.environ["IGNORED_ZAP_ALERT"] = "Cookie Without Secure Flag"

    config_path = _write_config("""
    zap:
      ignored_alerts:
        - "${IGNORED_ZAP_ALERT}"
        - "Server Leaks Version Information"
    """)

    try:
        config = load_config(config_path)

        assert config["zap"]["ignored_alerts"] == [
            "Cookie Without Secure Flag",
            "Server Leaks Version Information",
        ]
    finally:
        Path(config_path).unlink()
        del os.environ["IGNORED_ZAP_ALERT"]


def test_missing_config_file_returns_empty(tmp_path):
    assert load_config(str(tmp_path / "absent.yaml")) == {}


def test_dotenv_next_to_config(tmp_path):
    """A .env file beside the config feeds ${VAR} expansion"""
    os.environ.pop("DOTENV_ZAP_KEY", None)
    (tmp_path / ".env").write_text("DOTENV_ZAP_KEY=from_dotenv\n")
    config_file = tmp_path / "zapscan.yaml"
    config_file.write_text('zap:\n  api_key: "${DOTENV_ZAP_KEY}"\n')

    try:
        config = load_config(str(config_file))
        assert config["zap"]["api_key"] == "from_dotenv"
    finally:
        os.environ.pop("DOTENV_ZAP_KEY", None)


def test_scan_config_defaults():
    config = ScanConfig.from_mapping({"target_url": "http://localhost:3000"})

    assert config.proxy_host == "localhost"
    assert config.proxy_port == 8080
    assert config.spider and config.scan and config.save_session and config.shutdown
    assert config.report_alerts is True
    assert config.fail_on_alerts is False
    assert config.api_key == "none"
    assert config.ignored_alerts == ()
    assert config.poll_timeout == 0
    assert config.api_base_url == "http://localhost:8080"


def test_scan_config_property_aliases_and_coercion():
    """Maven-style property names and string values from YAML/env are accepted"""
    config = ScanConfig.from_mapping({
        "target.url": "https://app.example.com",
        "zap.proxy.port": "8090",
        "zap.spider.active": "false",
        "fail.on.alerts": "true",
        "ignoredAlerts": "XSS, SQL Injection ,",
        "poll_timeout": "600",
    })

    assert config.proxy_port == 8090
    assert config.spider is False
    assert config.fail_on_alerts is True
    assert config.ignored_alerts == ("XSS", "SQL Injection")
    assert config.poll_timeout == 600.0


def test_scan_config_overrides_win_and_none_is_unset():
    config = ScanConfig.from_mapping(
        {"target_url": "http://a.local", "proxy_host": "zap1", "scan": True},
        {"target_url": "http://b.local", "proxy_host": None, "scan": False},
    )

    assert config.target_url == "http://b.local"
    assert config.proxy_host == "zap1"
    assert config.scan is False


def test_scan_config_is_immutable():
    config = ScanConfig.from_mapping({"target_url": "http://a.local"})
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.target_url = "http://b.local"

    changed = config.with_overrides(fail_on_alerts="yes", proxy_host=None)
    assert changed.fail_on_alerts is True
    assert config.fail_on_alerts is False


@pytest.mark.parametrize("values,fragment", [
    ({}, "target_url is required"),
    ({"target_url": ""}, "target_url is required"),
    ({"target_url": "app.local"}, "http(s) URL"),
    ({"target_url": "http://a.local", "proxy_port": 0}, "proxy_port"),
    ({"target_url": "http://a.local", "proxy_port": "eighty"}, "proxy_port"),
    ({"target_url": "http://a.local", "poll_interval": 0}, "poll_interval"),
    ({"target_url": "http://a.local", "poll_timeout": -1}, "poll_timeout"),
    ({"target_url": "http://a.local", "report_format": "pdf"}, "report_format"),
    ({"target_url": "http://a.local", "colour": "blue"}, "Unknown configuration keys"),
])
def test_scan_config_validation(values, fragment):
    with pytest.raises(ConfigError) as excinfo:
        ScanConfig.from_mapping(values)
    assert fragment in str(excinfo.value)


def test_describe_masks_api_key():
    config = ScanConfig.from_mapping({"target_url": "http://a.local", "api_key": "s3cret"})
    assert config.describe()["api_key"] == "***"


@pytest.mark.parametrize("raw", ["enabled", "ture", "${FAIL_ON_ALERTS}"])
def test_unrecognised_boolean_is_config_error(raw):
    with pytest.raises(ConfigError) as excinfo:
        ScanConfig.from_mapping({"target_url": "http://app.local", "fail_on_alerts": raw})
    assert "fail_on_alerts" in str(excinfo.value)


@pytest.mark.parametrize("raw,expected", [
    ("off", False), ("No", False), ("", False), ("0", False),
    ("ON", True), ("y", True), (" true ", True), (1, True),
])
def test_boolean_spellings(raw, expected):
    config = ScanConfig.from_mapping({"target_url": "http://app.local", "fail_on_alerts": raw})
    assert config.fail_on_alerts is expected
