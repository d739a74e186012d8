"""
Global pytest configuration and fixtures
"""
import pytest
from typing import Any, Dict, List, Optional

import utils.logger as logger_module
from core.alerts import Alert
from core.config import ScanConfig
from utils.error_handler import ZapApiError


class FakeZapClient:
    """Stands in for ZapClient; records every call in order"""

    def __init__(
        self,
        alerts: Optional[List[Alert]] = None,
        spider_progress: Optional[List[int]] = None,
        scan_progress: Optional[List[int]] = None,
        fail_on: Optional[str] = None,
        shutdown_error: Optional[Exception] = None,
    ):
        self._alerts = alerts or []
        self._spider_progress = list(spider_progress or [100])
        self._scan_progress = list(scan_progress or [100])
        self.fail_on = fail_on
        self.shutdown_error = shutdown_error
        self.calls: List[tuple] = []

    def _record(self, name: str, *args):
        self.calls.append((name,) + args)
        if self.fail_on == name:
            raise ZapApiError(f"{name} failed", endpoint=name)

    @property
    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]

    def spider_scan(self, url):
        self._record("spider_scan", url)
        return "1"

    def spider_status(self, scan_id=None):
        self._record("spider_status", scan_id)
        return self._spider_progress.pop(0) if len(self._spider_progress) > 1 else self._spider_progress[0]

    def active_scan(self, url, recurse=True, in_scope_only=False):
        self._record("active_scan", url, recurse, in_scope_only)
        return "2"

    def active_scan_status(self, scan_id=None):
        self._record("active_scan_status", scan_id)
        return self._scan_progress.pop(0) if len(self._scan_progress) > 1 else self._scan_progress[0]

    def save_session(self, name, overwrite=True):
        self._record("save_session", name, overwrite)

    def alerts(self, base_url, page_size=500):
        self._record("alerts", base_url)
        return list(self._alerts)

    def shutdown(self):
        self.calls.append(("shutdown",))
        if self.shutdown_error is not None:
            raise self.shutdown_error

    def close(self):
        self.calls.append(("close",))


@pytest.fixture(autouse=True)
def reset_logger():
    """Each test starts with a fresh global logger"""
    logger_module._logger = None
    yield
    logger_module._logger = None


@pytest.fixture
def sample_alerts() -> List[Alert]:
    return [
        Alert(alert="Cross Site Scripting (Reflected)", risk="High", url="http://app.local/search?q=x"),
        Alert(alert="SQL Injection", risk="High", url="http://app.local/item?id=1"),
        Alert(alert="X-Content-Type-Options Header Missing", risk="Low", url="http://app.local/"),
    ]


@pytest.fixture
def make_config(tmp_path):
    """Build a ScanConfig with test-friendly defaults"""
    def _make(**overrides: Any) -> ScanConfig:
        values: Dict[str, Any] = {
            "target_url": "http://app.local",
            "report_directory": str(tmp_path / "zap-reports"),
            "poll_interval": 0.01,
        }
        values.update(overrides)
        return ScanConfig.from_mapping(values)
    return _make


@pytest.fixture
def fake_client_factory():
    return FakeZapClient


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested intervals"""
    slept: List[float] = []

    def _sleep(seconds: float) -> None:
        slept.append(seconds)

    _sleep.slept = slept
    return _sleep
