"""
Scan configuration

One immutable `ScanConfig` is built per invocation from (lowest to highest
precedence) built-in defaults, the `zap:` section of the YAML config and CLI
options. Keys may use the field names or the dotted property names of the
ZAP Maven plugin (`zap.proxy.host`, `fail.on.alerts`, ...).
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from utils.error_handler import ConfigError
from utils.helpers import is_valid_url, parse_bool


REPORT_FORMATS = ("xml", "json")

PROPERTY_ALIASES = {
    "zap.proxy.host": "proxy_host",
    "zap.proxy.port": "proxy_port",
    "target.url": "target_url",
    "zap.spider.active": "spider",
    "zap.scan.active": "scan",
    "save.zap.session": "save_session",
    "zap.shutdown": "shutdown",
    "report.directory": "report_directory",
    "zap.api.key": "api_key",
    "report.zap.alerts": "report_alerts",
    "fail.on.alerts": "fail_on_alerts",
    "ignoredAlerts": "ignored_alerts",
}

_BOOL_FIELDS = {"spider", "scan", "save_session", "shutdown", "report_alerts", "fail_on_alerts"}
_FLOAT_FIELDS = {"poll_interval", "poll_timeout", "request_timeout"}


@dataclass(frozen=True)
class ScanConfig:
    """Everything one scan run needs; never mutated after construction"""
    target_url: str
    proxy_host: str = "localhost"
    proxy_port: int = 8080
    spider: bool = True
    scan: bool = True
    save_session: bool = True
    shutdown: bool = True
    report_directory: str = "./reports/zap"
    api_key: str = "none"
    report_alerts: bool = True
    fail_on_alerts: bool = False
    ignored_alerts: Tuple[str, ...] = field(default_factory=tuple)
    report_format: str = "xml"
    poll_interval: float = 1.0
    poll_timeout: float = 0.0
    request_timeout: float = 30.0

    def __post_init__(self):
        if not self.target_url:
            raise ConfigError("target_url is required (config zap.target_url or --target)")
        if not is_valid_url(self.target_url):
            raise ConfigError(f"target_url must be an http(s) URL: {self.target_url!r}", target_url=self.target_url)
        if not 0 < self.proxy_port < 65536:
            raise ConfigError(f"proxy_port out of range: {self.proxy_port}", proxy_port=self.proxy_port)
        if self.poll_interval <= 0:
            raise ConfigError(f"poll_interval must be positive: {self.poll_interval}")
        if self.poll_timeout < 0:
            raise ConfigError(f"poll_timeout must not be negative: {self.poll_timeout}")
        if self.request_timeout <= 0:
            raise ConfigError(f"request_timeout must be positive: {self.request_timeout}")
        if self.report_format not in REPORT_FORMATS:
            raise ConfigError(
                f"report_format must be one of {', '.join(REPORT_FORMATS)}: {self.report_format!r}"
            )

    @property
    def api_base_url(self) -> str:
        return f"http://{self.proxy_host}:{self.proxy_port}"

    @classmethod
    def from_mapping(
        cls,
        values: Optional[Mapping[str, Any]] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> "ScanConfig":
        """Build a config from a YAML `zap:` section plus CLI overrides (None means unset)"""
        merged: Dict[str, Any] = {}
        for source in (values or {}, overrides or {}):
            for key, value in source.items():
                if value is None:
                    continue
                name = PROPERTY_ALIASES.get(key, key)
                merged[name] = value

        merged.setdefault("target_url", "")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(merged) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}", keys=unknown)

        return cls(**{name: _coerce(name, value) for name, value in merged.items()})

    def with_overrides(self, **changes: Any) -> "ScanConfig":
        """Copy with some fields replaced (None values are ignored)"""
        clean = {k: _coerce(k, v) for k, v in changes.items() if v is not None}
        return replace(self, **clean)

    def describe(self) -> Dict[str, Any]:
        """Config as a dict for logging, API key masked"""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if self.api_key and self.api_key != "none":
            data["api_key"] = "***"
        data["ignored_alerts"] = list(self.ignored_alerts)
        return data


def parse_ignored_alerts(value: Any) -> Tuple[str, ...]:
    """Accept a list or a comma separated string; blanks are dropped"""
    if value is None:
        return ()
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    else:
        items = value
    return tuple(str(item).strip() for item in items if str(item).strip())


def _coerce(name: str, value: Any) -> Any:
    try:
        if name in _BOOL_FIELDS:
            return parse_bool(value)
        if name in _FLOAT_FIELDS:
            return float(value)
        if name == "proxy_port":
            return int(value)
        if name == "ignored_alerts":
            return parse_ignored_alerts(value)
        if name == "report_format":
            return str(value).strip().lower()
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {value!r} ({e})", key=name) from e
    if isinstance(value, str):
        return value.strip()
    return value
