"""
Client for the ZAP JSON API of an already-running ZAP daemon.

Only the calls the scan sequence needs are wrapped. ZAP API paths look like
`/JSON/<component>/<view|action>/<method>/`; every failure (transport, HTTP
status, malformed body or an error payload from ZAP) surfaces as ZapApiError.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from core.alerts import Alert
from utils.error_handler import ZapApiError
from utils.logger import get_logger


USER_AGENT = "zapscan/0.1.0"


class ZapClient:
    """ZAP API wrapper bound to one daemon and API key"""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8080,
        api_key: str = "",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = f"http://{host}:{port}"
        self.api_key = api_key or ""
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})
        if self.api_key:
            self.session.headers.update({"X-ZAP-API-Key": self.api_key})
        self.logger = get_logger()

    @classmethod
    def from_config(cls, config) -> "ZapClient":
        return cls(
            host=config.proxy_host,
            port=config.proxy_port,
            api_key=config.api_key,
            timeout=config.request_timeout,
        )

    # ------------------------------------------------------------------
    # Low level
    # ------------------------------------------------------------------

    def _url(self, component: str, kind: str, method: str) -> str:
        return f"{self.base_url}/JSON/{component}/{kind}/{method}/"

    def _call(self, component: str, kind: str, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        query = {k: v for k, v in (params or {}).items() if v is not None}
        if self.api_key:
            query["apikey"] = self.api_key
        endpoint = f"{component}/{kind}/{method}"
        self.logger.log_api_call(component, kind, method, query)

        try:
            resp = self.session.get(self._url(component, kind, method), params=query, timeout=self.timeout)
        except requests.RequestException as e:
            raise ZapApiError(f"ZAP API request {endpoint} failed: {e}", endpoint=endpoint) from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and "code" in data and "message" in data:
            raise ZapApiError(
                f"ZAP API {endpoint} returned error {data.get('code')}: {data.get('message')}",
                endpoint=endpoint,
                status_code=resp.status_code,
            )
        if not resp.ok:
            raise ZapApiError(
                f"ZAP API {endpoint} returned HTTP {resp.status_code}",
                endpoint=endpoint,
                status_code=resp.status_code,
            )
        if not isinstance(data, dict):
            raise ZapApiError(f"ZAP API {endpoint} returned a non-JSON response", endpoint=endpoint,
                              status_code=resp.status_code)
        return data

    @staticmethod
    def _status_to_int(data: Dict[str, Any], endpoint: str) -> int:
        try:
            return int(data["status"])
        except (KeyError, TypeError, ValueError) as e:
            raise ZapApiError(f"Unexpected status from {endpoint}: {data!r}", endpoint=endpoint) from e

    @staticmethod
    def _scan_id(data: Dict[str, Any], endpoint: str) -> str:
        scan_id = data.get("scan")
        if scan_id in (None, ""):
            raise ZapApiError(f"{endpoint} returned no scan id", endpoint=endpoint)
        return str(scan_id)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def version(self) -> str:
        return str(self._call("core", "view", "version").get("version", ""))

    def spider_scan(self, url: str) -> str:
        """Start a spider of url; returns the scan id"""
        data = self._call("spider", "action", "scan", {"url": url})
        return self._scan_id(data, "spider/action/scan")

    def spider_status(self, scan_id: Optional[str] = None) -> int:
        data = self._call("spider", "view", "status", {"scanId": scan_id})
        return self._status_to_int(data, "spider/view/status")

    def active_scan(self, url: str, recurse: bool = True, in_scope_only: bool = False) -> str:
        """Start an active scan of url; returns the scan id"""
        data = self._call(
            "ascan",
            "action",
            "scan",
            {
                "url": url,
                "recurse": str(recurse).lower(),
                "inScopeOnly": str(in_scope_only).lower(),
            },
        )
        return self._scan_id(data, "ascan/action/scan")

    def active_scan_status(self, scan_id: Optional[str] = None) -> int:
        data = self._call("ascan", "view", "status", {"scanId": scan_id})
        return self._status_to_int(data, "ascan/view/status")

    def save_session(self, name: str, overwrite: bool = True) -> None:
        self._call("core", "action", "saveSession", {"name": name, "overwrite": str(overwrite).lower()})

    def alerts(self, base_url: str, page_size: int = 500) -> List[Alert]:
        """All alerts for base_url, fetched page by page"""
        alerts: List[Alert] = []
        start = 0
        while True:
            data = self._call(
                "core",
                "view",
                "alerts",
                {"baseurl": base_url, "start": start, "count": page_size},
            )
            batch = data.get("alerts") or []
            if not isinstance(batch, list):
                raise ZapApiError(f"Unexpected alerts payload: {type(batch).__name__}", endpoint="core/view/alerts")
            alerts.extend(Alert.from_api(item) for item in batch)
            self.logger.debug(f"Fetched {len(batch)} alerts (total: {len(alerts)})")
            if len(batch) < page_size:
                break
            start += len(batch)
        return alerts

    def shutdown(self) -> None:
        self._call("core", "action", "shutdown")

    def close(self) -> None:
        self.session.close()
