"""
Error handling for zapscan
Exception hierarchy and the exit-code mapping used by the CLI
"""

import json
import traceback
from typing import Dict, Any, Optional
from datetime import datetime
from pathlib import Path

from utils.logger import get_logger


EXIT_OK = 0
EXIT_EXECUTION_FAILED = 1
EXIT_ALERTS_REPORTED = 3

# errors.log lives here unless logging.path points elsewhere
DEFAULT_LOG_DIRECTORY = "./logs"


class ZapScanError(Exception):
    """Base exception for zapscan-specific errors"""
    exit_code = EXIT_EXECUTION_FAILED

    def __init__(self, message: str, error_code: str = None, context: Dict[str, Any] = None):
        super().__init__(message)
        self.error_code = error_code or "ZAPSCAN_ERROR"
        self.context = context or {}
        self.timestamp = datetime.now().isoformat()


class ConfigError(ZapScanError):
    """Invalid or incomplete scan configuration"""
    def __init__(self, message: str, **kwargs):
        super().__init__(message, "CONFIG_ERROR", kwargs)


class ZapApiError(ZapScanError):
    """A call to the ZAP API failed"""
    def __init__(self, message: str, endpoint: str = "", status_code: int = None, **kwargs):
        super().__init__(message, "ZAP_API_ERROR", kwargs)
        self.endpoint = endpoint
        self.status_code = status_code


class PollTimeoutError(ZapApiError):
    """ZAP did not report completion before the poll deadline"""
    def __init__(self, label: str, timeout: float, last_status: int, **kwargs):
        super().__init__(
            f"Timed out after {timeout:g}s waiting for {label} (last known status: {last_status}%)",
            **kwargs,
        )
        self.error_code = "POLL_TIMEOUT"
        self.label = label
        self.timeout = timeout
        self.last_status = last_status


class ScanExecutionError(ZapScanError):
    """Processing with ZAP failed; wraps the underlying API error"""
    def __init__(self, message: str = "Processing with ZAP failed", cause: Exception = None, **kwargs):
        super().__init__(message, "SCAN_EXECUTION_ERROR", kwargs)
        self.cause = cause


class AlertsReportedError(ZapScanError):
    """Required (non-ignored) alerts were found and the build should fail"""
    exit_code = EXIT_ALERTS_REPORTED

    def __init__(self, message: str = "There are security alerts!", alert_count: int = 0, **kwargs):
        super().__init__(message, "ALERTS_REPORTED", kwargs)
        self.alert_count = alert_count
        # ScanResult of the run that tripped the gate, set by the scanner
        self.result = None


class ErrorHandler:
    """Log errors, keep an error trail in the log directory and pick the exit code"""

    def __init__(self, config: Optional[Dict[str, Any]] = None, log_directory: Optional[str] = None):
        self.config = config or {}
        self.logger = get_logger(self.config)
        log_path = (self.config.get("logging") or {}).get("path")
        base = log_directory or (Path(log_path).parent if log_path else DEFAULT_LOG_DIRECTORY)
        self.error_log_path = Path(base) / "errors.log"

    def handle_error(self, error: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        """Log error and return the details plus the process exit code"""
        context = context or {}

        error_info = {
            "type": type(error).__name__,
            "message": str(error),
            "code": getattr(error, "error_code", "UNEXPECTED_ERROR"),
            "timestamp": datetime.now().isoformat(),
            "context": {**getattr(error, "context", {}), **context},
        }
        if not isinstance(error, ZapScanError):
            error_info["traceback"] = traceback.format_exc()

        if isinstance(error, AlertsReportedError):
            self.logger.warning(f"{error_info['message']} ({error.alert_count} required alerts)")
        else:
            self.logger.error(f"Error occurred: {error_info['type']} - {error_info['message']}")
            cause = getattr(error, "cause", None)
            if cause is not None:
                self.logger.error(f"Caused by: {type(cause).__name__} - {cause}")

        self._log_error_to_file(error_info)

        return {
            "error": error_info,
            "exit_code": self.exit_code_for(error),
        }

    @staticmethod
    def exit_code_for(error: Exception) -> int:
        """Map an exception to the CLI exit code"""
        return getattr(error, "exit_code", EXIT_EXECUTION_FAILED)

    def _log_error_to_file(self, error_info: Dict[str, Any]):
        """Append the error as one JSON line; failures here are only logged"""
        try:
            self.error_log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.error_log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(error_info, default=str) + "\n")
        except OSError as e:
            self.logger.debug(f"Could not write error log {self.error_log_path}: {e}")
