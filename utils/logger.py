"""
Logging for zapscan
Console output through rich, optional plain-text log file for CI artifacts
"""

import logging
import json
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, Optional
from rich.logging import RichHandler


class ScanLogger:
    """Thin wrapper around the `zapscan` logger with scan-specific helpers"""

    def __init__(
        self,
        log_path: Optional[str] = None,
        level: str = "INFO",
    ):
        self.log_path = Path(log_path) if log_path else None

        self.logger = logging.getLogger("zapscan")
        self.logger.setLevel(getattr(logging, level.upper()))
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        console_handler = RichHandler(rich_tracebacks=True, markup=False, show_path=False)
        console_handler.setLevel(getattr(logging, level.upper()))
        self.logger.addHandler(console_handler)

        if self.log_path:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.log_path, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))
            self.logger.addHandler(file_handler)

    def log_api_call(self, component: str, kind: str, method: str, params: Dict[str, Any]):
        """Log a ZAP API call without leaking the API key"""
        safe = {k: v for k, v in params.items() if k.lower() != "apikey"}
        self.logger.debug(f"ZAP API {component}/{kind}/{method} {json.dumps(safe, default=str)}")

    def log_phase(self, phase: str, state: str, elapsed: Optional[str] = None):
        """Log a phase boundary"""
        if elapsed:
            self.logger.info(f"=== {state}: {phase} ({elapsed}) ===")
        else:
            self.logger.info(f"=== {state}: {phase} ===")

    def info(self, message: str, *args):
        """Standard info logging"""
        self.logger.info(message, *args)

    def warning(self, message: str, *args):
        """Standard warning logging"""
        self.logger.warning(message, *args)

    def error(self, message: str, *args):
        """Standard error logging"""
        self.logger.error(message, *args)

    def exception(self, message: str, *args):
        """Log an exception with traceback (mirrors logging.Logger.exception)."""
        self.logger.exception(message, *args)

    def debug(self, message: str, *args):
        """Standard debug logging"""
        self.logger.debug(message, *args)


# Global logger instance
_logger: Optional[ScanLogger] = None


def get_logger(config: Optional[Dict[str, Any]] = None) -> ScanLogger:
    """Get or create the global logger instance"""
    global _logger

    if _logger is None:
        if config and "logging" in config:
            log_config = config["logging"] or {}
            _logger = ScanLogger(
                log_path=log_config.get("path"),
                level=log_config.get("level", "INFO"),
            )
        else:
            _logger = ScanLogger()

    return _logger


def configure_logger(level: str = "INFO", log_path: Optional[str] = None) -> ScanLogger:
    """Replace the global logger, e.g. once CLI flags are known"""
    global _logger
    _logger = ScanLogger(log_path=log_path, level=level)
    _logger.debug(f"Logger configured at {datetime.now().isoformat()} (level={level}, file={log_path or '-'})")
    return _logger
