"""Core package for zapscan"""

from .alerts import Alert, AlertPartition, classify_alerts
from .config import ScanConfig
from .gate import check_alerts
from .report import write_alerts_report
from .scanner import ScanResult, run_scan
from .zap_client import ZapClient

__all__ = [
    "Alert",
    "AlertPartition",
    "classify_alerts",
    "ScanConfig",
    "check_alerts",
    "write_alerts_report",
    "ScanResult",
    "run_scan",
    "ZapClient",
]
