"""
Build-outcome decision for a finished scan.
"""

from core.alerts import AlertPartition
from utils.error_handler import AlertsReportedError


def check_alerts(partition: AlertPartition, fail_on_alerts: bool) -> None:
    """Raise AlertsReportedError if the build must fail; ignored alerts never count"""
    if fail_on_alerts and partition.required:
        names = sorted({alert.alert for alert in partition.required})
        raise AlertsReportedError(
            "There are security alerts!",
            alert_count=len(partition.required),
            alerts=names,
        )
