"""
Scan sequence against a running ZAP daemon.

spider -> active scan -> save session -> alerts (classify, report, gate),
each step switched on or off by the config, followed by a shutdown request
that is attempted even when an earlier step failed.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from core.alerts import Alert, classify_alerts
from core.config import ScanConfig
from core.gate import check_alerts
from core.poller import wait_for_completion
from core.report import write_alerts_report
from core.zap_client import ZapClient
from utils.error_handler import AlertsReportedError, ScanExecutionError, ZapApiError
from utils.helpers import format_duration, session_timestamp
from utils.logger import get_logger


class PhaseTimer:
    """Track timing for each scan phase."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.phases: Dict[str, Dict[str, Any]] = {}
        self.current_phase: Optional[str] = None
        self.phase_start: Optional[float] = None
        self.logger = get_logger()

    def start(self, phase_name: str) -> None:
        if self.current_phase:
            self.end()
        self.current_phase = phase_name
        self.phase_start = self.clock()
        self.logger.log_phase(phase_name, "PHASE START")

    def end(self) -> None:
        if self.current_phase is None or self.phase_start is None:
            return
        elapsed = self.clock() - self.phase_start
        self.phases[self.current_phase] = {
            "elapsed_seconds": round(elapsed, 2),
            "elapsed_formatted": format_duration(elapsed),
        }
        self.logger.log_phase(self.current_phase, "PHASE COMPLETE", format_duration(elapsed))
        self.current_phase = None
        self.phase_start = None

    def get_summary(self) -> Dict[str, Any]:
        if self.current_phase:
            self.end()
        total = sum(p["elapsed_seconds"] for p in self.phases.values())
        return {
            "phases": self.phases,
            "total_seconds": round(total, 2),
            "total_formatted": format_duration(total),
        }


@dataclass
class ScanResult:
    target_url: str
    alerts: List[Alert] = field(default_factory=list)
    ignored: List[Alert] = field(default_factory=list)
    required: List[Alert] = field(default_factory=list)
    report_path: Optional[Path] = None
    session_name: Optional[str] = None
    timing: Dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return not self.required


def run_scan(
    config: ScanConfig,
    client: Optional[ZapClient] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ScanResult:
    """Execute the configured scan steps.

    Raises ScanExecutionError when a ZAP API call fails and AlertsReportedError
    when required alerts remain and `fail_on_alerts` is set.
    """
    logger = get_logger()
    timer = PhaseTimer()
    result = ScanResult(target_url=config.target_url)
    target = config.target_url
    owns_client = client is None

    try:
        if owns_client:
            client = ZapClient.from_config(config)

        if config.spider:
            timer.start("Spider")
            logger.info(f"Perform spidering of site '{target}'")
            scan_id = client.spider_scan(target)
            wait_for_completion(
                "Spider",
                lambda: client.spider_status(scan_id),
                interval=config.poll_interval,
                timeout=config.poll_timeout,
                sleep=sleep,
            )
            timer.end()
        else:
            logger.info("Skipping spidering")

        if config.scan:
            timer.start("Active Scan")
            logger.info(f"Perform active scan of site '{target}'")
            scan_id = client.active_scan(target, recurse=True, in_scope_only=False)
            wait_for_completion(
                "Active scan",
                lambda: client.active_scan_status(scan_id),
                interval=config.poll_interval,
                timeout=config.poll_timeout,
                sleep=sleep,
            )
            timer.end()
        else:
            logger.info("Skipping active scan")

        if config.save_session:
            session_name = f"ZAP_{session_timestamp()}"
            client.save_session(session_name, overwrite=True)
            result.session_name = session_name
            logger.info(f"Saved session into '{session_name}'")
        else:
            logger.info("Skipping session saving")

        timer.start("Alert Analysis")
        logger.info("Analyzing reported alerts...")
        _check_alerts(client, config, result)
        timer.end()

        logger.info("ZAP scan finished")

    except ZapApiError as e:
        timer.end()
        logger.error(str(e))
        raise ScanExecutionError("Processing with ZAP failed", cause=e, target_url=target) from e
    except AlertsReportedError as e:
        timer.end()
        e.result = result
        raise
    finally:
        result.timing = timer.get_summary()
        _shutdown(client, config)
        if owns_client and client is not None:
            client.close()

    return result


def _check_alerts(client: ZapClient, config: ScanConfig, result: ScanResult) -> None:
    logger = get_logger()
    reported = client.alerts(config.target_url)
    partition = classify_alerts(reported, config.ignored_alerts)
    result.alerts = reported
    result.ignored = partition.ignored
    result.required = partition.required

    counts = partition.counts()
    logger.info(
        f"Alerts reported: {counts['total']} (required: {counts['required']}, ignored: {counts['ignored']})"
    )

    if config.report_alerts:
        result.report_path = write_alerts_report(
            partition.required,
            reported,
            partition.ignored,
            config.report_directory,
            fmt=config.report_format,
        )

    check_alerts(partition, config.fail_on_alerts)


def _shutdown(client: Optional[ZapClient], config: ScanConfig) -> None:
    logger = get_logger()
    if config.shutdown and client is not None:
        try:
            logger.info("Shutting down zap proxy")
            client.shutdown()
        except Exception as e:
            # Never masks the outcome of the scan itself
            logger.exception(f"Shutdown of zap proxy failed: {e}")
    else:
        logger.info("Skipping shutdown of zap proxy")
