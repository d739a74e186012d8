"""
zapscan scan - Spider, active scan and alert check against a running ZAP daemon
"""

import typer
from rich.console import Console
from rich.table import Table
from pathlib import Path
from typing import List, Optional

from utils.helpers import load_config, DEFAULT_CONFIG_PATH
from utils.logger import configure_logger
from utils.error_handler import ErrorHandler, ZapScanError, AlertsReportedError

console = Console()


def scan_command(
    target: Optional[str] = typer.Option(
        None, "--target", "-t", envvar="ZAP_TARGET_URL", help="Target URL to spider and scan"
    ),
    host: Optional[str] = typer.Option(
        None, "--host", envvar="ZAP_PROXY_HOST", help="Host of the ZAP daemon [default: localhost]"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", envvar="ZAP_PROXY_PORT", help="Port of the ZAP daemon [default: 8080]"
    ),
    api_key: Optional[str] = typer.Option(
        None, "--api-key", envvar="ZAP_API_KEY", help="ZAP API key"
    ),
    spider: Optional[bool] = typer.Option(None, "--spider/--no-spider", help="Spider the target first"),
    active_scan: Optional[bool] = typer.Option(None, "--scan/--no-scan", help="Run an active scan"),
    save_session: Optional[bool] = typer.Option(
        None, "--save-session/--no-save-session", help="Save the ZAP session after scanning"
    ),
    shutdown: Optional[bool] = typer.Option(
        None, "--shutdown/--no-shutdown", help="Shut ZAP down when done, even after a failure"
    ),
    report_alerts: Optional[bool] = typer.Option(
        None, "--report/--no-report", help="Write the alerts report file"
    ),
    fail_on_alerts: Optional[bool] = typer.Option(
        None, "--fail-on-alerts/--no-fail-on-alerts", help="Exit with code 3 when non-ignored alerts exist"
    ),
    ignore_alert: Optional[List[str]] = typer.Option(
        None, "--ignore-alert", "-i", help="Alert name to ignore (repeatable, case-insensitive)"
    ),
    report_dir: Optional[Path] = typer.Option(
        None, "--report-dir", "-o", help="Directory for the alerts report [default: ./reports/zap]"
    ),
    report_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="Report format: xml or json [default: xml]"
    ),
    poll_interval: Optional[float] = typer.Option(
        None, "--poll-interval", help="Seconds between progress checks [default: 1]"
    ),
    poll_timeout: Optional[float] = typer.Option(
        None, "--poll-timeout", help="Give up waiting for spider/scan after N seconds, 0 = never [default: 0]"
    ),
    config_file: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Configuration file path"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log ZAP API calls"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """
    Run the ZAP scan sequence

    Spider -> active scan -> save session -> check alerts -> shutdown ZAP.
    Exit codes: 0 ok, 1 ZAP or configuration error, 3 security alerts found.
    """
    from core.config import ScanConfig
    from core.scanner import run_scan

    config = load_config(str(config_file))
    log_cfg = config.get("logging", {}) or {}
    level = "DEBUG" if verbose else str(log_cfg.get("level", "INFO"))
    log_path = str(log_file) if log_file else log_cfg.get("path")
    logger = configure_logger(level=level, log_path=log_path)

    overrides = {
        "target_url": target,
        "proxy_host": host,
        "proxy_port": port,
        "api_key": api_key,
        "spider": spider,
        "scan": active_scan,
        "save_session": save_session,
        "shutdown": shutdown,
        "report_alerts": report_alerts,
        "fail_on_alerts": fail_on_alerts,
        "ignored_alerts": list(ignore_alert) if ignore_alert else None,
        "report_directory": str(report_dir) if report_dir else None,
        "report_format": report_format,
        "poll_interval": poll_interval,
        "poll_timeout": poll_timeout,
    }

    handler = ErrorHandler(config, log_directory=str(log_file.parent) if log_file else None)

    try:
        scan_config = ScanConfig.from_mapping(config.get("zap") or {}, overrides)
    except ZapScanError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(handler.handle_error(e)["exit_code"])

    logger.debug(f"Scan configuration: {scan_config.describe()}")
    console.print(f"[bold cyan]🔎 ZAP scan: {scan_config.target_url}[/bold cyan]\n")

    try:
        result = run_scan(scan_config)
    except AlertsReportedError as e:
        if e.result is not None:
            _print_summary(e.result)
        console.print(f"\n[bold red]✗ {e}[/bold red] ({e.alert_count} required alerts)")
        raise typer.Exit(handler.handle_error(e)["exit_code"])
    except ZapScanError as e:
        console.print(f"\n[bold red]✗ {e}[/bold red]")
        raise typer.Exit(handler.handle_error(e)["exit_code"])

    _print_summary(result)
    console.print("\n[green]✓ ZAP scan finished[/green]")


def _print_summary(result) -> None:
    table = Table(title="ZAP Alerts")
    table.add_column("Alert", style="cyan")
    table.add_column("Risk", style="white")
    table.add_column("Status", style="white")

    for alert in result.required:
        table.add_row(alert.alert, alert.risk or "-", "[red]required[/red]")
    for alert in result.ignored:
        table.add_row(alert.alert, alert.risk or "-", "[yellow]ignored[/yellow]")

    if result.alerts:
        console.print(table)
    else:
        console.print("No alerts reported.")

    console.print(
        f"Alerts: [cyan]{len(result.alerts)}[/cyan]  "
        f"required: [cyan]{len(result.required)}[/cyan]  "
        f"ignored: [cyan]{len(result.ignored)}[/cyan]"
    )
    if result.session_name:
        console.print(f"Session: [cyan]{result.session_name}[/cyan]")
    if result.report_path:
        console.print(f"Report: [cyan]{result.report_path}[/cyan]")
    if result.timing:
        console.print(f"Duration: [cyan]{result.timing.get('total_formatted', '-')}[/cyan]")
