"""
zapscan init - Write a starter configuration
"""

import typer
from rich.console import Console
from rich.prompt import Confirm
from pathlib import Path

console = Console()


DEFAULT_CONFIG = """# zapscan configuration
# Values may reference environment variables: ${VAR} or ${VAR:-default}.
# A .env file next to this file (or in the working directory) is loaded first.

zap:
  proxy_host: ${ZAP_PROXY_HOST:-localhost}
  proxy_port: ${ZAP_PROXY_PORT:-8080}
  api_key: ${ZAP_API_KEY:-none}
  target_url: ${ZAP_TARGET_URL:-}

  spider: true
  scan: true
  save_session: true
  shutdown: true

  report_alerts: true
  report_directory: ./reports/zap
  report_format: xml          # xml or json
  fail_on_alerts: false
  ignored_alerts: []
  #  - Cookie Without Secure Flag
  #  - X-Content-Type-Options Header Missing

  poll_interval: 1            # seconds between progress checks
  poll_timeout: 0             # seconds; 0 waits until ZAP reports 100%
  request_timeout: 30

logging:
  level: INFO
  # path: ./logs/zapscan.log
"""


def init_command(
    config_file: Path = typer.Option(
        Path("config/zapscan.yaml"),
        "--config",
        "-c",
        help="Where to write the configuration"
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration"
    )
):
    """
    Initialize zapscan configuration

    Creates a commented YAML config with the default scan settings.
    """
    console.print("[bold cyan]🔧 Initializing zapscan...[/bold cyan]\n")

    if config_file.exists() and not force:
        if not Confirm.ask(f"Config file already exists at {config_file}. Overwrite?"):
            console.print("[yellow]Skipping configuration file[/yellow]")
            raise typer.Exit(0)

    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(DEFAULT_CONFIG, encoding="utf-8")
    console.print(f"[green]✓[/green] Created configuration file at {config_file}")

    console.print(f"\nNext steps:")
    console.print(f"  1. Set zap.target_url (or ZAP_TARGET_URL) and the API key in {config_file}")
    console.print(f"  2. Run 'zapscan scan -c {config_file}' once the ZAP daemon is up")
