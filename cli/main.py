"""
zapscan CLI - Main entry point
Drive a running OWASP ZAP daemon from a build pipeline
"""

import typer
from rich.console import Console
import sys

# Import commands
from cli.commands import init, scan

__version__ = "0.1.0"

# Initialize Typer app
app = typer.Typer(
    name="zapscan",
    help="🔎 zapscan - run ZAP spider/active scans and gate builds on the alerts",
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

# Register commands
app.command(name="init")(init.init_command)
app.command(name="scan")(scan.scan_command)


@app.callback()
def callback():
    """
    zapscan - ZAP scan step for CI builds

    Talks to an already-running ZAP daemon through its API.
    """
    pass


@app.command()
def version():
    """Show zapscan version"""
    console.print(f"[bold green]zapscan[/bold green] v{__version__}")


def main():
    """Main entry point"""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
