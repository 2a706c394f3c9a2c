"""
Command Line Interface for Ritual Weave.
"""

from typing import Optional

import typer
import uvicorn
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import get_settings
from ..domain import RunStatus
from ..triggers import triggers_for_status

app = typer.Typer(help="Ritual Weave - household rituals, runs and attention items")
console = Console()


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind the server to"),
    port: Optional[int] = typer.Option(None, help="Port to run the API server on"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Start the Ritual Weave API server."""
    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    rprint(Panel.fit(f"Starting Ritual Weave on http://{host}:{port}", style="bold blue"))
    uvicorn.run("ritual_weave.main:app", host=host, port=port, reload=reload)


@app.command()
def triggers(
    status: str = typer.Argument(..., help="Run status (planned/in_progress/complete)")
):
    """Show the next triggers projected for a run status."""
    try:
        run_status = RunStatus(status.lower())
    except ValueError:
        console.print(
            f"❌ Invalid status. Use: {', '.join(s.value for s in RunStatus)}"
        )
        raise typer.Exit(code=1)

    table = Table(
        title=f"Next triggers: {run_status.value}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Event", style="cyan", no_wrap=True)
    table.add_column("Status", style="green", no_wrap=True)
    table.add_column("Label", style="yellow")
    table.add_column("Description")

    for trigger in triggers_for_status(run_status):
        table.add_row(
            trigger.event.value,
            trigger.status.value,
            trigger.label,
            trigger.description,
        )

    console.print(table)


@app.command()
def version():
    """Show version information."""
    from .. import __version__

    rprint(Panel.fit(f"Ritual Weave v{__version__}", style="bold green"))


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
