"""CLI entry point using Typer."""

from __future__ import annotations

import typer

from open_mobile_agent.cli.commands import daemon, device, element, ui
from open_mobile_agent.cli.commands import input as input_commands

app = typer.Typer(
    name="open-mobile-agent",
    help="Semantic UI inspection and control for Android and iOS devices",
    no_args_is_help=True,
)


@app.command()
def version() -> None:
    """Show version information."""
    from open_mobile_agent import __version__

    typer.echo(f"open-mobile-agent v{__version__}")


app.add_typer(daemon.app, name="daemon")
app.add_typer(device.app, name="device")
app.add_typer(ui.app, name="ui")
app.add_typer(element.app, name="element")
app.add_typer(input_commands.app, name="input")


if __name__ == "__main__":
    app()
