"""Main Typer app for svcctl CLI.

Usage:
    svcctl list
    svcctl show gateway
    svcctl resolve coordination
"""

import typer

from svcctl.commands.list import list_launchers_cmd
from svcctl.commands.resolve import resolve_ports_cmd
from svcctl.commands.show import show_launcher_cmd

app = typer.Typer(pretty_exceptions_enable=False, rich_markup_mode=None, no_args_is_help=True)
app.command("list")(list_launchers_cmd)
app.command("show")(show_launcher_cmd)
app.command("resolve")(resolve_ports_cmd)


def main():
    """Entry point for svcctl CLI."""
    app()


if __name__ == "__main__":
    main()
