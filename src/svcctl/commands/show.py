"""Show command for svcctl."""

from typing import Annotated

import typer

from svcctl.catalog import configure_logging, get_launcher_or_exit, load_registry
from svcctl.display import display_descriptor


def show_launcher_cmd(
    service: Annotated[str, typer.Argument(help="Service name")],
    config: Annotated[str | None, typer.Option("--config", "-c", help="Launcher config file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="INFO level logging")] = False,
):
    """Show binary, log name and port roles of one service."""
    configure_logging(verbose)
    registry = load_registry(config)
    display_descriptor(get_launcher_or_exit(registry, service))
