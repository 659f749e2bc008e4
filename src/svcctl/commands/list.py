"""List command for svcctl."""

from typing import Annotated

import typer

from svclaunch.errors import LaunchError
from svcctl.catalog import configure_logging, load_registry
from svcctl.display import display_launchers_table


def list_launchers_cmd(
    service: Annotated[str | None, typer.Argument(help="Filter by service name (substring match)")] = None,
    config: Annotated[str | None, typer.Option("--config", "-c", help="Launcher config file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="INFO level logging")] = False,
):
    """List the services svclaunch knows how to start.

    Includes built-in launchers and modules named in the registry section.
    """
    configure_logging(verbose)
    try:
        launchers = load_registry(config).list_launchers()
    except LaunchError as e:
        typer.secho(f"Error loading launchers: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    if service:
        launchers = {name: cls for name, cls in launchers.items() if service in name}

    display_launchers_table(launchers)
