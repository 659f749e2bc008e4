"""Resolve command for svcctl.

Resolves only the ports read from the environment. No helper tools or
providers are run, so this is safe on a live node.
"""

from typing import Annotated

import typer

from svclaunch.errors import LaunchError
from svclaunch.management.environment import LauncherSettings, load_dotenv_if_available
from svclaunch.management.ports import PortResolver
from svcctl.catalog import configure_logging, get_launcher_or_exit, load_registry
from svcctl.display import ResolutionRow, display_resolution, environment_ports


def resolve_ports(specs, resolver: PortResolver) -> list[ResolutionRow]:
    rows = []
    for spec in specs:
        row = ResolutionRow(role=spec.role, variable=spec.env_name)
        try:
            binding = resolver.resolve(spec)
        except LaunchError as e:
            row.error = str(e)
        else:
            row.port = binding.port
            row.source = binding.source
        rows.append(row)
    return rows


def resolve_ports_cmd(
    service: Annotated[str, typer.Argument(help="Service name")],
    config: Annotated[str | None, typer.Option("--config", "-c", help="Launcher config file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="INFO level logging")] = False,
):
    """Resolve a service's environment ports as the launcher would.

    Exits with code 1 if any role cannot be resolved.
    """
    configure_logging(verbose)
    load_dotenv_if_available()
    registry = load_registry(config)
    launcher_class = get_launcher_or_exit(registry, service)

    specs = environment_ports(launcher_class.descriptor())
    rows = resolve_ports(specs, PortResolver(LauncherSettings.from_environ().environ))
    display_resolution(service, rows)

    if any(row.error for row in rows):
        raise typer.Exit(1)
