"""Access to the launcher catalog for svcctl commands."""

import logging
from pathlib import Path

import typer
import yaml

from svclaunch.base_service import ServiceLauncher
from svclaunch.errors import LaunchError
from svclaunch.launchers.base_launcher import DEFAULT_CONFIG_FILE
from svclaunch.management.configuration import create_configuration_manager
from svclaunch.management.service_registry import ServiceRegistry


def configure_logging(verbose: bool):
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s')


def load_registry(config_file: str | None = None) -> ServiceRegistry:
    """Build a registry from the launcher config (explicit file must exist)."""
    if config_file is not None and not Path(config_file).exists():
        typer.secho(f"Configuration file not found: {config_file}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    if config_file is None and Path(DEFAULT_CONFIG_FILE).exists():
        config_file = DEFAULT_CONFIG_FILE

    manager = create_configuration_manager(config_file)
    try:
        config = manager.resolve_config()
    except yaml.YAMLError as e:
        typer.secho(f"Invalid configuration file {config_file}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    return ServiceRegistry(config)


def get_launcher_or_exit(registry: ServiceRegistry, service: str) -> type[ServiceLauncher]:
    try:
        return registry.get_launcher_class(service)
    except LaunchError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
