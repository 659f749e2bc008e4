"""Metadata coordination service (Vert.x)."""

from svclaunch.base_service import launcher
from svclaunch.management.ports import bound_port
from svclaunch.services.common import VertxServiceLauncher


@launcher("coordination")
class CoordinationLauncher(VertxServiceLauncher):
    """Metadata coordination service."""
    ports = (
        bound_port("rpc", "RPC_PORT"),
    )
    positional_ports = ("monitoring", "support", "debug", "rpc", "jmx")
