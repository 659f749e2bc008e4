"""Management API service (Vert.x)."""

from svclaunch.base_service import launcher
from svclaunch.management.ports import bound_port
from svclaunch.services.common import VertxServiceLauncher


@launcher("mapi")
class MapiLauncher(VertxServiceLauncher):
    """Management API service."""
    ports = (
        bound_port("mapi", "MAPI_PORT"),
    )
    positional_ports = ("monitoring", "support", "debug", "mapi", "jmx")
