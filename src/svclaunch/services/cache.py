"""Metadata cache service (Vert.x).

The cache cluster discovers peers over TCP; both ports are passed to the
JVM as system properties rather than positional helper arguments.
"""

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.management.ports import bound_port, static_port
from svclaunch.services.common import VertxServiceLauncher


DEFAULT_TCP_DISCOVERY_PORT = 47500


@launcher("cache")
class CacheLauncher(VertxServiceLauncher):
    """Metadata cache service."""
    log_name = "metadata-cache-service"
    use_min_heap = False
    ports = (
        bound_port("cache-tcp-disc", "CACHE_TCP_DISC_PORT", default=DEFAULT_TCP_DISCOVERY_PORT),
        static_port("cache-tcp-conn", "CACHE_TCP_CONN_PORT"),
    )

    def add_options(self, config: LaunchConfiguration):
        config.options.set_property("port.cache.tcp.disc", config.port("cache-tcp-disc"))
        config.options.set_property("port.cache.tcp.conn", config.port("cache-tcp-conn"))
