"""Inbound mirroring service (Vert.x)."""

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.management.ports import bound_port
from svclaunch.management.providers import available_cpus
from svclaunch.services.common import VertxServiceLauncher


@launcher("mirror-in")
class MirrorInLauncher(VertxServiceLauncher):
    """Inbound mirroring service."""
    ports = (
        bound_port("mirror-in", "MIRROR_IN_SERVICE_PORT"),
    )
    positional_ports = ("monitoring", "support", "debug", "jmx", "mirror-in")

    def add_options(self, config: LaunchConfiguration):
        # One pooled connection per core for both backends
        cpus = available_cpus()
        config.values["cpus"] = cpus
        config.options.set_property("co.metadata.maxPoolSize", cpus)
        config.options.set_property("co.storage.maxPoolSize", cpus)
