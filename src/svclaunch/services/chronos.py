"""Chronos job scheduler on Mesos."""

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.management.ports import bound_port
from svclaunch.services.common import ZK_BUFFER_SIZE, DirectServiceLauncher


CHRONOS_JAR = "/opt/chronos-2.5.0/chronos-2.5.0.jar"
MAIN_CLASS = "org.apache.mesos.chronos.scheduler.Main"
DEFAULT_HEAP = "512m"
RECONCILIATION_INTERVAL = 300


@launcher("chronos")
class ChronosLauncher(DirectServiceLauncher):
    """Chronos scheduler."""
    binary = "java"
    ports = (
        bound_port("primary", "PRIMARY_PORT"),
    )

    def configure(self, config: LaunchConfiguration):
        tools = self.context.tools
        config.values.update({
            "mesos_zk": tools.zookeeper_url("mesos"),
            # Chronos keeps its own znodes under the default zk_path
            "chronos_zk": tools.zookeeper_url(""),
            "http_address": tools.local_ip(),
            "heap": self.settings.get("MAX_HEAP_SIZE", DEFAULT_HEAP),
            "jar": self.context.service_config.get("jar", CHRONOS_JAR),
        })

    def build_args(self, config: LaunchConfiguration) -> list[str]:
        values = config.values
        return [
            f"-Xmx{values['heap']}",
            ZK_BUFFER_SIZE,
            "-cp", values["jar"],
            MAIN_CLASS,
            "--master", f"zk://{values['mesos_zk']}",
            "--zk_hosts", values["chronos_zk"],
            "--http_port", str(config.port("primary")),
            "--http_address", values["http_address"],
            "--reconciliation_interval", str(RECONCILIATION_INTERVAL),
        ]
