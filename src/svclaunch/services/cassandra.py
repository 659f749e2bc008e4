"""Cassandra node.

cassandra.yaml is rendered into the data directory from the packaged
template on every start. Seed nodes come from discovery; the first node of
a cluster finds none and seeds itself.
"""

from pathlib import Path

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.management.ports import static_port
from svclaunch.management.tools import is_unset
from svclaunch.services.common import DirectServiceLauncher, apply_template, install_file


INSTALL_CONF_DIR = "/opt/cassandra/conf"
CONFIG_TEMPLATE = "cassandra.yaml.src"
PACKAGED_CONFIG_FILES = ("cassandra-rackdc.properties", "logback.xml")


@launcher("cassandra")
class CassandraLauncher(DirectServiceLauncher):
    """Cassandra database node."""
    binary = "/opt/cassandra/bin/cassandra"
    ports = (
        static_port("native-transport", "PRIMARY_PORT"),
        static_port("storage", "SECONDARY_PORT"),
    )

    def seed_nodes(self, broadcast_address: str) -> str:
        seeds = self.context.tools.discovery_data("HOST_LIST")
        if is_unset(seeds):
            self.logger.info(f"No seed nodes in discovery, seeding from {broadcast_address}")
            return broadcast_address
        return seeds

    def configure(self, config: LaunchConfiguration):
        tools = self.context.tools
        conf_dir = self.settings.require_path("package_dir") / "conf"
        data_dir = self.settings.require_path("data_dir")
        broadcast_address = tools.local_ip()
        seeds = self.seed_nodes(broadcast_address)
        compaction = tools.discovery_data("compactionThroughput")
        stream = tools.discovery_data("streamThroughput")

        cassandra_yaml = apply_template(conf_dir / CONFIG_TEMPLATE, data_dir / "cassandra.yaml", {
            "BROADCAST_ADDRESS": broadcast_address,
            "SEED_NODES": seeds,
            "NATIVE_TRANSPORT_PORT": config.port("native-transport"),
            "STORAGE_PORT": config.port("storage"),
            "COMPACTION_THROUGHPUT": compaction,
            "STREAM_THROUGHPUT": stream,
        })

        install_dir = Path(self.context.service_config.get("install_conf_dir", INSTALL_CONF_DIR))
        for name in PACKAGED_CONFIG_FILES:
            install_file(conf_dir / name, install_dir / name)

        config.env["CASSANDRA_DATA_HOME"] = str(data_dir)
        config.env["CASSANDRA_CONFIG"] = str(conf_dir)
        config.values.update({
            "broadcast_address": broadcast_address,
            "seed_nodes": seeds,
            "cassandra_yaml": str(cassandra_yaml),
            "conf_dir": str(conf_dir),
        })

    def build_args(self, config: LaunchConfiguration) -> list[str]:
        values = config.values
        data_dir = self.settings.require_path("data_dir")
        return [
            "-f",
            f"-Dcassandra.config=file://{values['cassandra_yaml']}",
            f"-Dlogback.configurationFile={values['conf_dir']}/logback.xml",
            f"-Dcassandra.logdir={self.settings.require_path('log_dir')}",
            f"-Dcassandra.storagedir={data_dir / 'data'}/",
            f"-Djava.rmi.server.hostname={values['broadcast_address']}",
        ]
