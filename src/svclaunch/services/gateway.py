"""Database gateway (Tomcat).

The gateway hosts a Raft member of the metadata store. Before start it
needs the cluster's initial configuration, fetched from discovery into the
data directory; without it the node cannot join, so a failed fetch aborts
the launch.

Options are assembled in a fixed order, later entries overriding earlier:

    java opts, raft tuning (optional), database opts, rpc port opts, GC opts
"""

from pathlib import Path

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.management.ports import static_port
from svclaunch.services.common import TomcatServiceLauncher


INITIAL_CONFIG_KEY = "INITIAL_CONFIG"
INITIAL_CONFIG_FILE = "initial_config.json"
GC_OPTS = "-XX:+UseG1GC"


@launcher("gateway")
class GatewayLauncher(TomcatServiceLauncher):
    """Database gateway hosting a metadata Raft member."""
    ports = (
        static_port("raft-rpc", "RAFT_RPC_PORT"),
        static_port("metadata-rpc", "METADATA_RPC_PORT"),
    )

    def raft_opts(self) -> str | None:
        """Optional Raft timing overrides.

        Taken from services.gateway.raft_opts in the launcher config, else
        from RAFT_OPTS. Unset by default; used on clusters with very high
        partition counts where leader election needs longer timeouts.
        """
        return self.context.service_config.get("raft_opts") or self.settings.get("RAFT_OPTS")

    def fetch_initial_config(self, storage_dir: Path) -> Path:
        destination = storage_dir / INITIAL_CONFIG_FILE
        self.context.tools.discovery_data_to_file(INITIAL_CONFIG_KEY, destination)
        return destination

    def add_options(self, config: LaunchConfiguration):
        storage_dir = self.settings.require_path("data_dir")
        node_id = self.settings.require("SERVICE_INSTANCE_UUID")
        connection_host = self.context.tools.local_ip()
        initial_config = self.fetch_initial_config(storage_dir)

        self.logger.info(f"Database storage dir: {storage_dir}")
        self.logger.info(f"Database node id: {node_id}")
        self.logger.info(f"Database connection host: {connection_host}")
        self.logger.info(f"Database initial config file: {initial_config}")
        self.logger.info(f"Initial config: {initial_config.read_text()}")

        logging_properties = Path(config.values["logging_conf_dir"]) / "logging.properties"
        if logging_properties.is_file():
            self.logger.info(f"{logging_properties} exists, setting LOGGING_PROPERTIES")
            config.env["LOGGING_PROPERTIES"] = str(logging_properties)

        config.values.update({
            "storage_dir": str(storage_dir),
            "node_id": node_id,
            "connection_host": connection_host,
            "initial_config": str(initial_config),
        })

        config.options.add(self.raft_opts())
        config.options.set_property("database.storage.dir", storage_dir)
        config.options.set_property("database.node.id", node_id)
        config.options.set_property("database.connection.host", connection_host)
        # Property name is what the gateway reads, spelling included
        config.options.set_property("metadata.intial.config.path", initial_config)
        config.options.set_property("port.rpc.raft", config.port("raft-rpc"))
        config.options.set_property("port.rpc.metadata", config.port("metadata-rpc"))
        config.options.add(GC_OPTS)
