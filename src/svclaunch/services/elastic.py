"""Elasticsearch node.

Seed hosts and the master quorum come from discovery. A first node finds
neither and starts without them.
"""

from pathlib import Path

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.management.ports import static_port
from svclaunch.management.tools import is_unset
from svclaunch.services.common import DirectServiceLauncher, install_file


ES_CONFIG_DIR = "/opt/elasticsearch/config"
PACKAGED_CONFIG_FILES = ("log4j2.properties", "jvm.options")


@launcher("elastic")
class ElasticLauncher(DirectServiceLauncher):
    """Elasticsearch node bound to the advertised host address."""
    binary = "/opt/elasticsearch/bin/elasticsearch"
    ports = (
        static_port("http", "PRIMARY_PORT"),
        static_port("transport", "SECONDARY_PORT"),
    )

    def configure(self, config: LaunchConfiguration):
        tools = self.context.tools
        advertised_host = tools.local_ip()
        seed_nodes = tools.discovery_data("HOST_LIST")
        quorum = tools.discovery_data("QUORUM")

        config_dir = Path(self.context.service_config.get("config_dir", ES_CONFIG_DIR))
        package_dir = self.settings.require_path("package_dir")
        for name in PACKAGED_CONFIG_FILES:
            install_file(package_dir / name, config_dir / name)

        config.values.update({
            "advertised_host": advertised_host,
            "seed_nodes": None if is_unset(seed_nodes) else seed_nodes,
            "quorum": None if is_unset(quorum) else quorum,
        })

    def build_args(self, config: LaunchConfiguration) -> list[str]:
        host = config.values["advertised_host"]
        http = config.port("http")
        transport = config.port("transport")
        args = [
            # stdout already goes to the .stdout sink
            "--quiet",
            f"-Ehttp.bind_host={host}",
            f"-Ehttp.publish_host={host}",
            f"-Enetwork.bind_host={host}",
            f"-Enetwork.publish_host={host}",
            f"-Etransport.tcp.port={transport}",
            f"-Etransport.publish_port={transport}",
            f"-Ehttp.port={http}",
            f"-Ehttp.publish_port={http}",
            f"-Epath.data={self.settings.require_path('data_dir')}",
            f"-Epath.logs={self.settings.require_path('log_dir')}",
            "-Ediscovery.zen.ping_timeout=30s",
        ]
        if config.values["seed_nodes"]:
            args.append(f"-Ediscovery.zen.ping.unicast.hosts={config.values['seed_nodes']}")
        if config.values["quorum"]:
            args.append(f"-Ediscovery.zen.minimum_master_nodes={config.values['quorum']}")
        return args
