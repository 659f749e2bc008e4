"""Grafana dashboards."""

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.management.ports import bound_port
from svclaunch.services.common import DirectServiceLauncher


GRAFANA_HOME = "/usr/share/grafana"


@launcher("grafana")
class GrafanaLauncher(DirectServiceLauncher):
    """Grafana server."""
    binary = "./usr/bin/grafana/bin/grafana-server"
    ports = (
        bound_port("grafana", "GRAFANA_PORT"),
    )

    def build_args(self, config: LaunchConfiguration) -> list[str]:
        home = self.context.service_config.get("homepath", GRAFANA_HOME)
        return [
            "--config", f"{home}/conf/config.ini",
            "-homepath", home,
            f"cfg:default.server.http_port={config.port('grafana')}",
        ]
