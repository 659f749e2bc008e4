"""Jaeger agent."""

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.management.ports import static_port
from svclaunch.services.common import DirectServiceLauncher


@launcher("agent")
class AgentLauncher(DirectServiceLauncher):
    """Jaeger agent forwarding spans to the collector."""
    binary = "./jaeger-agent"
    ports = (
        static_port("agent-http", "AGENT_HTTP_PORT"),
    )

    def configure(self, config: LaunchConfiguration):
        config.values["collector"] = (
            f"{self.require_env('COLLECTOR_HOST')}:{self.require_env_port('COLLECTOR_PORT')}"
        )

    def build_args(self, config: LaunchConfiguration) -> list[str]:
        return [
            f"--http-server.host-port=:{config.port('agent-http')}",
            f"--reporter.tchannel.host-port={config.values['collector']}",
        ]
