"""Jaeger query service and UI."""

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.management.ports import bound_port
from svclaunch.services.common import DirectServiceLauncher


@launcher("query")
class QueryLauncher(DirectServiceLauncher):
    """Jaeger query service serving the tracing UI."""
    binary = "./jaeger-query"
    ports = (
        bound_port("query-http", "QUERY_HTTP_PORT"),
        bound_port("query-health", "QUERY_HEALTH_CHECK_PORT"),
    )

    def configure(self, config: LaunchConfiguration):
        host = self.require_env("ELASTICSEARCH_HOST")
        port = self.require_env_port("ELASTICSEARCH_PORT")
        config.values["es_server_urls"] = f"http://{host}:{port}"
        config.values["static_files"] = self.context.service_config.get("static_files", "jaeger-ui-build")

    def build_args(self, config: LaunchConfiguration) -> list[str]:
        return [
            "--query.static-files", str(config.values["static_files"]),
            f"--es.server-urls={config.values['es_server_urls']}",
            f"--query.port={config.port('query-http')}",
            f"--admin-http-port={config.port('query-health')}",
        ]
