"""Prometheus metrics service.

The scrape configuration is generated by the platform and fetched with
internalConfig.sh on every start; the local copy is overwritten.
"""

import yaml

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.errors import ExternalToolFailure
from svclaunch.management.ports import bound_port
from svclaunch.services.common import DirectServiceLauncher


CONFIG_KEY = "prometheus-config"
CONFIG_TOOL = "internalConfig.sh"


@launcher("prometheus")
class PrometheusLauncher(DirectServiceLauncher):
    """Prometheus server."""
    binary = "prometheus"
    log_name = "metrics-service"
    ports = (
        bound_port("prometheus", "PROMETHEUS_PORT"),
    )

    def render_config(self, text: str) -> str:
        """Apply PROMETHEUS_SCRAPE_INTERVAL to the fetched config, if set.

        Raises:
            ExternalToolFailure: If the fetched config is not a YAML mapping
        """
        interval = self.settings.get("PROMETHEUS_SCRAPE_INTERVAL")
        if interval is None:
            return text
        try:
            document = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ExternalToolFailure(CONFIG_TOOL, detail=f"{CONFIG_KEY} is not valid YAML: {e}") from e
        if not isinstance(document, dict):
            raise ExternalToolFailure(CONFIG_TOOL, detail=f"{CONFIG_KEY} is not a mapping")

        # A bare 'global:' key loads as None
        global_settings = document.get("global") or {}
        if not isinstance(global_settings, dict):
            raise ExternalToolFailure(CONFIG_TOOL, detail=f"'global' in {CONFIG_KEY} is not a mapping")
        global_settings["scrape_interval"] = interval
        document["global"] = global_settings
        return yaml.safe_dump(document, default_flow_style=False, sort_keys=False)

    def configure(self, config: LaunchConfiguration):
        retention = self.settings.require("PROMETHEUS_DB_RETENTION")
        db_path = self.settings.require("PROMETHEUS_DB_PATH")

        config_dir = self.data_path("etc", "prometheus")
        config_dir.mkdir(parents=True, exist_ok=True)
        config_file = config_dir / "prometheus.yml"

        rendered = self.render_config(self.context.tools.internal_config(CONFIG_KEY))
        config_file.write_text(rendered.rstrip("\n") + "\n")
        self.logger.info(f"Prometheus config:\n{config_file.read_text()}")

        # PROMETHEUS_DB_PATH is relative to the data directory
        tsdb_path = self.data_path(db_path.lstrip("/"))
        self.logger.info(f"TSDB_PATH: {tsdb_path}")

        config.values.update({
            "config_file": str(config_file),
            "tsdb_path": str(tsdb_path),
            "retention": retention,
        })

    def build_args(self, config: LaunchConfiguration) -> list[str]:
        values = config.values
        return [
            f"--config.file={values['config_file']}",
            f"--web.listen-address=:{config.port('prometheus')}",
            "--web.enable-lifecycle",
            f"--storage.tsdb.retention={values['retention']}",
            f"--storage.tsdb.path={values['tsdb_path']}",
        ]
