"""Logstash pipeline.

Pipeline configs live in the data directory. The default template is
copied there on first start so operators can edit it; each start renders
log.conf (and custom_log.conf, when a product ships one) from the
templates.
"""

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.management.ports import bound_port
from svclaunch.services.common import ZK_BUFFER_SIZE, DirectServiceLauncher, apply_template, install_file


TEMPLATES = (
    ("log.conf.src", "log.conf"),
    ("custom_log.conf.src", "custom_log.conf"),
)


@launcher("logstash")
class LogstashLauncher(DirectServiceLauncher):
    """Logstash reading from Kafka and syslog into Elasticsearch."""
    binary = "/opt/logstash/bin/logstash"
    ports = (
        bound_port("primary", "PRIMARY_PORT"),
    )

    def install_default_template(self):
        template = self.data_path("log.conf.src")
        if not template.exists():
            self.logger.info("Copying default logstash configuration template")
            source = self.settings.require_path("package_dir") / "log.conf.src"
            install_file(source, template)

    def configure(self, config: LaunchConfiguration):
        server_host = self.context.tools.local_ip()
        # This URL is referenced in LogstashMonitor
        kafka_url = f"localhost:{self.require_env('KAFKA_PORT')}"
        replacements = {
            "KAFKA_SERVER": kafka_url,
            "ELASTIC_HOST": f"localhost:{self.require_env('ELASTIC_PORT')}",
            "SYSLOG_PORT": self.require_env("SYSLOG_PORT"),
        }

        self.install_default_template()
        for source_name, target_name in TEMPLATES:
            source = self.data_path(source_name)
            if source.exists():
                apply_template(source, self.data_path(target_name), replacements)
                self.logger.info(f"Rendered {target_name}")

        config.env["LS_JAVA_OPTS"] = ZK_BUFFER_SIZE
        config.values.update({
            "server_host": server_host,
            "kafka_url": kafka_url,
            "log_file": str(self.settings.require_path("log_dir") / "logstash.log"),
        })

    def build_args(self, config: LaunchConfiguration) -> list[str]:
        return [
            "-f", str(self.data_path("*.conf")),
            "-l", config.values["log_file"],
            "--http.port", str(config.port("primary")),
            "--http.host", config.values["server_host"],
        ]
