"""S3 data gateway (Tomcat).

Tomcat serves plain HTTP only when ENABLE_HTTP is 'true': conf/server.xml
is a symlink to one of two shipped variants. The cluster certificate
bundle is downloaded before start; a failed download aborts the launch.
"""

import shutil
from pathlib import Path

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.management.ports import bound_port, static_port
from svclaunch.services.common import TomcatServiceLauncher, apply_template


PKCS_FILE = "/etc/tomcat/cluster.pkcs12"
WEB_XML = "/etc/tomcat/web.xml"
HTTP_ENABLED_SERVER_XML = "http_enabled_server.xml"
HTTP_DISABLED_SERVER_XML = "http_disabled_server.xml"
DEFAULT_MAX_REQUEST_HEADERS = "100"


@launcher("data")
class DataLauncher(TomcatServiceLauncher):
    """S3-compatible data gateway."""
    ports = (
        static_port("s3-http", "S3_HTTP_PORT"),
        bound_port("s3-https", "S3_HTTPS_PORT"),
        static_port("s3-https-ext-lb", "S3_HTTPS_PORT_FOR_EXT_LB"),
    )
    positional_ports = ("monitoring", "support", "debug", "s3-http", "s3-https", "s3-https-ext-lb", "jmx")

    def select_server_xml(self) -> Path:
        conf_dir = Path(self.settings.require("CATALINA_HOME")) / "conf"
        http_enabled = self.settings.get("ENABLE_HTTP") == "true"
        variant = conf_dir / (HTTP_ENABLED_SERVER_XML if http_enabled else HTTP_DISABLED_SERVER_XML)

        server_xml = conf_dir / "server.xml"
        if server_xml.is_symlink() or server_xml.exists():
            server_xml.unlink()
        server_xml.symlink_to(variant)
        self.logger.info(f"server.xml -> {variant.name} (ENABLE_HTTP={http_enabled})")
        return variant

    def prepare_upload_dir(self) -> Path:
        """Empty temp dir for multipart POST bodies."""
        tmp_dir = self.data_path("tomcat-tmp")
        if tmp_dir.exists():
            shutil.rmtree(tmp_dir)
        tmp_dir.mkdir(parents=True)
        return tmp_dir

    def add_options(self, config: LaunchConfiguration):
        service_config = self.context.service_config
        cluster_name = self.settings.require("CLUSTER_NAME").lower()

        self.select_server_xml()
        self.context.providers.download_ssl(service_config.get("pkcs_file", PKCS_FILE))
        tmp_dir = self.prepare_upload_dir()

        web_xml = Path(service_config.get("web_xml", WEB_XML))
        apply_template(web_xml, web_xml, {"CLUSTERNAME": cluster_name})

        config.values.update({
            "cluster_name": cluster_name,
            "upload_dir": str(tmp_dir),
        })

        settings = self.settings
        config.options.set_property(
            "http.max_request_headers",
            settings.get("MAX_HTTP_REQUEST_HEADERS", DEFAULT_MAX_REQUEST_HEADERS)
        )
        # Set even when empty
        config.options.set_property("ssl.protocols", settings.get("SSL_PROTOCOLS", ""))
        config.options.set_property("ssl.ciphers", settings.get("SSL_CIPHERS", ""))
        config.options.set_property("s3.clustername", f"s3.{cluster_name}")
