"""Vault secrets server with a ZooKeeper storage backend.

The private key and certificate are extracted from the downloaded cluster
bundle with openssl. server.hcl is rendered in place from its placeholders.
"""

import subprocess
from pathlib import Path

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.errors import ExternalToolFailure
from svclaunch.management.ports import bound_port, static_port
from svclaunch.services.common import DirectServiceLauncher, apply_template


CONFIG_FILE = "/etc/vault/server.hcl"
PKCS_FILE = "/etc/vault/cluster.pkcs12"
KEY_FILE = "/etc/vault/cluster.key"
CERT_FILE = "/etc/vault/cluster.crt"


@launcher("vault")
class VaultLauncher(DirectServiceLauncher):
    """Vault server."""
    binary = "vault"
    log_name = "vault"
    ports = (
        bound_port("vault-http", "VAULT_HTTP_PORT"),
        static_port("vault-cluster", "VAULT_CLUSTER_PORT"),
    )

    def extract_pkcs12(self, bundle: Path, key_file: Path, cert_file: Path):
        """Split the bundle into an unencrypted key and certificate.

        Raises:
            ExternalToolFailure: If openssl is missing or fails
        """
        openssl = str(self.context.service_config.get("openssl", "openssl"))
        for selector, destination in (("-nocerts", key_file), ("-nokeys", cert_file)):
            command = [
                openssl, "pkcs12", "-nodes", "-in", str(bundle), "-passin", "pass:",
                selector, "-out", str(destination),
            ]
            self.logger.debug(f"Running: {' '.join(command)}")
            try:
                result = subprocess.run(command, env=dict(self.settings.environ))
            except OSError as e:
                raise ExternalToolFailure("openssl", detail=str(e)) from e
            if result.returncode != 0:
                raise ExternalToolFailure("openssl", returncode=result.returncode)

    def configure(self, config: LaunchConfiguration):
        service_config = self.context.service_config
        tools = self.context.tools
        host = tools.local_ip()
        zookeeper = tools.zookeeper_url("")

        config_file = Path(service_config.get("config_file", CONFIG_FILE))
        key_file = Path(service_config.get("key_file", KEY_FILE))
        cert_file = Path(service_config.get("cert_file", CERT_FILE))
        bundle = self.context.providers.download_ssl(service_config.get("pkcs_file", PKCS_FILE))
        self.extract_pkcs12(bundle, key_file, cert_file)

        apply_template(config_file, config_file, {
            "VAULT_HOST": host,
            "VAULT_HTTP_PORT": config.port("vault-http"),
            "VAULT_CLUSTER_PORT": config.port("vault-cluster"),
            "ZOOKEEPER_HOST": zookeeper,
            "VAULT_CERT_FILE": cert_file,
            "VAULT_KEY_FILE": key_file,
        })
        self.logger.info(f"Vault config:\n{config_file.read_text()}")

        config.values.update({
            "host": host,
            "zookeeper": zookeeper,
            "config_file": str(config_file),
        })

    def build_args(self, config: LaunchConfiguration) -> list[str]:
        return ["server", "-config", config.values["config_file"]]
