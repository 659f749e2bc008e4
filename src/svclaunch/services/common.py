"""Shared launcher shapes.

JVM services are started through a platform start helper with positional
arguments:

    start-vertx.sh  <log-conf-dir> <options> <monitoring> <support> <debug> [ports...]
    start-tomcat.sh <log-conf-dir> <options> <monitoring> <support> <debug> [ports...]

The order of the trailing ports is fixed per service (positional_ports).
Everything else execs its binary directly with flags.
"""

import shutil
from abc import abstractmethod
from pathlib import Path

from svclaunch.base_service import LaunchConfiguration, LaunchSpec, ServiceLauncher
from svclaunch.errors import LaunchFailure, MissingConfiguration
from svclaunch.management.ports import (
    MONITORING_PORT,
    SUPPORT_PORT,
    PortBinding,
    PortResolver,
    parse_port,
)


VERTX_HELPER = "/opt/aspen/scripts/start-vertx.sh"
TOMCAT_HELPER = "/opt/aspen/scripts/start-tomcat.sh"

# Larger ZooKeeper client buffer for services reading big znodes
ZK_BUFFER_SIZE = "-Djute.maxbuffer=4194304"


def apply_template(source: Path, destination: Path, replacements: dict[str, object]) -> Path:
    """Copy a template, replacing each placeholder with its value (in order).

    Source and destination may be the same file.

    Raises:
        LaunchFailure: If the template cannot be read or the result written
    """
    try:
        text = source.read_text()
        for placeholder, value in replacements.items():
            text = text.replace(placeholder, str(value))
        destination.write_text(text)
    except OSError as e:
        raise LaunchFailure(f"Cannot render {source} into {destination}: {e}") from e
    return destination


def install_file(source: Path, destination: Path) -> Path:
    """Copy a file shipped with the service package into place.

    Raises:
        LaunchFailure: If the source is missing or the destination is not writable
    """
    try:
        shutil.copy(source, destination)
    except OSError as e:
        raise LaunchFailure(f"Cannot install {source} as {destination}: {e}") from e
    return destination


class DirectServiceLauncher(ServiceLauncher):
    """Launcher that execs the service binary itself."""

    def binary_path(self) -> str:
        return str(self.context.service_config.get("binary") or self.binary)

    @abstractmethod
    def build_args(self, config: LaunchConfiguration) -> list[str]:
        """Arguments after argv[0]."""
        pass

    def build_launch(self, config: LaunchConfiguration) -> LaunchSpec:
        binary = self.binary_path()
        return LaunchSpec(
            executable=binary,
            argv=[binary, *self.build_args(config)],
            env=self.launch_env(config),
        )

    def require_env(self, name: str) -> str:
        return self.settings.require(name)

    def require_env_port(self, name: str) -> int:
        return parse_port(name.lower(), self.settings.require(name), name)


class JvmServiceLauncher(ServiceLauncher):
    """Launcher for JVM services run through a start helper.

    Resolves the standard monitoring/support/debug/JMX ports, the logging
    config directory and the base Java options, in that order, before
    service-specific options are appended.
    """
    uses_standard_ports = True
    helper_name = ""
    positional_ports: tuple[str, ...] = ("monitoring", "support", "debug", "jmx")
    use_min_heap = True

    def resolve_ports(self, resolver: PortResolver) -> dict[str, PortBinding]:
        # Environment roles first, so a missing variable fails before any helper runs
        bindings = resolver.resolve_all((MONITORING_PORT, SUPPORT_PORT))
        service_bindings = resolver.resolve_all(self.ports)

        providers = self.context.providers
        bindings["debug"] = PortBinding("debug", providers.get_debug_port(), "get_debug_port")
        bindings["jmx"] = PortBinding("jmx", providers.get_jmx_port(), "get_jmx_port")
        bindings.update(service_bindings)
        return bindings

    def configure(self, config: LaunchConfiguration):
        providers = self.context.providers
        config.values["logging_conf_dir"] = providers.get_logging_conf_directory()

        if self.use_min_heap:
            config.options.add(providers.get_min_heap_opt())
        config.options.add(providers.get_java_opts())

        self.add_options(config)

        # Operator-supplied options go last so they win
        config.options.add(self.context.service_config.get("extra_opts"))

    def add_options(self, config: LaunchConfiguration):
        """Append service-specific options."""
        pass

    def helper_path(self) -> str:
        return self.context.helper(self.helper_name, self.binary)

    def build_launch(self, config: LaunchConfiguration) -> LaunchSpec:
        if "logging_conf_dir" not in config.values:
            raise MissingConfiguration("logging_conf_dir", "configure() did not run")
        helper = self.helper_path()
        argv = [
            helper,
            str(config.values["logging_conf_dir"]),
            config.options.render(),
            *[str(config.port(role)) for role in self.positional_ports],
        ]
        return LaunchSpec(executable=helper, argv=argv, env=self.launch_env(config))


class VertxServiceLauncher(JvmServiceLauncher):
    """Vert.x service started by start-vertx.sh."""
    helper_name = "vertx"
    binary = VERTX_HELPER


class TomcatServiceLauncher(JvmServiceLauncher):
    """Tomcat-hosted service started by start-tomcat.sh."""
    helper_name = "tomcat"
    binary = TOMCAT_HELPER
    use_min_heap = False
