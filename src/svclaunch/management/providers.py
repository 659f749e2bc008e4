"""Value providers shared by the JVM launchers.

Each provider answers one question (debug port, JMX port, Java options,
minimum heap option, logging config directory) with a single value on
standard output. download_ssl is the exception: it fetches the cluster
certificate bundle into a file and only its exit status matters.

By default a provider calls its function (PROVIDER_FUNCTIONS) in the
platform helper library, funcs.sh, shipped with the service package. Any
provider can be replaced with a direct command:

    providers:
      java_opts: /opt/acme/bin/java-opts --service coordination
"""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Any

from svclaunch.errors import ExternalToolFailure
from svclaunch.management.environment import LauncherSettings
from svclaunch.management.ports import parse_port


HELPER_LIBRARY = "foundry-scripts/funcs.sh"

PROVIDER_FUNCTIONS = {
    "debug_port": "get_debug_port",
    "jmx_port": "get_jmx_port",
    "java_opts": "get_java_opts",
    "min_heap_opt": "get_min_heap_opt",
    "logging_conf_directory": "get_logging_conf_directory",
    "download_ssl": "downloadSslWithRetry",
}


def available_cpus() -> int:
    """Number of processor cores this process may run on."""
    if hasattr(os, "sched_getaffinity"):
        return len(os.sched_getaffinity(0))
    return os.cpu_count() or 1


class Providers:
    """Stable Python interface over the helper library functions."""

    def __init__(
        self,
        settings: LauncherSettings,
        commands: dict[str, Any] | None = None,
        library: str | Path | None = None
    ):
        self.settings = settings
        self.commands = commands or {}
        self._library = library
        self.logger = logging.getLogger("providers")

    @property
    def library(self) -> Path:
        if self._library is not None:
            return Path(self._library)
        return self.settings.require_path("package_dir") / HELPER_LIBRARY

    def command_for(self, name: str, *args: str) -> list[str]:
        """Build the command line for a provider."""
        override = self.commands.get(name)
        if override:
            base = shlex.split(override) if isinstance(override, str) else [str(a) for a in override]
            return [*base, *args]
        function = PROVIDER_FUNCTIONS[name]
        # $0 is the library path, "$@" the function and its arguments
        return ["bash", "-c", '. "$0" && "$@"', str(self.library), function, *args]

    def call(self, name: str, *args: str, required: bool = True) -> str:
        """Run a provider and return its stripped output.

        Raises:
            ExternalToolFailure: On a missing command, nonzero exit, or empty required output
        """
        command = self.command_for(name, *args)
        label = PROVIDER_FUNCTIONS[name]
        self.logger.debug(f"Calling provider {label}")
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                text=True,
                env=dict(self.settings.environ),
            )
        except OSError as e:
            raise ExternalToolFailure(label, detail=str(e)) from e

        if result.returncode != 0:
            raise ExternalToolFailure(label, returncode=result.returncode)

        value = (result.stdout or "").strip()
        if required and not value:
            raise ExternalToolFailure(label, detail="produced no output")
        return value

    def get_debug_port(self) -> int:
        return parse_port("debug", self.call("debug_port"), PROVIDER_FUNCTIONS["debug_port"])

    def get_jmx_port(self) -> int:
        return parse_port("jmx", self.call("jmx_port"), PROVIDER_FUNCTIONS["jmx_port"])

    def get_java_opts(self) -> str:
        return self.call("java_opts", required=False)

    def get_min_heap_opt(self) -> str:
        return self.call("min_heap_opt", required=False)

    def get_logging_conf_directory(self) -> str:
        return self.call("logging_conf_directory")

    def download_ssl(self, destination: str | Path) -> Path:
        """Download the cluster private key and certificate (PKCS#12) to destination."""
        self.call("download_ssl", str(destination), required=False)
        self.logger.info(f"Downloaded cluster certificate bundle to {destination}")
        return Path(destination)
