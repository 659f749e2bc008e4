"""Platform helper tools invoked during a launch.

The platform installs a set of small executables in SERVICE_TOOLS_DIR.
Each is run synchronously, without a timeout: a hung helper hangs the
launch. Any failure raises ExternalToolFailure and is not retried.

Tool locations can be overridden from the launcher config:

    tools:
      local_ip: /usr/local/bin/my-local-ip
"""

import logging
import subprocess
from pathlib import Path
from typing import Any

from svclaunch.errors import ExternalToolFailure
from svclaunch.management.environment import LauncherSettings


# Discovery answers that mean "nothing stored yet"
UNSET_VALUES = ("", "null")


def is_unset(value: str | None) -> bool:
    return value is None or value.strip() in UNSET_VALUES


class ServiceTools:
    """Runs the helper executables from SERVICE_TOOLS_DIR."""

    TOOL_SCRIPTS = {
        "service_init": "serviceInit.sh",
        "local_ip": "localIp.sh",
        "discovery_data": "discoveryData.sh",
        "internal_config": "internalConfig.sh",
        "zookeeper_url": "zookeeperUrl.sh",
    }

    def __init__(self, settings: LauncherSettings, overrides: dict[str, Any] | None = None):
        self.settings = settings
        self.overrides = overrides or {}
        self.logger = logging.getLogger("tools")

    def tool_path(self, name: str) -> str:
        """Return the executable path for a tool name."""
        if self.overrides.get(name):
            return str(self.overrides[name])
        script = self.TOOL_SCRIPTS[name]
        return str(self.settings.require_path("tools_dir") / script)

    def _run(self, name: str, args: list[str], stdout: Any) -> subprocess.CompletedProcess:
        path = self.tool_path(name)
        command = [path, *args]
        self.logger.debug(f"Running helper: {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                stdout=stdout,
                text=True,
                env=dict(self.settings.environ),
            )
        except OSError as e:
            raise ExternalToolFailure(Path(path).name, detail=str(e)) from e

        if result.returncode != 0:
            raise ExternalToolFailure(Path(path).name, returncode=result.returncode)
        return result

    def run(self, name: str, *args: str, required: bool = True) -> str:
        """Run a tool and return its stripped standard output.

        Args:
            name: Tool key (see TOOL_SCRIPTS)
            *args: Positional arguments for the tool
            required: If True, empty output is a failure

        Raises:
            ExternalToolFailure: On a missing tool, nonzero exit, or empty required output
        """
        result = self._run(name, list(args), subprocess.PIPE)
        output = (result.stdout or "").strip()
        if required and not output:
            raise ExternalToolFailure(Path(self.tool_path(name)).name, detail="produced no output")
        return output

    def service_init(self):
        """Run the instance bootstrap step; its output goes straight to our streams."""
        self.logger.info("Running service initialization")
        self._run("service_init", [], None)

    def local_ip(self) -> str:
        return self.run("local_ip")

    def zookeeper_url(self, path: str = "") -> str:
        return self.run("zookeeper_url", path)

    def discovery_data(self, key: str, service_uuid: str | None = None) -> str:
        """Fetch a discovery value for this service; may be '' or 'null' when unset."""
        uuid = service_uuid or self.settings.require("SERVICE_UUID")
        return self.run("discovery_data", uuid, key, required=False)

    def discovery_data_to_file(self, key: str, destination: Path, service_uuid: str | None = None) -> Path:
        """Write a discovery document (JSON/YAML) to destination."""
        uuid = service_uuid or self.settings.require("SERVICE_UUID")
        destination.parent.mkdir(parents=True, exist_ok=True)
        with open(destination, "w") as f:
            self._run("discovery_data", [uuid, key], f)
        self.logger.info(f"Fetched {key} into {destination}")
        return destination

    def internal_config(self, key: str) -> str:
        return self.run("internal_config", key)
