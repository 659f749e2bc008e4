"""Environment snapshot and .env loading.

The launcher reads its ambient configuration exactly once, into a
LauncherSettings instance, and hands that object to every component.
Nothing below the entry point consults os.environ directly.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from svclaunch.errors import MissingConfiguration


def load_dotenv_if_available() -> tuple[bool, Path | None]:
    """Load .env file from current directory if it exists.

    Existing environment variables take precedence (override=False).

    Returns:
        Tuple of (success: bool, env_file_path: Path | None)
    """
    logger = logging.getLogger("env")

    env_file = Path(".env")
    if env_file.exists():
        load_dotenv(env_file, override=False)  # Existing env vars take precedence
        return True, env_file.absolute()

    logger.debug("No .env file found in current directory")
    return False, None


@dataclass(frozen=True)
class LauncherSettings:
    """Typed view of the injected key-value source.

    Attributes:
        environ: Full snapshot, used for PORT_DEF_*, BOUND_PORT_DEF_* and tuning values
        tools_dir: SERVICE_TOOLS_DIR, directory holding serviceInit.sh and friends
        package_dir: SERVICE_PACKAGE_DIR, root of the installed service package
        log_dir: SERVICE_LOG_DIR, destination of the .stdout/.stderr sinks
        data_dir: SERVICE_DATA_DIR, per-instance persistent state
        service_uuid: SERVICE_UUID, key for discovery lookups
        instance_uuid: SERVICE_INSTANCE_UUID, identity of this instance
    """
    environ: Mapping[str, str] = field(default_factory=dict)
    tools_dir: str | None = None
    package_dir: str | None = None
    log_dir: str | None = None
    data_dir: str | None = None
    service_uuid: str | None = None
    instance_uuid: str | None = None

    FIELD_VARIABLES = {
        "tools_dir": "SERVICE_TOOLS_DIR",
        "package_dir": "SERVICE_PACKAGE_DIR",
        "log_dir": "SERVICE_LOG_DIR",
        "data_dir": "SERVICE_DATA_DIR",
        "service_uuid": "SERVICE_UUID",
        "instance_uuid": "SERVICE_INSTANCE_UUID",
    }

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "LauncherSettings":
        """Build settings from a mapping (defaults to a copy of os.environ)."""
        snapshot = dict(os.environ if environ is None else environ)
        values = {
            attr: snapshot.get(var) or None
            for attr, var in cls.FIELD_VARIABLES.items()
        }
        return cls(environ=snapshot, **values)

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return a raw value, treating empty strings as unset."""
        value = self.environ.get(name)
        if value is None or value == "":
            return default
        return value

    def require(self, name: str) -> str:
        """Return a raw value or raise MissingConfiguration."""
        value = self.get(name)
        if value is None:
            raise MissingConfiguration(name)
        return value

    def require_path(self, attr: str) -> Path:
        """Return one of the SERVICE_*_DIR fields as a Path, or raise MissingConfiguration."""
        value = getattr(self, attr)
        if not value:
            raise MissingConfiguration(self.FIELD_VARIABLES[attr])
        return Path(value)
