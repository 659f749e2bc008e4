"""Launcher configuration with multiple sources and precedence.

The optional YAML file (config/launcher.yaml) looks like:

    tools:                      # helper executable overrides
      local_ip: /usr/local/bin/local-ip
    providers:                  # provider command overrides
      java_opts: /opt/acme/bin/java-opts
    helpers:                    # start helper scripts
      vertx: /opt/aspen/scripts/start-vertx.sh
      tomcat: /opt/aspen/scripts/start-tomcat.sh
    registry:                   # external launcher modules
      billing: acme.launchers.billing
    services:                   # per-service overrides
      gateway:
        raft_opts: "-Dcom.hitachi.raft.followerNonResponsiveTimeoutSeconds=900"
"""

import logging
import os
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml


def expand_env_vars(value: Any, environ: Mapping[str, str] | None = None) -> Any:
    """Recursively expand ${VAR_NAME} environment variables in config.

    Pattern: ${VAR_NAME} - strict format (alphanumeric + underscore only)

    Behavior:
        - If VAR_NAME is set: Replace with its value
        - If VAR_NAME is unset: Keep placeholder and log warning
        - If the entire value is ${VAR} and result is numeric, convert to int/float

    Args:
        value: Config value to expand (can be str, dict, list, or other types)
        environ: Source of variables (defaults to os.environ)

    Returns:
        Value with environment variables expanded (with type conversion for numbers)
    """
    if environ is None:
        environ = os.environ

    if isinstance(value, str):
        pattern = r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}'

        # Pure variable reference gets type conversion
        full_match = re.fullmatch(pattern, value)
        if full_match:
            var_name = full_match.group(1)
            env_value = environ.get(var_name)
            if env_value is None:
                logging.getLogger("cfg").warning(
                    f"Environment variable '${{{var_name}}}' not set, keeping placeholder"
                )
                return value

            try:
                if '.' in env_value:
                    return float(env_value)
                else:
                    return int(env_value)
            except ValueError:
                return env_value

        def replacer(match):
            var_name = match.group(1)
            env_value = environ.get(var_name)
            if env_value is None:
                logging.getLogger("cfg").warning(
                    f"Environment variable '${{{var_name}}}' not set, keeping placeholder"
                )
                return match.group(0)
            return env_value

        return re.sub(pattern, replacer, value)

    elif isinstance(value, dict):
        return {k: expand_env_vars(v, environ) for k, v in value.items()}

    elif isinstance(value, list):
        return [expand_env_vars(item, environ) for item in value]

    else:
        return value


class ConfigSource(ABC):
    """Base class for configuration sources."""

    def __init__(self, priority: int = 0):
        self.priority = priority  # Higher number = higher priority

    @abstractmethod
    def load(self) -> dict[str, Any]:
        """Load configuration data."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if source is available."""
        pass


class FileConfigSource(ConfigSource):
    """Configuration from YAML file."""

    def __init__(self, file_path: str | Path, priority: int = 10,
                 environ: Mapping[str, str] | None = None):
        super().__init__(priority)
        self.file_path = file_path
        self.environ = environ

    def load(self) -> dict[str, Any]:
        """Load configuration from file and expand environment variables.

        A file that exists but cannot be parsed is an error, not an empty config.
        """
        with open(self.file_path) as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise yaml.YAMLError(f"Config file {self.file_path} must contain a mapping")

        return expand_env_vars(config, self.environ)

    def is_available(self) -> bool:
        """Check if file exists."""
        return Path(self.file_path).exists()


class ArgsConfigSource(ConfigSource):
    """Configuration from command line arguments or dict."""

    def __init__(self, config_dict: dict[str, Any], priority: int = 30):
        super().__init__(priority)
        self.config_dict = config_dict

    def load(self) -> dict[str, Any]:
        return self.config_dict

    def is_available(self) -> bool:
        return True


class DefaultConfigSource(ConfigSource):
    """Default configuration values."""

    def __init__(self, defaults: dict[str, Any] | None = None, priority: int = 0):
        super().__init__(priority)
        self.defaults = defaults or {}

    def load(self) -> dict[str, Any]:
        return self.defaults

    def is_available(self) -> bool:
        return True


DEFAULT_CONFIG: dict[str, Any] = {
    "tools": {},
    "providers": {},
    "helpers": {
        "vertx": "/opt/aspen/scripts/start-vertx.sh",
        "tomcat": "/opt/aspen/scripts/start-tomcat.sh",
    },
    "registry": {},
    "services": {},
}


class ConfigurationManager:
    """Manages configuration from multiple sources with precedence."""

    def __init__(self):
        self.logger = logging.getLogger("cfg")
        self.sources: list[ConfigSource] = []

    def add_source(self, source: ConfigSource):
        """Add a configuration source."""
        self.sources.append(source)
        # Sort by priority (highest first)
        self.sources.sort(key=lambda s: s.priority, reverse=True)
        self.logger.debug(f"Added config source with priority {source.priority}")

    def log_sources(self):
        """Log all configuration sources and their availability."""
        if not self.sources:
            self.logger.info("Configuration sources: none")
            return

        self.logger.info("Configuration sources (priority order, highest first):")
        for source in self.sources:
            source_name = type(source).__name__.replace("ConfigSource", "")
            status = "available" if source.is_available() else "unavailable"

            details = ""
            if isinstance(source, FileConfigSource):
                details = f" ({source.file_path})"
            elif isinstance(source, ArgsConfigSource):
                details = " (command-line args)"

            self.logger.info(f"  [{source.priority:2d}] {source_name:15s} {status}{details}")

    def get_raw_config(self) -> dict[str, Any]:
        """Merge all available sources, lowest priority first."""
        merged_config: dict[str, Any] = {}

        for source in reversed(self.sources):
            if not source.is_available():
                continue
            source_config = source.load()
            if source_config:
                merged_config = self._deep_merge(merged_config, source_config)
                self.logger.debug(f"Merged raw config from {type(source).__name__}")

        return merged_config

    def resolve_config(self, service_name: str | None = None) -> dict[str, Any]:
        """Return global sections plus the 'services.<name>' overrides as 'service'.

        If service_name is None, the 'service' key is an empty dict.
        """
        raw = self.get_raw_config()
        services = raw.get("services") or {}
        resolved = {k: v for k, v in raw.items() if k != "services"}
        resolved["service"] = dict(services.get(service_name) or {}) if service_name else {}
        return resolved

    def _deep_merge(self, base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in update.items():
            if (key in result and
                isinstance(result[key], dict) and
                isinstance(value, dict)):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def create_configuration_manager(
    config_file: str | Path | None = None,
    args_config: dict[str, Any] | None = None,
    defaults: dict[str, Any] | None = None,
    environ: Mapping[str, str] | None = None
) -> ConfigurationManager:
    """Create a configuration manager with standard sources."""
    manager = ConfigurationManager()

    manager.add_source(DefaultConfigSource(DEFAULT_CONFIG if defaults is None else defaults))

    if config_file:
        manager.add_source(FileConfigSource(config_file, environ=environ))

    # Args config - highest priority
    if args_config:
        manager.add_source(ArgsConfigSource(args_config))

    return manager
