"""Launch management components."""

from .configuration import (
    ArgsConfigSource,
    ConfigSource,
    ConfigurationManager,
    DefaultConfigSource,
    FileConfigSource,
    create_configuration_manager,
)
from .environment import LauncherSettings
from .logs import LogSinkPair, redirect_to_log
from .ports import PortBinding, PortResolver, PortSpec


__all__ = [
    "ConfigurationManager",
    "ConfigSource",
    "FileConfigSource",
    "ArgsConfigSource",
    "DefaultConfigSource",
    "create_configuration_manager",
    "LauncherSettings",
    "LogSinkPair",
    "redirect_to_log",
    "PortBinding",
    "PortResolver",
    "PortSpec",
]
