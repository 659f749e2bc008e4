"""Base classes for service launchers.

A service launcher turns the ambient environment into one concrete process
invocation. Subclasses register under a service name with @launcher and
describe:

- the port roles they need (ports)
- how the resolved values become options (configure)
- the final command line (build_launch)

The launch sequence (see launchers.base_launcher) always calls
initialize -> resolve -> log redirection -> launch, in that order.
"""

import logging
import shlex
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import MissingConfiguration
from .management.environment import LauncherSettings
from .management.logs import LogSinkPair
from .management.ports import PortBinding, PortResolver, PortSpec
from .management.providers import Providers
from .management.tools import ServiceTools


_log = logging.getLogger("svc.base")

# Registry for decorated classes
_launcher_registry: dict[str, type["ServiceLauncher"]] = {}


def launcher(service_name: str):
    """Decorator to register a service launcher class.

    Args:
        service_name: Name used on the command line and in the config
                      'registry' and 'services' sections (e.g. 'mirror-in')

    Example:
        @launcher('coordination')
        class CoordinationLauncher(VertxServiceLauncher):
            ...
    """
    if not isinstance(service_name, str):
        raise TypeError(
            f"@launcher decorator requires a string service name. "
            f"Usage: @launcher('my_service'). Got: {type(service_name).__name__}"
        )

    if not service_name:
        raise ValueError(
            "@launcher decorator requires a non-empty service name. "
            "Usage: @launcher('my_service')"
        )

    def decorator(cls: type["ServiceLauncher"]) -> type["ServiceLauncher"]:
        _launcher_registry[service_name] = cls
        cls._service_type = service_name
        _log.debug(f"Registered launcher '{service_name}' -> {cls.__name__}")
        return cls

    return decorator


def get_launcher_class(service_name: str) -> type["ServiceLauncher"] | None:
    """Get launcher class by service name from decorator registry."""
    return _launcher_registry.get(service_name)


def list_registered_launchers() -> dict[str, type["ServiceLauncher"]]:
    """Get all registered launchers."""
    return _launcher_registry.copy()


class JvmOptions:
    """Ordered option string assembled from several sources.

    Fragments keep their insertion order. For system properties, a later
    -Dkey=value overrides an earlier one, as it does on the JVM command line.
    """

    def __init__(self, *fragments: str | None):
        self._fragments: list[str] = []
        for fragment in fragments:
            self.add(fragment)

    def add(self, fragment: str | None) -> "JvmOptions":
        """Append a fragment; empty fragments are skipped."""
        if fragment and fragment.strip():
            self._fragments.append(fragment.strip())
        return self

    def set_property(self, key: str, value: Any) -> "JvmOptions":
        return self.add(f"-D{key}={value}")

    def properties(self) -> dict[str, str]:
        """Effective -D properties, last occurrence winning."""
        props: dict[str, str] = {}
        for token in shlex.split(self.render()):
            if token.startswith("-D"):
                key, _, value = token[2:].partition("=")
                props[key] = value
        return props

    def render(self) -> str:
        return " ".join(self._fragments)

    def __iter__(self) -> Iterator[str]:
        return iter(self._fragments)

    def __len__(self) -> int:
        return len(self._fragments)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"JvmOptions({self.render()!r})"


@dataclass
class LaunchConfiguration:
    """Everything resolved for one launch.

    Attributes:
        service: Service name
        ports: Port role -> binding
        options: Assembled option string (JVM options for Java services)
        env: Environment overrides for the target process
        values: Other resolved values (local IP, config paths, ...) for display
    """
    service: str
    ports: dict[str, PortBinding] = field(default_factory=dict)
    options: JvmOptions = field(default_factory=JvmOptions)
    env: dict[str, str] = field(default_factory=dict)
    values: dict[str, Any] = field(default_factory=dict)

    def port(self, role: str) -> int:
        """Return a resolved port number.

        Raises:
            MissingConfiguration: If the role was never resolved
        """
        if role not in self.ports:
            raise MissingConfiguration(role, "port role was not resolved")
        return self.ports[role].port

    def port_map(self) -> dict[str, int]:
        return {role: binding.port for role, binding in self.ports.items()}


@dataclass
class LaunchSpec:
    """Final invocation: executable, argv (argv[0] included) and environment."""
    executable: str
    argv: list[str]
    env: dict[str, str]

    @property
    def command_line(self) -> str:
        return shlex.join(self.argv)


@dataclass(frozen=True)
class ServiceDescriptor:
    """Static definition of one launchable unit."""
    name: str
    log_name: str
    binary: str
    ports: tuple[PortSpec, ...]
    uses_standard_ports: bool = False
    description: str = ""


@dataclass
class LaunchContext:
    """Collaborators and configuration handed to a service launcher.

    Attributes:
        settings: Environment snapshot
        tools: Helper executables (serviceInit.sh, localIp.sh, ...)
        providers: funcs.sh value providers
        config: Resolved launcher config; 'service' holds per-service overrides
    """
    settings: LauncherSettings
    tools: ServiceTools
    providers: Providers
    config: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, settings: LauncherSettings, config: dict[str, Any] | None = None) -> "LaunchContext":
        config = config or {}
        return cls(
            settings=settings,
            tools=ServiceTools(settings, config.get("tools")),
            providers=Providers(settings, config.get("providers")),
            config=config,
        )

    @property
    def service_config(self) -> dict[str, Any]:
        return self.config.get("service") or {}

    def helper(self, name: str, default: str) -> str:
        """Path of a start helper script from the 'helpers' section."""
        return str((self.config.get("helpers") or {}).get(name) or default)


class ServiceLauncher(ABC):
    """Base class for all service launchers."""
    _service_type: str = None  # To be set by decorator

    log_name: str | None = None  # Defaults to '<name>-service'
    binary: str = ""
    ports: tuple[PortSpec, ...] = ()
    uses_standard_ports: bool = False
    description: str = ""

    def __init__(self, context: LaunchContext):
        self.context = context
        self.settings = context.settings
        self.logger = logging.getLogger(f"svc|{self.name}")

    @property
    def name(self) -> str:
        return self._service_type or type(self).__name__

    @classmethod
    def descriptor(cls) -> ServiceDescriptor:
        name = cls._service_type or cls.__name__
        description = cls.description
        if not description and cls.__doc__:
            description = cls.__doc__.strip().splitlines()[0]
        return ServiceDescriptor(
            name=name,
            log_name=cls.log_name or f"{name}-service",
            binary=cls.binary,
            ports=tuple(cls.ports),
            uses_standard_ports=cls.uses_standard_ports,
            description=description,
        )

    def initialize(self):
        """Pre-launch hook, run once before any port is resolved.

        Runs serviceInit.sh. Subclasses extending this must call super().
        """
        self.context.tools.service_init()

    def resolve(self) -> LaunchConfiguration:
        """Resolve every port role, then let the subclass assemble options."""
        config = LaunchConfiguration(service=self.name)
        resolver = PortResolver(self.settings.environ)
        config.ports = self.resolve_ports(resolver)
        self.configure(config)
        return config

    def resolve_ports(self, resolver: PortResolver) -> dict[str, PortBinding]:
        return resolver.resolve_all(self.ports)

    def configure(self, config: LaunchConfiguration):
        """Fill options, env and values from the environment and helpers."""
        pass

    @abstractmethod
    def build_launch(self, config: LaunchConfiguration) -> LaunchSpec:
        """Build the final invocation from a resolved configuration."""
        pass

    def log_sinks(self) -> LogSinkPair:
        return LogSinkPair.for_service(self.settings.require_path("log_dir"), self.descriptor().log_name)

    def launch_env(self, config: LaunchConfiguration) -> dict[str, str]:
        return {**self.settings.environ, **config.env}

    def data_path(self, *parts: str) -> Path:
        return self.settings.require_path("data_dir").joinpath(*parts)
