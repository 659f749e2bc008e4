"""Port role resolution.

A service names the ports it needs as PortSpecs. Each one is either:

    static  PORT_DEF_<VARIABLE>=8080
    bound   BOUND_PORT_DEF_<VARIABLE>=SOME_NAME, SOME_NAME=31022

A bound port is a name whose value is itself the name of the variable
holding the real port (assigned by the scheduler at deployment time).
Both forms go through PortResolver.resolve(), which is the only place
the indirection is followed.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from svclaunch.errors import InvalidPort, MissingConfiguration


STATIC_PREFIX = "PORT_DEF_"
BOUND_PREFIX = "BOUND_PORT_DEF_"

MIN_PORT = 1
MAX_PORT = 65535

_log = logging.getLogger("ports")


@dataclass(frozen=True)
class PortSpec:
    """A logical port role required by a service.

    Attributes:
        role: Logical name used in the resolved mapping (e.g. 'raft-rpc')
        variable: Variable suffix (e.g. 'RAFT_RPC_PORT')
        bound: True for BOUND_PORT_DEF_ indirection, False for PORT_DEF_
        default: Fallback port when the variable (or its target) is unset
    """
    role: str
    variable: str
    bound: bool = False
    default: int | None = None

    @property
    def env_name(self) -> str:
        """Name of the variable consulted first."""
        prefix = BOUND_PREFIX if self.bound else STATIC_PREFIX
        return f"{prefix}{self.variable}"


def static_port(role: str, variable: str, default: int | None = None) -> PortSpec:
    return PortSpec(role=role, variable=variable, bound=False, default=default)


def bound_port(role: str, variable: str, default: int | None = None) -> PortSpec:
    return PortSpec(role=role, variable=variable, bound=True, default=default)


@dataclass(frozen=True)
class PortBinding:
    """A resolved port role."""
    role: str
    port: int
    source: str  # variable that held the number, or "default"


def parse_port(role: str, value: object, source: str | None = None) -> int:
    """Convert a raw value into a port number in 1..65535.

    Raises:
        InvalidPort: If the value is not an integer or is out of range
    """
    if isinstance(value, bool):
        raise InvalidPort(role, value, source)
    if isinstance(value, int):
        port = value
    else:
        text = str(value).strip()
        # int() rejects non-ASCII digits that isdigit() accepts
        if not (text.isascii() and text.isdigit()):
            raise InvalidPort(role, value, source)
        port = int(text)
    if not MIN_PORT <= port <= MAX_PORT:
        raise InvalidPort(role, value, source)
    return port


class PortResolver:
    """Resolves PortSpecs against an injected key-value source."""

    def __init__(self, environ: Mapping[str, str]):
        self.environ = environ

    def lookup(self, name: str) -> str | None:
        """Return a variable value, treating empty strings as unset."""
        value = self.environ.get(name)
        if value is None or value.strip() == "":
            return None
        return value.strip()

    def resolve_indirect(self, target: str | None) -> tuple[str | None, str | None]:
        """Follow one level of indirection: the value of the variable named target."""
        if target is None:
            return None, None
        return self.lookup(target), target

    def resolve(self, spec: PortSpec) -> PortBinding:
        """Resolve one port role.

        Raises:
            MissingConfiguration: If the variable or its indirection target is unset
                and the PortSpec has no default
            InvalidPort: If the resolved value is not a valid port
        """
        if spec.bound:
            target = self.lookup(spec.env_name)
            raw, source = self.resolve_indirect(target)
            missing = spec.env_name if target is None else target
        else:
            raw = self.lookup(spec.env_name)
            source = spec.env_name
            missing = spec.env_name

        if raw is None:
            if spec.default is None:
                detail = f"port role '{spec.role}'"
                if spec.bound and missing != spec.env_name:
                    detail = f"{detail}, referenced by {spec.env_name}"
                raise MissingConfiguration(missing, detail)
            _log.debug(f"Port '{spec.role}' not set via {spec.env_name}, using default {spec.default}")
            return PortBinding(spec.role, parse_port(spec.role, spec.default, "default"), "default")

        port = parse_port(spec.role, raw, source)
        _log.debug(f"Resolved port '{spec.role}' = {port} ({source})")
        return PortBinding(spec.role, port, source)

    def resolve_all(self, specs: Iterable[PortSpec]) -> dict[str, PortBinding]:
        """Resolve every spec, failing on the first unresolved or invalid role."""
        bindings: dict[str, PortBinding] = {}
        for spec in specs:
            bindings[spec.role] = self.resolve(spec)
        return bindings


MONITORING_PORT = static_port("monitoring", "MONITORING_PORT")
SUPPORT_PORT = static_port("support", "SUPPORT_PORT")
