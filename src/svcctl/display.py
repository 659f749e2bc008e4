"""Display formatting for svcctl using Rich library."""

from dataclasses import dataclass

from rich.console import Console
from rich.table import Table
from rich.text import Text

from svclaunch.base_service import ServiceDescriptor, ServiceLauncher
from svclaunch.management.ports import MONITORING_PORT, SUPPORT_PORT, PortSpec
from svclaunch.services.common import DirectServiceLauncher, TomcatServiceLauncher, VertxServiceLauncher


# Ports of every JVM service that do not come from PORT_DEF_/BOUND_PORT_DEF_
PROVIDER_PORTS = (
    ("debug", "get_debug_port"),
    ("jmx", "get_jmx_port"),
)


@dataclass
class ResolutionRow:
    """One port role as seen by 'svcctl resolve'."""
    role: str
    variable: str
    port: int | None = None
    source: str | None = None
    error: str | None = None


def launcher_kind(launcher_class: type[ServiceLauncher]) -> str:
    if issubclass(launcher_class, VertxServiceLauncher):
        return "vertx"
    if issubclass(launcher_class, TomcatServiceLauncher):
        return "tomcat"
    if issubclass(launcher_class, DirectServiceLauncher):
        return "direct"
    return "custom"


def _port_kind(spec: PortSpec) -> Text:
    if spec.bound:
        return Text("bound", style="cyan")
    return Text("static", style="green")


def environment_ports(descriptor: ServiceDescriptor) -> list[PortSpec]:
    """Port specs read from the environment, standard ones first."""
    specs = list(descriptor.ports)
    if descriptor.uses_standard_ports:
        specs = [MONITORING_PORT, SUPPORT_PORT, *specs]
    return specs


def display_launchers_table(launchers: dict[str, type[ServiceLauncher]], console: Console | None = None):
    """Display all known launchers as a table."""
    console = console or Console()

    if not launchers:
        console.print("No launchers registered", style="yellow")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Service", style="bold")
    table.add_column("Kind")
    table.add_column("Log name")
    table.add_column("Ports")
    table.add_column("Description", style="dim")

    for name, launcher_class in launchers.items():
        descriptor = launcher_class.descriptor()
        roles = [spec.role for spec in environment_ports(descriptor)]
        if descriptor.uses_standard_ports:
            roles += [role for role, _ in PROVIDER_PORTS]
        table.add_row(
            name,
            launcher_kind(launcher_class),
            descriptor.log_name,
            ", ".join(roles) or "-",
            descriptor.description,
        )

    console.print(table)


def display_descriptor(launcher_class: type[ServiceLauncher], console: Console | None = None):
    """Display one launcher's descriptor with its port roles."""
    console = console or Console()
    descriptor = launcher_class.descriptor()

    console.print(Text(descriptor.name, style="bold"))
    if descriptor.description:
        console.print(f"  {descriptor.description}", style="dim")
    console.print(f"  Kind:     {launcher_kind(launcher_class)}")
    console.print(f"  Binary:   {descriptor.binary}")
    console.print(f"  Log name: {descriptor.log_name}")
    console.print()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Role", style="bold")
    table.add_column("Source")
    table.add_column("Variable / provider")
    table.add_column("Default", justify="right")

    for spec in environment_ports(descriptor):
        table.add_row(
            spec.role,
            _port_kind(spec),
            spec.env_name,
            str(spec.default) if spec.default is not None else "-",
        )
    if descriptor.uses_standard_ports:
        for role, provider in PROVIDER_PORTS:
            table.add_row(role, Text("provider", style="magenta"), provider, "-")

    console.print(table)


def display_resolution(service: str, rows: list[ResolutionRow], console: Console | None = None):
    """Display resolved (or failed) port roles."""
    console = console or Console()

    table = Table(title=f"Ports for {service}", show_header=True, header_style="bold")
    table.add_column("Role", style="bold")
    table.add_column("Variable")
    table.add_column("Port", justify="right")
    table.add_column("Resolved from")

    for row in rows:
        if row.error:
            table.add_row(row.role, row.variable, Text("×", style="red"), Text(row.error, style="red"))
        else:
            table.add_row(row.role, row.variable, Text(str(row.port), style="green"), row.source or "")

    console.print(table)
