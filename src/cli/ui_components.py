"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- La conversión bytes -> GiB vive aquí (presentación), no en el Core.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import Diagnostic, MergedEnvironmentConfig
from core.services.capacity import memory_gib


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("vcmd", style="bold cyan")
    subtitle = Text("vSphere • IBM Cloud • Failure domains & subnets", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_capacity_table(config: MergedEnvironmentConfig) -> Table:
    table = Table(title="Failure Domain Capacity")
    table.add_column("Failure domain", style="cyan", no_wrap=True)
    table.add_column("vCenter", style="white")
    table.add_column("Cluster", style="dim")
    table.add_column("vCPUs", style="green", justify="right")
    table.add_column("Memory (GiB)", style="green", justify="right")

    for fd, record in zip(config.failure_domains, config.failure_domains_resource_capacity, strict=True):
        table.add_row(
            fd.name,
            fd.server,
            fd.topology.compute_cluster,
            str(record.vcpu_count),
            str(memory_gib(record)),
        )
    return table


def build_networks_table(config: MergedEnvironmentConfig) -> Table:
    table = Table(title="Matched Networks")
    table.add_column("Port group", style="cyan", no_wrap=True)
    table.add_column("VLAN", justify="right")
    table.add_column("Pod", style="white")
    table.add_column("IPv4", style="magenta")
    table.add_column("IPv6", style="magenta")

    for network in config.matched_networks:
        table.add_row(
            network.port_group_name,
            str(network.vlan_id),
            network.pod_name or "-",
            network.machine_network_cidr,
            network.ipv6_prefix,
        )
    return table


def build_diagnostics_table(diagnostics: list[Diagnostic]) -> Table:
    table = Table(title="Warnings")
    table.add_column("vCenter", style="white", no_wrap=True)
    table.add_column("Code", style="yellow")
    table.add_column("Message", style="dim")
    for diagnostic in diagnostics:
        table.add_row(diagnostic.endpoint, diagnostic.code.value, diagnostic.message)
    return table
