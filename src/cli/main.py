"""CLI de vcmd (Typer).

Por qué la CLI es delgada:
- Solo cablea colaboradores (pyVmomi, SoftLayer, DNS), llama al pipeline y
  presenta el resultado; la política de errores vive en el Core.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.dns_resolver import resolve_host
from adapters.json_exporter import export_environment_json
from adapters.manifest_exporter import export_manifests
from adapters.softlayer import SoftLayerInventory
from adapters.vsphere import VSphereInventory
from cli import doctor
from cli.ui_components import (
    build_capacity_table,
    build_diagnostics_table,
    build_networks_table,
    print_banner,
)
from core.config import AppSettings
from core.credentials_loader import load_softlayer_credentials, load_vcenter_credentials
from core.errors import CorrelationError
from core.services.correlation_pipeline import (
    CorrelationRequest,
    PipelineHooks,
    correlate,
)

app = typer.Typer(
    no_args_is_help=True,
    help="Data integration between vSphere and IBM Cloud: failure domains, capacity and subnets.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command()
def generate(
    vcenter: Optional[Path] = typer.Option(None, "--vcenter", "-v", help="vCenter JSON auth file."),
    ibmcloud: Optional[Path] = typer.Option(None, "--ibmcloud", "-i", help="IBM Cloud JSON auth file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file."),
    ipv6_prefix: Optional[str] = typer.Option(
        None,
        "--ipv6-prefix",
        help="IPv6 prefix; the VLAN number becomes the next group (e.g. fd65:a1a8:60ad).",
    ),
    port_group_filter: Optional[str] = typer.Option(
        None,
        "--port-group-filter",
        help="Only consider distributed port groups whose name contains this text.",
    ),
    manifests_dir: Optional[Path] = typer.Option(
        None,
        "--manifests-dir",
        help="Also write Pool/Network manifests to this directory.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging."),
) -> None:
    """Generate failure domains, capacity data and IBM Cloud subnets."""

    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)

    vcenter_path = vcenter or settings.vcenter_auth_path
    ibmcloud_path = ibmcloud or settings.ibmcloud_auth_path
    output_path = output or settings.output_path
    prefix = ipv6_prefix or settings.ipv6_prefix
    pg_filter = settings.port_group_filter if port_group_filter is None else port_group_filter

    if not prefix:
        raise typer.BadParameter("an IPv6 prefix is required (--ipv6-prefix or VCMD_IPV6_PREFIX)")

    print_banner(_console)

    hooks = PipelineHooks(
        endpoint_start=lambda endpoint, position, total: _console.print(
            f"[cyan]»[/cyan] vCenter {endpoint} [dim]({position}/{total})[/dim]"
        ),
    )

    try:
        request = CorrelationRequest(
            vcenter_credentials=load_vcenter_credentials(vcenter_path),
            softlayer_credentials=load_softlayer_credentials(ibmcloud_path),
            ipv6_prefix=prefix,
            port_group_filter=pg_filter,
        )
        vsphere = VSphereInventory(settings)
        cloud = SoftLayerInventory(settings)
        try:
            result = correlate(
                request=request,
                vsphere=vsphere,
                cloud=cloud,
                resolver=resolve_host,
                hooks=hooks,
            )
        finally:
            vsphere.close()
            cloud.close()
    except CorrelationError as exc:
        _console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    config = result.config
    written = export_environment_json(config=config, output_path=output_path)

    _console.print(build_capacity_table(config))
    if config.matched_networks:
        _console.print(build_networks_table(config))
    if config.diagnostics:
        _console.print(build_diagnostics_table(config.diagnostics))

    if manifests_dir is not None:
        for path in export_manifests(config=config, output_dir=manifests_dir):
            _console.print(f"[green]Manifests:[/green] {path}")

    status = "[yellow]completed with warnings[/yellow]" if config.degraded else "[green]completed[/green]"
    _console.print(f"Run {status}. [green]Saved:[/green] {written}")


def run() -> None:
    app()
