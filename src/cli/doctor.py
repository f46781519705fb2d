"""Doctor command for environment diagnostics."""

from __future__ import annotations

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.dns_resolver import resolve_host
from adapters.http_client import build_client
from core.config import AppSettings, write_user_env_vars
from core.credentials_loader import load_softlayer_credentials, load_vcenter_credentials
from core.errors import CorrelationError
from core.services.addressing import synthesize_ipv6

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        with build_client(settings) as client:
            response = client.get(url)
        return True, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="vcmd Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Credentials
    vcenters: list[str] = []
    try:
        vcenters = sorted(load_vcenter_credentials(settings.vcenter_auth_path))
        table.add_row("vCenter credentials", "OK", f"{len(vcenters)} vCenter(s) in {settings.vcenter_auth_path}")
    except CorrelationError as exc:
        table.add_row("vCenter credentials", "FAIL", str(exc))

    try:
        accounts = load_softlayer_credentials(settings.ibmcloud_auth_path)
        table.add_row("IBM Cloud credentials", "OK", f"{len(accounts)} account(s) in {settings.ibmcloud_auth_path}")
    except CorrelationError as exc:
        table.add_row("IBM Cloud credentials", "FAIL", str(exc))

    # IPv6 prefix
    if settings.ipv6_prefix:
        try:
            sample = synthesize_ipv6(settings.ipv6_prefix, 1)
            table.add_row("IPv6 prefix", "OK", f"VLAN 1 -> {sample.prefix}")
        except CorrelationError as exc:
            table.add_row("IPv6 prefix", "FAIL", str(exc))
    else:
        table.add_row("IPv6 prefix", "MISSING", "Set VCMD_IPV6_PREFIX or pass --ipv6-prefix")

    # DNS (best-effort)
    for server in vcenters:
        try:
            addresses = resolve_host(server)
            table.add_row(f"DNS {server}", "OK", ", ".join(addresses))
        except CorrelationError as exc:
            table.add_row(f"DNS {server}", "FAIL", str(exc))

    ok_http, detail_http = _check_http(settings.softlayer_api_url, settings)
    table.add_row("SoftLayer API", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)


@app.command(name="configure")
def configure() -> None:
    """Interactive setup (stores defaults in the user config .env)."""

    settings = AppSettings()

    prefix = typer.prompt(
        "IPv6 prefix",
        default=settings.ipv6_prefix or "",
        show_default=True,
    ).strip()
    vcenter_path = typer.prompt("vCenter auth file", default=str(settings.vcenter_auth_path)).strip()
    ibmcloud_path = typer.prompt("IBM Cloud auth file", default=str(settings.ibmcloud_auth_path)).strip()
    pg_filter = typer.prompt("Port group filter", default=settings.port_group_filter, show_default=True).strip()

    if not prefix:
        raise typer.BadParameter("an IPv6 prefix is required")
    try:
        synthesize_ipv6(prefix, 1)
    except CorrelationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    env_path = write_user_env_vars(
        {
            "VCMD_IPV6_PREFIX": prefix,
            "VCMD_VCENTER_AUTH_PATH": vcenter_path,
            "VCMD_IBMCLOUD_AUTH_PATH": ibmcloud_path,
            "VCMD_PORT_GROUP_FILTER": pg_filter,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
