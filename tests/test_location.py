import pytest

from conftest import FakeCloud, FakeEndpoint, FakeResolver, FakeVSphere
from core.domain.models import DiagnosticCode, PhysicalLocation
from core.errors import ResolutionError
from core.services.location import resolve_location

ENDPOINT = "vc1.example.com"
RESOLVER = FakeResolver({ENDPOINT: ["192.0.2.10"]})


def _vsphere(hostname=None):
    return FakeVSphere({ENDPOINT: FakeEndpoint(hostname=hostname)})


def test_first_account_in_sorted_order_wins():
    location = PhysicalLocation(datacenter_name="dal10", pod_name="dal10.pod01")
    cloud = FakeCloud(
        locations={
            ("alpha", "192.0.2.10"): location,
            ("beta", "192.0.2.10"): PhysicalLocation(datacenter_name="wdc04", pod_name="wdc04.pod01"),
        }
    )

    result = resolve_location(
        endpoint=ENDPOINT,
        vsphere=_vsphere(),
        cloud=cloud,
        accounts=["beta", "alpha"],
        resolver=RESOLVER,
    )

    assert result.resolved
    assert result.account == "alpha"
    assert result.location == location
    assert cloud.probes == ["alpha"]
    assert result.diagnostics == []


def test_accounts_without_location_are_skipped():
    cloud = FakeCloud(
        locations={("beta", "192.0.2.10"): PhysicalLocation(datacenter_name="dal10", pod_name="dal10.pod02")}
    )

    result = resolve_location(
        endpoint=ENDPOINT,
        vsphere=_vsphere(),
        cloud=cloud,
        accounts=["alpha", "beta"],
        resolver=RESOLVER,
    )

    assert result.account == "beta"
    assert cloud.probes == ["alpha", "beta"]


def test_datacenter_without_pod_is_unresolved():
    cloud = FakeCloud(locations={("alpha", "192.0.2.10"): PhysicalLocation(datacenter_name="dal10")})

    result = resolve_location(
        endpoint=ENDPOINT,
        vsphere=_vsphere(),
        cloud=cloud,
        accounts=["alpha"],
        resolver=RESOLVER,
    )

    assert not result.resolved
    assert result.location.datacenter_name == "dal10"
    assert [d.code for d in result.diagnostics] == [DiagnosticCode.POD_UNRESOLVED]


def test_no_account_resolves():
    result = resolve_location(
        endpoint=ENDPOINT,
        vsphere=_vsphere(),
        cloud=FakeCloud(),
        accounts=["alpha", "beta"],
        resolver=RESOLVER,
    )

    assert not result.resolved
    assert result.account is None
    assert [d.code for d in result.diagnostics] == [DiagnosticCode.LOCATION_UNRESOLVED]
    assert "192.0.2.10" in result.diagnostics[0].message


def test_dns_failure_is_fatal():
    with pytest.raises(ResolutionError):
        resolve_location(
            endpoint="unknown.example.com",
            vsphere=FakeVSphere({"unknown.example.com": FakeEndpoint()}),
            cloud=FakeCloud(),
            accounts=["alpha"],
            resolver=RESOLVER,
        )


def test_hostname_mismatch_is_only_a_warning():
    cloud = FakeCloud(
        locations={("alpha", "192.0.2.10"): PhysicalLocation(datacenter_name="dal10", pod_name="dal10.pod01")}
    )

    result = resolve_location(
        endpoint=ENDPOINT,
        vsphere=_vsphere(hostname="other.example.com"),
        cloud=cloud,
        accounts=["alpha"],
        resolver=RESOLVER,
    )

    assert result.resolved
    assert [d.code for d in result.diagnostics] == [DiagnosticCode.HOSTNAME_MISMATCH]
