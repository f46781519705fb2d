from types import SimpleNamespace

import pytest

from adapters import vsphere as vsphere_module
from adapters.vsphere import VSphereInventory, _Session
from core.config import AppSettings
from core.errors import UpstreamQueryError

ENDPOINT = "vc1.example.com"


class FakeDatacenter:
    def __init__(self, name, moid, parent):
        self.name = name
        self._moId = moid
        self.parent = parent


class FakeCluster:
    def __init__(self, name, moid, parent, datastore=(), summary=None):
        self.name = name
        self._moId = moid
        self.parent = parent
        self.datastore = list(datastore)
        self.summary = summary


class FakePortgroup:
    def __init__(self, name, vlan_id, uplink=False):
        self.config = SimpleNamespace(
            name=name,
            uplink=uplink,
            defaultPortConfig=SimpleNamespace(vlan=SimpleNamespace(vlanId=vlan_id)),
        )


class FakeView:
    def __init__(self, objects):
        self.view = objects
        self.destroyed = False

    def Destroy(self):
        self.destroyed = True


class FakeTags:
    def __init__(self, by_category):
        self.by_category = by_category
        self.closed = False

    def objects_by_tag_name(self, category, object_type):
        return dict(self.by_category.get((category, object_type), {}))

    def close(self):
        self.closed = True


def _content(objects, *, paths=None, options=None):
    views = []

    def create_container_view(root, types, recursive):
        view = FakeView([obj for obj in objects if isinstance(obj, tuple(types))])
        views.append(view)
        return view

    return SimpleNamespace(
        rootFolder=object(),
        viewManager=SimpleNamespace(CreateContainerView=create_container_view),
        searchIndex=SimpleNamespace(FindByInventoryPath=lambda path: (paths or {}).get(path)),
        setting=SimpleNamespace(QueryOptions=lambda name: list((options or {}).get(name, []))),
        views=views,
    )


@pytest.fixture(autouse=True)
def fake_vim(monkeypatch):
    monkeypatch.setattr(
        vsphere_module,
        "vim",
        SimpleNamespace(
            Datacenter=FakeDatacenter,
            ClusterComputeResource=FakeCluster,
            dvs=SimpleNamespace(DistributedVirtualPortgroup=FakePortgroup),
        ),
    )


@pytest.fixture
def topology():
    root = SimpleNamespace(name="Datacenters", parent=None)
    dc1 = FakeDatacenter("dc1", "datacenter-1", root)
    dc2 = FakeDatacenter("dc2", "datacenter-2", root)
    host1 = SimpleNamespace(name="host", parent=dc1)
    host2 = SimpleNamespace(name="host", parent=dc2)
    ds_folder = SimpleNamespace(name="datastore", parent=dc1)
    clusters = [
        FakeCluster(
            "cluster-a",
            "domain-c1",
            host1,
            datastore=[SimpleNamespace(name="ds-b", parent=ds_folder), SimpleNamespace(name="ds-a", parent=ds_folder)],
            summary=SimpleNamespace(numCpuCores=48, totalMemory=274877906944),
        ),
        FakeCluster("cluster-b", "domain-c2", host2),
        FakeCluster("cluster-c", "domain-c3", host1),
    ]
    return [dc1, dc2, *clusters]


def _inventory(content, tags=None):
    inventory = VSphereInventory(AppSettings())
    si = SimpleNamespace(RetrieveContent=lambda: content)
    inventory._sessions[ENDPOINT] = _Session(si=si, tags=tags or FakeTags({}))
    return inventory


def test_failure_domains_join_region_and_zone_tags(topology):
    tags = FakeTags(
        {
            ("openshift-region", "Datacenter"): {"datacenter-1": "us-east"},
            ("openshift-zone", "ClusterComputeResource"): {
                "domain-c1": "us-east-1a",
                "domain-c2": "us-east-1b",
            },
        }
    )
    content = _content(topology)

    domains = _inventory(content, tags).get_failure_domains(ENDPOINT)

    # cluster-b has a zone but its datacenter has no region; cluster-c has no zone.
    assert len(domains) == 1
    fd = domains[0]
    assert fd.name == "us-east-us-east-1a"
    assert (fd.region, fd.zone, fd.server) == ("us-east", "us-east-1a", ENDPOINT)
    assert fd.topology.datacenter == "dc1"
    assert fd.topology.compute_cluster == "/dc1/host/cluster-a"
    assert fd.topology.datastore == "/dc1/datastore/ds-a"
    assert fd.topology.resource_pool == "/dc1/host/cluster-a/Resources"
    assert all(view.destroyed for view in content.views)


def test_failure_domains_empty_without_region_tags(topology):
    tags = FakeTags({("openshift-zone", "ClusterComputeResource"): {"domain-c1": "us-east-1a"}})
    content = _content(topology)

    assert _inventory(content, tags).get_failure_domains(ENDPOINT) == []
    assert content.views == []


def test_port_groups_skip_uplinks_trunks_and_filtered_names():
    content = _content(
        [
            FakePortgroup("ci-vlan-200", 200),
            FakePortgroup("ci-vlan-100", 100),
            FakePortgroup("dvs-uplinks", 0, uplink=True),
            FakePortgroup("ci-trunk", [SimpleNamespace(start=1, end=4094)]),
            FakePortgroup("mgmt-vlan-10", 10),
        ]
    )

    segments = _inventory(content).get_distributed_port_groups(ENDPOINT, "ci-")

    assert [(s.name, s.vlan_id) for s in segments] == [("ci-vlan-100", 100), ("ci-vlan-200", 200)]


def test_cluster_capacity(topology):
    cluster = topology[2]
    content = _content(topology, paths={"dc1/host/cluster-a": cluster})

    assert _inventory(content).get_cluster_capacity(ENDPOINT, "/dc1/host/cluster-a") == (48, 274877906944)


def test_cluster_capacity_rejects_non_cluster_paths(topology):
    content = _content(topology, paths={"dc1": topology[0]})

    with pytest.raises(UpstreamQueryError, match="not found"):
        _inventory(content).get_cluster_capacity(ENDPOINT, "/dc1")


def test_content_retrieval_failure_is_upstream_error():
    def broken():
        raise OSError("connection reset")

    inventory = VSphereInventory(AppSettings())
    inventory._sessions[ENDPOINT] = _Session(si=SimpleNamespace(RetrieveContent=broken), tags=FakeTags({}))

    with pytest.raises(UpstreamQueryError):
        inventory.get_cluster_capacity(ENDPOINT, "/dc1/host/cluster-a")
    with pytest.raises(UpstreamQueryError):
        inventory.get_endpoint_identity_hostname(ENDPOINT)


def test_identity_hostname_from_option():
    content = _content(
        [], options={"config.vpxd.hostnameUrl": [SimpleNamespace(value="https://vc1.example.com:443/sdk")]}
    )

    assert _inventory(content).get_endpoint_identity_hostname(ENDPOINT) == "vc1.example.com"


def test_identity_hostname_unset_option():
    with pytest.raises(UpstreamQueryError, match="not set"):
        _inventory(_content([])).get_endpoint_identity_hostname(ENDPOINT)


def test_unknown_endpoint_has_no_session():
    with pytest.raises(UpstreamQueryError):
        VSphereInventory(AppSettings()).get_datacenters("other.example.com")


def test_failed_tag_login_disconnects_soap_session(monkeypatch):
    si = object()
    disconnected = []
    monkeypatch.setattr(vsphere_module.connect, "SmartConnect", lambda **kwargs: si)
    monkeypatch.setattr(vsphere_module.connect, "Disconnect", disconnected.append)

    def failing_tag_client(*args, **kwargs):
        raise UpstreamQueryError("REST login failed")

    inventory = VSphereInventory(AppSettings(), tag_client_factory=failing_tag_client)

    with pytest.raises(UpstreamQueryError):
        inventory.add_credentials(ENDPOINT, "admin", "secret")

    assert disconnected == [si]
    assert inventory._sessions == {}
