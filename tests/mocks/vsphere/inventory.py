"""
In-memory vSphere inventory tree
"""
from typing import Any, Dict, List, Optional
from pyVmomi import vim
from .base import create_managed_object
from .networks import create_mock_network


class MockInventory:
    """Inventory tree that container views and the search index walk.

    Objects are registered under a parent, which gives every object an
    inventory path such as ``DC1/host/Cluster1/esx01``.
    """

    def __init__(self):
        self.root_folder = create_managed_object(vim.Folder, "Datacenters", moid="group-d1")
        self._children: Dict[int, List[Any]] = {}
        self._paths: Dict[int, str] = {id(self.root_folder): ""}
        self._by_path: Dict[str, Any] = {}

    def add(self, parent, child, segment: Optional[str] = None):
        """Register ``child`` below ``parent``"""
        self._children.setdefault(id(parent), []).append(child)
        parent_path = self._paths[id(parent)]
        segment = segment or child.name
        path = f"{parent_path}/{segment}" if parent_path else segment
        self._paths[id(child)] = path
        self._by_path[path] = child
        return child

    def descendants(self, container) -> List[Any]:
        found = []
        for child in self._children.get(id(container), []):
            found.append(child)
            found.extend(self.descendants(child))
        return found

    def children(self, container) -> List[Any]:
        return list(self._children.get(id(container), []))

    def find_by_path(self, path: str):
        return self._by_path.get(path)

    def add_datacenter(self, name: str, folder=None):
        dc = create_managed_object(vim.Datacenter, name)
        self.add(folder or self.root_folder, dc)
        for attr, segment in (('hostFolder', 'host'), ('datastoreFolder', 'datastore'),
                              ('networkFolder', 'network'), ('vmFolder', 'vm')):
            setattr(dc, attr, self.add(dc, create_managed_object(vim.Folder, segment), segment))
        return dc

    def add_folder(self, parent, name: str):
        return self.add(parent, create_managed_object(vim.Folder, name))

    def add_cluster(self, dc, name: str, parent=None):
        cluster = create_managed_object(vim.ClusterComputeResource, name)
        return self._add_compute_resource(parent or dc.hostFolder, cluster)

    def add_standalone_host(self, dc, name: str, parent=None):
        compute_resource = create_managed_object(vim.ComputeResource, name)
        self._add_compute_resource(parent or dc.hostFolder, compute_resource)
        return self.add_host(compute_resource, name)

    def _add_compute_resource(self, parent, compute_resource):
        self.add(parent, compute_resource)
        compute_resource.host = []
        compute_resource.resourcePool = self.add(
            compute_resource, create_managed_object(vim.ResourcePool, "Resources"))
        compute_resource.resourcePool.owner = compute_resource
        return compute_resource

    def add_host(self, compute_resource, name: str):
        host = self.add(compute_resource, create_managed_object(vim.HostSystem, name))
        compute_resource.host.append(host)
        return host

    def add_resource_pool(self, parent_pool, name: str):
        pool = self.add(parent_pool, create_managed_object(vim.ResourcePool, name))
        pool.owner = parent_pool.owner
        return pool

    def add_datastore(self, dc, name: str):
        return self.add(dc.datastoreFolder, create_managed_object(vim.Datastore, name))

    def add_network(self, dc, name: str, network=None):
        return self.add(dc.networkFolder, network or create_mock_network(name))


def build_vcenter_inventory(hosts: int = 2) -> MockInventory:
    """One datacenter with one cluster of ``hosts`` hosts, as seen through vCenter"""
    inventory = MockInventory()
    dc = inventory.add_datacenter("DC1")
    cluster = inventory.add_cluster(dc, "Cluster1")
    for i in range(1, hosts + 1):
        inventory.add_host(cluster, f"esx{i:02d}.example.com")
    inventory.add_datastore(dc, "datastore1")
    inventory.add_network(dc, "VM Network")
    return inventory


def build_esxi_inventory(hosts: int = 1) -> MockInventory:
    """The fixed inventory a standalone ESXi host reports"""
    inventory = MockInventory()
    dc = inventory.add_datacenter("ha-datacenter")
    compute_resource = create_managed_object(vim.ComputeResource, "localhost.")
    inventory._add_compute_resource(dc.hostFolder, compute_resource)
    for i in range(1, hosts + 1):
        inventory.add_host(compute_resource, f"localhost{i}.localdomain")
    inventory.add_datastore(dc, "datastore1")
    inventory.add_network(dc, "VM Network")
    return inventory
