"""
Inventory lookups by name or default
"""

import logging
from typing import Any, Callable, List, Optional, Tuple
from pyVmomi import vim
from ...exceptions import ResourceNotFoundError, AmbiguousResourceError, DefaultAmbiguousResourceError

logger = logging.getLogger(__name__)


class Finder:
    """Resolves vSphere inventory objects scoped to one datacenter.

    Every ``*_or_default`` lookup follows the same rules:

    * an empty name selects the default, which is the single candidate of
      that kind in scope; none or several candidates is an error
    * a name containing ``/`` is an inventory path, relative to the
      datacenter folder of that kind unless it starts with ``/``
    * any other name must match exactly one object's ``name``
    """

    def __init__(self, content):
        self.content = content
        self.datacenter: Optional[vim.Datacenter] = None

    def set_datacenter(self, datacenter: vim.Datacenter) -> None:
        """Scope all further lookups to the given datacenter"""
        self.datacenter = datacenter
        logger.debug(f"Finder bound to datacenter '{datacenter.name}'")

    def datacenter_or_default(self, name: str = "") -> vim.Datacenter:
        return self._find('datacenter', name, (vim.Datacenter,),
                          self.content.rootFolder, folder=None)

    def cluster_or_default(self, name: str = "") -> vim.ComputeResource:
        dc = self._require_datacenter('cluster')
        return self._find('cluster', name, (vim.ComputeResource,),
                          dc.hostFolder, folder='host')

    def datastore_or_default(self, name: str = "") -> vim.Datastore:
        dc = self._require_datacenter('datastore')
        return self._find('datastore', name, (vim.Datastore,),
                          dc.datastoreFolder, folder='datastore')

    def host_system_or_default(self, name: str = "") -> vim.HostSystem:
        dc = self._require_datacenter('host')
        return self._find('host', name, (vim.HostSystem,),
                          dc.hostFolder, folder='host')

    def network_or_default(self, name: str = "") -> vim.Network:
        # vim.Network covers standard networks, distributed port groups and opaque networks
        dc = self._require_datacenter('network')
        return self._find('network', name, (vim.Network,),
                          dc.networkFolder, folder='network')

    def resource_pool_or_default(self, name: str = "") -> vim.ResourcePool:
        dc = self._require_datacenter('resource pool')
        return self._find('resource pool', name, (vim.ResourcePool,),
                          dc.hostFolder, folder='host',
                          defaults=lambda: self._root_resource_pools(dc))

    def _find(self, kind: str, name: str, vimtypes: Tuple, container,
              folder: Optional[str],
              defaults: Optional[Callable[[], List[Any]]] = None):
        if not name:
            candidates = defaults() if defaults else self._list(container, vimtypes)
            return self._single_default(kind, candidates)

        if '/' in name:
            obj = self._find_by_path(name, vimtypes, folder)
            if obj is None:
                raise ResourceNotFoundError(f"{kind} '{name}' not found", kind, name)
            logger.debug(f"Resolved {kind} '{name}' by inventory path")
            return obj

        matches = [obj for obj in self._list(container, vimtypes) if obj.name == name]
        if not matches:
            raise ResourceNotFoundError(f"{kind} '{name}' not found", kind, name)
        if len(matches) > 1:
            raise AmbiguousResourceError(
                f"{kind} '{name}' resolves to multiple {kind}s", kind, name,
                details={'count': len(matches)})
        logger.debug(f"Resolved {kind} '{name}'")
        return matches[0]

    def _single_default(self, kind: str, candidates: List[Any]):
        if not candidates:
            raise ResourceNotFoundError(f"no default {kind} found", kind, default=True)
        if len(candidates) > 1:
            raise DefaultAmbiguousResourceError(
                f"default {kind} resolves to multiple instances, please specify",
                kind, details={'count': len(candidates)})
        logger.debug(f"Using default {kind} '{candidates[0].name}'")
        return candidates[0]

    def _find_by_path(self, name: str, vimtypes: Tuple, folder: Optional[str]):
        if name.startswith('/'):
            path = name.lstrip('/')
        elif folder is None:
            path = name
        else:
            path = f"{self.datacenter.name}/{folder}/{name}"
        obj = self.content.searchIndex.FindByInventoryPath(path)
        if obj is not None and not isinstance(obj, vimtypes):
            logger.debug(f"Inventory path '{path}' is a {type(obj).__name__}, ignoring")
            return None
        return obj

    def _root_resource_pools(self, datacenter: vim.Datacenter) -> List[vim.ResourcePool]:
        compute_resources = self._list(datacenter.hostFolder, (vim.ComputeResource,))
        return [cr.resourcePool for cr in compute_resources if cr.resourcePool is not None]

    def _list(self, container, vimtypes: Tuple) -> List[Any]:
        view = self.content.viewManager.CreateContainerView(container, list(vimtypes), True)
        try:
            return list(view.view)
        finally:
            view.Destroy()

    def _require_datacenter(self, kind: str) -> vim.Datacenter:
        if self.datacenter is None:
            raise ResourceNotFoundError(
                f"cannot find {kind} without a datacenter, please specify one", kind)
        return self.datacenter
