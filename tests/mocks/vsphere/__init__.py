"""
vSphere mock infrastructure for testing
"""
from .base import create_managed_object
from .service import MockContent, MockViewManager, MockContainerView, MockSearchIndex
from .networks import create_mock_network, create_mock_dvs_portgroup
from .inventory import MockInventory, build_vcenter_inventory, build_esxi_inventory

__all__ = [
    'create_managed_object',
    'MockContent',
    'MockViewManager',
    'MockContainerView',
    'MockSearchIndex',
    'create_mock_network',
    'create_mock_dvs_portgroup',
    'MockInventory',
    'build_vcenter_inventory',
    'build_esxi_inventory',
]
