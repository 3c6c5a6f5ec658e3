"""
vSphere infrastructure collaborators for vSession
"""

from .client import VSphereClient, Certificate, load_certificate
from .finder import Finder
from .keepalive import KeepAlive
from .url import Endpoint, parse_url

__all__ = [
    'VSphereClient',
    'Certificate',
    'load_certificate',
    'Finder',
    'KeepAlive',
    'Endpoint',
    'parse_url',
]
