"""
vSession - cached vSphere sessions
Connects to vCenter or ESXi once and keeps the commonly used inventory objects at hand
"""

__version__ = "0.1.0"
__author__ = "vSession Development Team"

from .config import Config, PasswordAuth, CertificateAuth
from .session import Session, create
from .exceptions import (
    VSessionError,
    InvalidEndpointError,
    ConnectionError,
    UnsupportedAuthModeError,
    CertificateLoadError,
    AuthenticationError,
    ResourceError,
    ResourceNotFoundError,
    AmbiguousResourceError,
    DefaultAmbiguousResourceError,
    CancelledError,
)

__all__ = [
    "Config",
    "PasswordAuth",
    "CertificateAuth",
    "Session",
    "create",
    "VSessionError",
    "InvalidEndpointError",
    "ConnectionError",
    "UnsupportedAuthModeError",
    "CertificateLoadError",
    "AuthenticationError",
    "ResourceError",
    "ResourceNotFoundError",
    "AmbiguousResourceError",
    "DefaultAmbiguousResourceError",
    "CancelledError",
]
