"""
Session configuration
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Union


@dataclass(frozen=True)
class PasswordAuth:
    """Login with the credentials embedded in the SDK URL"""
    username: str
    password: str


@dataclass(frozen=True)
class CertificateAuth:
    """Login as a solution user identified by a client certificate"""
    cert_file: str
    key_file: str
    username: str = ""


AuthMode = Union[PasswordAuth, CertificateAuth]


@dataclass(frozen=True)
class Config:
    """Configuration used to create a Session"""
    service: str  # SDK URL or proxy
    insecure: bool = False  # Allow insecure connection to service
    keepalive: float = 0  # Seconds, 0 disables

    cluster: str = ""
    datacenter: str = ""
    datastore: str = ""
    host: str = ""
    network: str = ""
    pool: str = ""

    cert_file: str = ""
    key_file: str = ""

    def __post_init__(self):
        keepalive = self.keepalive
        if isinstance(keepalive, timedelta):
            keepalive = keepalive.total_seconds()
        keepalive = float(keepalive or 0)
        if keepalive < 0:
            raise ValueError(f"keepalive must not be negative: {self.keepalive}")
        object.__setattr__(self, 'keepalive', keepalive)

    def has_certificate(self) -> bool:
        """Check for presence of both a certificate and a key file"""
        return bool(self.cert_file) and bool(self.key_file)

    def auth_mode(self, username: str = "", password: str = "") -> AuthMode:
        """Select how to log in, given the credentials taken from the SDK URL"""
        if self.has_certificate():
            return CertificateAuth(self.cert_file, self.key_file, username)
        return PasswordAuth(username, password)
