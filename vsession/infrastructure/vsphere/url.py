"""
SDK URL parsing
"""

import re
from dataclasses import dataclass, replace
from urllib.parse import urlsplit, unquote
from ...exceptions import InvalidEndpointError

_SCHEME = re.compile(r'^\w+://')
_DEFAULT_PORTS = {'https': 443, 'http': 80}


@dataclass(frozen=True)
class Endpoint:
    """Parsed SDK URL"""
    scheme: str
    host: str
    port: int
    path: str = "/sdk"
    username: str = ""
    password: str = ""

    @property
    def is_secure(self) -> bool:
        return self.scheme == 'https'

    def without_credentials(self) -> 'Endpoint':
        """Copy of the endpoint with user info removed"""
        return replace(self, username="", password="")

    def __str__(self) -> str:
        userinfo = ""
        if self.username:
            userinfo = f"{self.username}:***@" if self.password else f"{self.username}@"
        host = f"[{self.host}]" if ':' in self.host else self.host
        return f"{self.scheme}://{userinfo}{host}:{self.port}{self.path}"


def parse_url(service: str) -> Endpoint:
    """Parse an SDK URL, defaulting the scheme to https and the path to /sdk"""
    if not service or not service.strip():
        raise InvalidEndpointError("SDK URL is empty", details={'service': service})

    url = service.strip()
    if not _SCHEME.match(url):
        url = f"https://{url}"

    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as e:
        raise InvalidEndpointError(
            f"SDK URL ({service}) could not be parsed: {e}",
            details={'service': service}) from e

    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise InvalidEndpointError(
            f"SDK URL ({service}) could not be parsed: unsupported scheme '{parts.scheme}'",
            details={'service': service})
    if not parts.hostname:
        raise InvalidEndpointError(
            f"SDK URL ({service}) could not be parsed: missing host",
            details={'service': service})

    return Endpoint(
        scheme=scheme,
        host=parts.hostname,
        port=port or _DEFAULT_PORTS[scheme],
        path=parts.path or "/sdk",
        username=unquote(parts.username or ""),
        password=unquote(parts.password or ""),
    )
