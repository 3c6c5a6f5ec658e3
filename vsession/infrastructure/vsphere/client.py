"""
vSphere client wrapper for session bootstrap
"""

import logging
import ssl
from dataclasses import dataclass
from typing import Callable, Optional
from pyVim import connect
from pyVmomi import vim
from .keepalive import KeepAlive
from .url import Endpoint
from ...exceptions import ConnectionError, AuthenticationError, CertificateLoadError

logger = logging.getLogger(__name__)

VIRTUAL_CENTER = "VirtualCenter"


@dataclass(frozen=True)
class Certificate:
    """Client certificate and key that loaded successfully"""
    cert_file: str
    key_file: str

    def apply(self, context: ssl.SSLContext) -> ssl.SSLContext:
        context.load_cert_chain(certfile=self.cert_file, keyfile=self.key_file)
        return context


def load_certificate(cert_file: str, key_file: str) -> Certificate:
    """Load an X509 key pair, failing early if the files are missing or malformed"""
    try:
        ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT).load_cert_chain(
            certfile=cert_file, keyfile=key_file)
    except OSError as e:
        raise CertificateLoadError(
            f"Unable to load X509 key pair ({cert_file}, {key_file}): {e}",
            details={'cert_file': cert_file, 'key_file': key_file}) from e
    return Certificate(cert_file, key_file)


class VSphereClient:
    """vSphere API client holding one SOAP connection"""

    def __init__(self):
        self.endpoint: Optional[Endpoint] = None
        self._stub = None
        self._opening = None
        self._service_instance = None
        self._content = None

    def connect(self, endpoint: Endpoint, insecure: bool = False) -> None:
        """Open an unauthenticated connection to the SDK endpoint"""
        self._open(endpoint, self._ssl_context(insecure))

    def connect_with_certificate(self, endpoint: Endpoint, insecure: bool,
                                 certificate: Certificate) -> None:
        """Open a connection presenting a client certificate"""
        try:
            context = certificate.apply(self._ssl_context(insecure))
        except OSError as e:
            raise CertificateLoadError(
                f"Unable to load X509 key pair ({certificate.cert_file}, {certificate.key_file}): {e}",
                details={'cert_file': certificate.cert_file,
                         'key_file': certificate.key_file}) from e
        self._open(endpoint, context)

    def _ssl_context(self, insecure: bool) -> ssl.SSLContext:
        if insecure:
            # Lab environments may need unverified SSL context
            return ssl._create_unverified_context()  # nosec B323
        return ssl.create_default_context()

    def _open(self, endpoint: Endpoint, context: ssl.SSLContext) -> None:
        # pyVmomi selects plain http through a negative port
        port = endpoint.port if endpoint.is_secure else -endpoint.port
        try:
            stub = connect.SmartStubAdapter(
                host=endpoint.host,
                port=port,
                path=endpoint.path,
                sslContext=context,
            )
            self._opening = stub
            service_instance = vim.ServiceInstance("ServiceInstance", stub)
            content = service_instance.RetrieveContent()
        except Exception as e:
            raise ConnectionError(
                f"Failed to connect to {endpoint}: {e}",
                details={'endpoint': str(endpoint)}) from e
        finally:
            self._opening = None

        # The baseline connection of a certificate reconnect is not logged in
        previous = self._stub
        self.endpoint = endpoint
        self._stub = stub
        self._service_instance = service_instance
        self._content = content
        if previous is not None:
            self._drop_connections(previous)
        logger.info(f"Connected to {endpoint} ({content.about.fullName})")

    def wrap_transport(self, wrapper: Callable) -> None:
        """Replace the SOAP stub with ``wrapper(stub)`` for all further calls.

        The service content is fetched again through the wrapper, so the
        managed objects it holds are bound to the wrapped stub.
        """
        self._stub = wrapper(self.stub)
        self._service_instance = vim.ServiceInstance("ServiceInstance", self._stub)
        try:
            self._content = self._service_instance.RetrieveContent()
        except Exception as e:
            raise ConnectionError(
                f"Failed to retrieve service content from {self.endpoint}: {e}",
                details={'endpoint': str(self.endpoint)}) from e

    def abort(self) -> None:
        """Drop open connections without logging out.

        Calls blocked on the dropped connections fail. The client keeps its
        references, so ``disconnect`` still has to be called afterwards.
        """
        for stub in (self._opening, self._stub):
            if stub is None:
                continue
            if isinstance(stub, KeepAlive):
                stub.close()
            self._drop_connections(stub)
        logger.debug(f"Aborted connections to {self.endpoint}")

    def _drop_connections(self, stub) -> None:
        try:
            stub.DropConnections()
        except Exception as e:
            logger.debug(f"Dropping connections failed (non-fatal): {e}")

    def login(self, username: str, password: str) -> None:
        """Log in with a user name and password"""
        try:
            self._session_manager().Login(username, password, None)
        except vim.fault.InvalidLogin as e:
            raise AuthenticationError(
                f"Failed to log in to {self.endpoint}: invalid credentials for '{username}'",
                details={'endpoint': str(self.endpoint)}) from e
        except Exception as e:
            raise AuthenticationError(
                f"Failed to log in to {self.endpoint}: {e}",
                details={'endpoint': str(self.endpoint)}) from e
        logger.info(f"Logged in to {self.endpoint} as '{username}'")

    def login_by_certificate(self, username: str = "") -> None:
        """Log in with the client certificate, acting as the given extension"""
        try:
            self._session_manager().LoginExtensionByCertificate(username, None)
        except Exception as e:
            raise AuthenticationError(
                f"Failed to log in to {self.endpoint}: {e}",
                details={'endpoint': str(self.endpoint)}) from e
        logger.info(f"Logged in to {self.endpoint} by certificate as '{username}'")

    def _session_manager(self) -> vim.SessionManager:
        # Bound to the current stub so wrapped transports see the login
        return vim.SessionManager(self.content.sessionManager._moId, self.stub)

    def disconnect(self) -> None:
        """Log out and release the connection"""
        if self._service_instance is None:
            return
        if isinstance(self._stub, KeepAlive):
            self._stub.close()
        try:
            connect.Disconnect(self._service_instance)
        except Exception as e:
            logger.debug(f"Disconnect error (non-fatal): {e}")
        finally:
            self._stub = None
            self._service_instance = None
            self._content = None
        logger.info(f"Disconnected from {self.endpoint}")

    @property
    def connected(self) -> bool:
        return self._service_instance is not None

    @property
    def stub(self):
        """SOAP stub used for calls"""
        if self._stub is None:
            raise ConnectionError("Not connected to vSphere")
        return self._stub

    @property
    def service_instance(self) -> vim.ServiceInstance:
        if self._service_instance is None:
            raise ConnectionError("Not connected to vSphere")
        return self._service_instance

    @property
    def content(self):
        """Get vSphere content object"""
        if not self._content:
            raise ConnectionError("Not connected to vSphere")
        return self._content

    @property
    def is_vc(self) -> bool:
        """True when connected to vCenter rather than a standalone ESXi host"""
        return self.content.about.apiType == VIRTUAL_CENTER
