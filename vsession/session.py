"""
Session caches vSphere objects to avoid repeated lookups.

To obtain a Session, call ``create`` with a Config. The config holds the
SDK URL and the names of the desired vSphere resources. ``create``
connects, logs in and resolves one managed object for each of them, so
callers can use the cached objects on the Session instead of querying
the SDK again.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional
from pyVmomi import vim
from .config import Config, CertificateAuth
from .exceptions import CancelledError, DefaultAmbiguousResourceError, UnsupportedAuthModeError
from .infrastructure.vsphere.client import VSphereClient, load_certificate
from .infrastructure.vsphere.finder import Finder
from .infrastructure.vsphere.keepalive import KeepAlive
from .infrastructure.vsphere.url import parse_url

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Live vSphere connection plus the resources resolved through it"""
    client: VSphereClient
    datacenter: vim.Datacenter
    cluster: vim.ComputeResource
    datastore: vim.Datastore
    host: Optional[vim.HostSystem]
    network: vim.Network
    pool: vim.ResourcePool
    finder: Optional[Finder] = None

    @property
    def service_instance(self) -> vim.ServiceInstance:
        return self.client.service_instance

    @property
    def content(self):
        return self.client.content

    @property
    def is_vc(self) -> bool:
        return self.client.is_vc

    def close(self) -> None:
        """Log out and stop keep-alive"""
        self.client.disconnect()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@dataclass(frozen=True)
class HostResolution:
    """Outcome of the host lookup: a host, or a tolerated absence"""
    host: Optional[vim.HostSystem]
    tolerated: Optional[DefaultAmbiguousResourceError] = None


def resolve_host(finder: Finder, name: str, is_vc: bool) -> HostResolution:
    """Resolve the host, tolerating an ambiguous default on vCenter.

    A vCenter usually manages several hosts, so without a configured
    name there may be no single default host. That case yields no host
    instead of an error. Ambiguity on a standalone ESXi host and every
    other lookup failure still propagate.
    """
    try:
        return HostResolution(finder.host_system_or_default(name))
    except DefaultAmbiguousResourceError as e:
        if not is_vc:
            raise
        logger.warning(f"No unambiguous default host on vCenter, leaving host unset: {e}")
        return HostResolution(None, tolerated=e)


CANCEL_POLL_INTERVAL = 0.05


class _Bootstrap:
    """The creation steps for one client, remembering the step in progress"""

    def __init__(self, client: VSphereClient, config: Config, endpoint, auth,
                 cancel: Optional[threading.Event]):
        self.client = client
        self.config = config
        self.endpoint = endpoint
        self.auth = auth
        self.cancel = cancel
        self.step = "connecting"

    def checkpoint(self, step: str) -> None:
        self.step = step
        if self.cancel is not None and self.cancel.is_set():
            raise CancelledError(f"Session creation cancelled before {step}", details={'step': step})

    def run(self) -> Session:
        """Run every step, disconnecting the client if one of them fails"""
        try:
            return self._steps()
        except BaseException:
            self.client.disconnect()
            raise

    def _steps(self) -> Session:
        client, config, auth = self.client, self.config, self.auth

        # 1st connect without any user info to get the API type
        self.checkpoint("connecting")
        client.connect(self.endpoint, config.insecure)

        if isinstance(auth, CertificateAuth):
            if not client.is_vc:
                raise UnsupportedAuthModeError(
                    "Certificate based authentication not yet supported with ESXi",
                    details={'endpoint': str(self.endpoint)})

            self.checkpoint("loading the certificate")
            certificate = load_certificate(auth.cert_file, auth.key_file)

            self.checkpoint("connecting with the certificate")
            client.connect_with_certificate(self.endpoint, config.insecure, certificate)

        if config.keepalive:
            # The transport is final now; wrapping it earlier would be lost on reconnect
            self.checkpoint("enabling keep-alive")
            client.wrap_transport(lambda stub: KeepAlive(stub, config.keepalive))

        self.checkpoint("logging in")
        if isinstance(auth, CertificateAuth):
            client.login_by_certificate(auth.username)
        else:
            client.login(auth.username, auth.password)

        finder = Finder(client.content)

        self.checkpoint("resolving the datacenter")
        datacenter = finder.datacenter_or_default(config.datacenter)
        finder.set_datacenter(datacenter)

        self.checkpoint("resolving the cluster")
        cluster = finder.cluster_or_default(config.cluster)

        self.checkpoint("resolving the datastore")
        datastore = finder.datastore_or_default(config.datastore)

        self.checkpoint("resolving the host")
        host = resolve_host(finder, config.host, client.is_vc).host

        self.checkpoint("resolving the network")
        network = finder.network_or_default(config.network)

        self.checkpoint("resolving the resource pool")
        pool = finder.resource_pool_or_default(config.pool)

        self.checkpoint("returning the session")
        return Session(
            client=client,
            datacenter=datacenter,
            cluster=cluster,
            datastore=datastore,
            host=host,
            network=network,
            pool=pool,
            finder=finder,
        )


def _run_cancellable(bootstrap: _Bootstrap) -> Session:
    """Run the steps on a worker thread and return as soon as ``cancel`` is set.

    On cancel the client's connections are dropped, which fails the call in
    flight. Whatever the worker still finishes afterwards is disconnected by
    the worker itself.
    """
    outcome = {}
    finished = threading.Event()
    lock = threading.Lock()
    abandoned = threading.Event()

    def _work():
        try:
            outcome['session'] = bootstrap.run()
        except BaseException as e:
            outcome['error'] = e
        with lock:
            finished.set()
            if abandoned.is_set() and 'session' in outcome:
                bootstrap.client.disconnect()

    worker = threading.Thread(target=_work, name="vsession-create", daemon=True)
    worker.start()

    while not finished.wait(CANCEL_POLL_INTERVAL):
        if not bootstrap.cancel.is_set():
            continue
        with lock:
            if finished.is_set():
                break
            abandoned.set()
            step = bootstrap.step
            bootstrap.client.abort()
        logger.info(f"Session creation to {bootstrap.endpoint} cancelled while {step}")
        raise CancelledError(f"Session creation cancelled while {step}", details={'step': step})

    if 'error' in outcome:
        raise outcome['error']
    return outcome['session']


def create(config: Config, cancel: Optional[threading.Event] = None) -> Session:
    """Connect, log in and resolve the configured resources.

    Raises the first error encountered; nothing is retried. A connection
    opened before a failure is closed again, so an error never leaves a
    live session behind.

    When ``cancel`` is given, the steps run on a worker thread and setting
    the event makes ``create`` raise ``CancelledError`` right away, even
    while a remote call is still in progress.
    """
    if cancel is not None and cancel.is_set():
        raise CancelledError("Session creation cancelled before parsing the SDK URL",
                             details={'step': "parsing the SDK URL"})
    endpoint = parse_url(config.service)

    # A keep-alive cannot be registered when logging in while connecting,
    # so connect without user info and log in once the transport is final.
    auth = config.auth_mode(endpoint.username, endpoint.password)
    endpoint = endpoint.without_credentials()

    bootstrap = _Bootstrap(VSphereClient(), config, endpoint, auth, cancel)
    if cancel is None:
        session = bootstrap.run()
    else:
        session = _run_cancellable(bootstrap)

    logger.info(f"Session to {endpoint} ready (datacenter '{session.datacenter.name}')")
    return session
