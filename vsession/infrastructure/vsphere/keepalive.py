"""
Keep-alive wrapper for pyVmomi SOAP stubs
"""

import logging
import threading
import time
from pyVmomi import vim

logger = logging.getLogger(__name__)


class KeepAlive:
    """Stub wrapper that keeps an idle vSphere session from expiring.

    The wrapper forwards every call to the wrapped stub. The first call
    through it (the content request made when the stub is wrapped) starts
    a daemon thread which, whenever no call went through the wrapper for
    ``interval`` seconds, issues a ``CurrentTime`` request on the wrapped
    stub.

    A failed tick means the session is gone, so the thread stops. ``close``
    stops it as well, and later calls do not restart it.
    """

    def __init__(self, stub, interval: float):
        if interval <= 0:
            raise ValueError(f"keep-alive interval must be positive: {interval}")
        self._stub = stub
        self.interval = interval
        self._stopped = threading.Event()
        self._lock = threading.Lock()
        self._thread = None
        self._last_used = time.monotonic()

    @property
    def stub(self):
        """The wrapped stub"""
        return self._stub

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def InvokeMethod(self, mo, info, args):
        self._touch()
        return self._stub.InvokeMethod(mo, info, args)

    def InvokeAccessor(self, mo, info):
        self._touch()
        return self._stub.InvokeAccessor(mo, info)

    def __getattr__(self, name):
        if name == '_stub':
            raise AttributeError(name)
        return getattr(self._stub, name)

    def close(self) -> None:
        """Stop issuing keep-alive calls"""
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval)

    def _touch(self) -> None:
        self._last_used = time.monotonic()
        if self._thread is not None or self._stopped.is_set():
            return
        with self._lock:
            if self._thread is None and not self._stopped.is_set():
                self._thread = threading.Thread(
                    target=self._run, name="vsession-keepalive", daemon=True)
                self._thread.start()
                logger.debug(f"Keep-alive started with {self.interval}s interval")

    def _run(self) -> None:
        service_instance = vim.ServiceInstance("ServiceInstance", self._stub)
        while not self._stopped.wait(self.interval):
            if time.monotonic() - self._last_used < self.interval:
                continue
            try:
                service_instance.CurrentTime()
                self._last_used = time.monotonic()
            except Exception as e:
                logger.warning(f"Keep-alive request failed, stopping keep-alive: {e}")
                self._stopped.set()
        logger.debug("Keep-alive stopped")
