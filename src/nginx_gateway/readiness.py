"""Readiness signal consumed by the health probe."""

from __future__ import annotations

import logging
from threading import Event, Lock
from typing import Optional

from .errors import NotReadyError, ReloadFailedError

LOG = logging.getLogger(__name__)


class ReadinessTracker:
    """Track whether NGINX has been configured and whether the last reload failed.

    The *configured* gate is a one-shot :class:`threading.Event`: it is set when
    the first batch completes, whatever that batch changed, and is never
    cleared. Any number of waiters may block on it.

    The reload error is independent of the gate. It is set by a failed full
    reconfiguration and cleared only by a successful one; batches that do not
    reload leave it as is.
    """

    def __init__(self) -> None:
        self._configured = Event()
        self._lock = Lock()
        self._reload_error: Optional[BaseException] = None

    @property
    def ready_event(self) -> Event:
        return self._configured

    @property
    def configured(self) -> bool:
        return self._configured.is_set()

    @property
    def reload_error(self) -> Optional[BaseException]:
        with self._lock:
            return self._reload_error

    def mark_configured(self) -> None:
        if not self._configured.is_set():
            LOG.info("NGINX configured for the first time, reporting ready")
        self._configured.set()

    def set_reload_error(self, error: BaseException) -> None:
        with self._lock:
            self._reload_error = error

    def clear_reload_error(self) -> None:
        with self._lock:
            self._reload_error = None

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._configured.wait(timeout)

    def check_ready(self) -> None:
        """Raise if NGINX is not ready to serve the current configuration."""

        if not self._configured.is_set():
            raise NotReadyError()
        error = self.reload_error
        if error is not None:
            raise ReloadFailedError(error) from error
