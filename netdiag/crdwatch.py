"""Controllers that wait for, and watch for removal of, the connectivity check type."""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Callable

from netdiag.model import NotFoundError

logger = logging.getLogger(__name__)

CRD_NAME = "podnetworkconnectivitychecks.controlplane.operator.openshift.io"

CRDGetter = Callable[[str], Any]


def check_type_exists(get_crd: CRDGetter) -> bool:
    """Return whether the connectivity check resource type is defined.

    ``get_crd`` looks a definition up by name and raises :class:`NotFoundError`
    when it does not exist; other errors propagate.
    """
    try:
        get_crd(CRD_NAME)
    except NotFoundError:
        return False
    return True


class TimeToStartController:
    """Becomes ready once the connectivity check type exists, or an error occurs."""

    def __init__(self, get_crd: CRDGetter):
        self._get_crd = get_crd
        self._ready = threading.Event()
        self._lock = threading.Lock()
        self._error: BaseException | None = None

    def sync(self) -> None:
        """Look for the type; record readiness or the error, which is re-raised."""
        try:
            exists = check_type_exists(self._get_crd)
        except Exception as err:
            with self._lock:
                if self._error is None and not self._ready.is_set():
                    self._error = err
                    self._ready.set()
            raise
        if exists:
            self._ready.set()

    def wait_ready(self, timeout: float | None = None) -> bool:
        """Wait until ready; return False on timeout, raise the error if one occurred."""
        if not self._ready.wait(timeout):
            return False
        with self._lock:
            if self._error is not None:
                raise self._error
        return True


class StopController:
    """Ends the process when the connectivity check type stops being available."""

    def __init__(self, get_crd: CRDGetter, exit: Callable[[int], Any] = os._exit):
        self._get_crd = get_crd
        self._exit = exit

    def sync(self) -> None:
        """Exit with status 0 if the type no longer exists."""
        if not check_type_exists(self._get_crd):
            logger.info('The server doesn\'t have a resource type "%s".', CRD_NAME)
            self._exit(0)