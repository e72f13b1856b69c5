# finance_tracker/guard.py
import threading
from contextlib import contextmanager

from .errors import ActionInProgressError


class ActionGuard:
    """Tracks in-flight actions keyed by (record kind, action).

    A second claim on a key that is still held is rejected rather than
    allowed to race the first one.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._active = set()

    def is_active(self, key):
        with self._lock:
            return key in self._active

    @property
    def busy(self):
        with self._lock:
            return bool(self._active)

    @contextmanager
    def claim(self, key):
        with self._lock:
            if key in self._active:
                raise ActionInProgressError(key)
            self._active.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._active.discard(key)
