from __future__ import annotations

import threading
from collections import deque
from contextlib import contextmanager
from typing import Deque, Iterator, Optional

from .errors import ScanCancelled

# How often a blocked acquire() re-checks its cancel token.
CANCEL_POLL_S = 0.05


class AdmissionGate:
    """
    Counting gate with FIFO hand-off.

    - acquire() takes a free slot or queues behind earlier callers.
    - release() passes the slot straight to the oldest waiter, so in_use only
      drops when nobody is queued.
    Invariant: 0 <= in_use <= capacity, and waiters imply in_use == capacity.
    """

    def __init__(self, capacity: int):
        self._capacity = max(1, int(capacity))
        self._in_use = 0
        self._waiters: Deque[threading.Event] = deque()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_use(self) -> int:
        with self._lock:
            return self._in_use

    @property
    def waiting(self) -> int:
        with self._lock:
            return len(self._waiters)

    def acquire(self, cancel: Optional[threading.Event] = None) -> None:
        with self._lock:
            if self._in_use < self._capacity and not self._waiters:
                self._in_use += 1
                return
            granted = threading.Event()
            self._waiters.append(granted)

        if cancel is None:
            granted.wait()
            return

        while not granted.wait(CANCEL_POLL_S):
            if not cancel.is_set():
                continue
            with self._lock:
                if granted.is_set():
                    # slot was handed over while we were deciding; give it back
                    self._release_locked()
                else:
                    self._waiters.remove(granted)
            raise ScanCancelled()

    def release(self) -> None:
        with self._lock:
            self._release_locked()

    def _release_locked(self) -> None:
        if self._waiters:
            self._waiters.popleft().set()
            return
        if self._in_use == 0:
            raise ValueError("AdmissionGate released too many times")
        self._in_use -= 1

    @contextmanager
    def slot(self, cancel: Optional[threading.Event] = None) -> Iterator[None]:
        self.acquire(cancel)
        try:
            yield
        finally:
            self.release()
