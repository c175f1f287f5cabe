"""Session-wide flags shared by both redirection paths."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass
class SessionState:
    """Termination and pause flags for one session.

    ``terminated`` is an event so a worker thread may observe it too;
    ``paused`` is written only by the input path and guarded by a lock.
    """

    port_name: str
    _terminated: threading.Event = field(default_factory=threading.Event, repr=False)
    _paused: bool = field(default=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def terminated(self) -> bool:
        return self._terminated.is_set()

    def terminate(self) -> None:
        self._terminated.set()

    @property
    def paused(self) -> bool:
        with self._lock:
            return self._paused

    def toggle_pause(self) -> bool:
        """Flip the pause flag and return its new value."""
        with self._lock:
            self._paused = not self._paused
            return self._paused
