"""
Key state table.

Holds the 0/1 state of each monitored key id. The set of ids always equals
the ids of the current monitored key list; reset() swaps in a new list.
"""

import time
import threading
from typing import Callable, Dict, Iterable, List
from dataclasses import dataclass

RELEASED = 0
PRESSED = 1


@dataclass
class StateChange:
    """Represents a key state update."""
    key_id: str
    state: int
    timestamp: float


class KeyStateTable:
    """
    Tracks the current state of every monitored key.

    Written from the keyboard hook thread and reset from the main thread
    when the configuration changes.
    """

    def __init__(self, key_ids: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._states: Dict[str, int] = {key_id: RELEASED for key_id in key_ids}
        self._listeners: List[Callable[[StateChange], None]] = []

    @property
    def key_ids(self) -> List[str]:
        """Ids currently tracked, in configuration order."""
        with self._lock:
            return list(self._states)

    def snapshot(self) -> Dict[str, int]:
        """Copy of the current states."""
        with self._lock:
            return dict(self._states)

    def get(self, key_id: str) -> int:
        with self._lock:
            return self._states.get(key_id, RELEASED)

    def add_listener(self, callback: Callable[[StateChange], None]):
        """Add a state change listener."""
        with self._lock:
            self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[StateChange], None]):
        """Remove a state change listener."""
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def reset(self, key_ids: Iterable[str]) -> Dict[str, int]:
        """
        Replace the tracked ids and set them all to released.
        Ids that are no longer configured are dropped.
        """
        with self._lock:
            self._states = {key_id: RELEASED for key_id in key_ids}
            return dict(self._states)

    def set(self, key_id: str, state: int) -> bool:
        """
        Record a key state.

        Repeated identical states are recorded again and still notify
        listeners. Returns False when key_id is not currently tracked.
        """
        with self._lock:
            if key_id not in self._states:
                return False
            self._states[key_id] = PRESSED if state else RELEASED
            change = StateChange(
                key_id=key_id,
                state=self._states[key_id],
                timestamp=time.time()
            )
            listeners = list(self._listeners)

        for listener in listeners:
            listener(change)
        return True
