"""Thread-safe record of sessions that already produced a final report.

The only mutable state shared across requests. `add_if_absent` is the atomic
check-and-insert the finalization gate relies on to report each session at
most once for the lifetime of the process.
"""

import threading
from typing import Iterator, Set


class FinalizedSessionStore:
    """In-memory "seen" set keyed by session id.

    The lock guards only the set operation itself.
    """

    def __init__(self) -> None:
        self._seen: Set[str] = set()
        self._lock = threading.Lock()

    def add_if_absent(self, session_id: str) -> bool:
        """Mark a session finalized. Returns True only for the first call."""
        with self._lock:
            if session_id in self._seen:
                return False
            self._seen.add(session_id)
            return True

    def discard(self, session_id: str) -> None:
        """Forget a session (operator reset / tests)."""
        with self._lock:
            self._seen.discard(session_id)

    def clear(self) -> None:
        with self._lock:
            self._seen.clear()

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._seen))


# Module-level singleton
finalized_sessions = FinalizedSessionStore()
