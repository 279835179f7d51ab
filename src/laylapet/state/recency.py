"""In-process tracking of recently recommended products per chat session."""

import threading
from collections import OrderedDict
from typing import Iterable, Optional

import structlog

logger = structlog.get_logger()


class SessionRecencyTracker:
    """Bounded mapping of session id to recently recommended product ids.

    Each session keeps at most ``max_history`` ids (oldest dropped first).
    Sessions are kept in insertion order; once more than ``max_sessions``
    are tracked the oldest half is evicted at once. Updates are applied
    under a lock so concurrent requests for the same session do not lose
    entries.
    """

    def __init__(self, max_history: int = 15, max_sessions: int = 1000):
        """Initialize the tracker.

        Args:
            max_history: Maximum product ids remembered per session
            max_sessions: Maximum sessions tracked before eviction
        """
        self._sessions: OrderedDict[str, list[str]] = OrderedDict()
        self._max_history = max_history
        self._max_sessions = max_sessions
        self._lock = threading.Lock()

    def record(self, session_id: str, product_ids: Iterable[str]) -> None:
        """Append product ids to a session's history."""
        ids = [str(pid) for pid in product_ids]
        if not ids:
            return

        with self._lock:
            history = self._sessions.get(session_id)
            if history is None:
                history = []
                self._sessions[session_id] = history
            history.extend(ids)
            del history[:-self._max_history]

            if len(self._sessions) > self._max_sessions:
                self._evict_oldest_half()

    def recent(self, session_id: str) -> list[str]:
        """Return the session's history, oldest first."""
        with self._lock:
            return list(self._sessions.get(session_id, []))

    def clear(self, session_id: Optional[str] = None) -> None:
        """Forget one session, or every session when no id is given."""
        with self._lock:
            if session_id is None:
                self._sessions.clear()
            else:
                self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)

    def _evict_oldest_half(self) -> None:
        evict = len(self._sessions) // 2
        for _ in range(evict):
            self._sessions.popitem(last=False)
        logger.info(
            "Recency sessions evicted",
            evicted=evict,
            remaining=len(self._sessions),
        )


# Global tracker instance
_recency_tracker: Optional[SessionRecencyTracker] = None


def get_recency_tracker() -> SessionRecencyTracker:
    """Get the process-wide recency tracker (creates if needed)."""
    global _recency_tracker
    if _recency_tracker is None:
        from laylapet.config.settings import settings

        _recency_tracker = SessionRecencyTracker(
            max_history=settings.recency_max_history,
            max_sessions=settings.recency_max_sessions,
        )
    return _recency_tracker


def reset_recency_tracker() -> None:
    """Reset the global tracker (for testing)."""
    global _recency_tracker
    _recency_tracker = None
