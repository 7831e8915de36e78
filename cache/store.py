"""
cache/store.py -- In-memory registry of live screen controllers.

The HTTP surface has no component tree to own form sessions, so each mounted
screen's controller is parked here under its session id until the client
discards it (DELETE) or it sits idle longer than the TTL. Nothing is
persisted: a restart drops every in-progress form, which is the intended
lifetime of a form session.

Usage:
    registry = SessionRegistry(ttl=1800)
    registry.put(controller)                 # keyed by controller.session.id
    controller = registry.get(session_id)    # returns controller or None, refreshes TTL
    registry.discard(session_id)
    registry.purge_expired()                 # call periodically to trim abandoned forms
"""

import time
from typing import Optional

from auth.screens import ScreenController

_DEFAULT_TTL = 30 * 60  # 30 minutes in seconds


class SessionRegistry:
    def __init__(self, ttl: int = _DEFAULT_TTL) -> None:
        self.ttl = ttl
        self._entries: dict[str, tuple[ScreenController, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, session_id: str) -> Optional[ScreenController]:
        """Return the controller if it exists and hasn't expired. Refreshes its TTL."""
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        controller, last_seen = entry
        now = time.monotonic()
        if now - last_seen > self.ttl:
            self.discard(session_id)
            return None
        self._entries[session_id] = (controller, now)
        return controller

    def put(self, controller: ScreenController) -> str:
        """Store a controller under its session id and return the id."""
        session_id = controller.session.id
        self._entries[session_id] = (controller, time.monotonic())
        return session_id

    def discard(self, session_id: str) -> bool:
        """Drop a session. Returns False if it was not registered."""
        return self._entries.pop(session_id, None) is not None

    def purge_expired(self) -> int:
        """Drop every entry idle longer than TTL. Returns number of entries removed."""
        cutoff = time.monotonic() - self.ttl
        expired = [sid for sid, (_, last_seen) in self._entries.items() if last_seen < cutoff]
        for sid in expired:
            del self._entries[sid]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
