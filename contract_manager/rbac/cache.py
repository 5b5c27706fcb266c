# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""In-process TTL cache of effective permission sets."""

import logging
import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from contract_manager.events import AppEvent, EventBus, EventPayload

logger = logging.getLogger(__name__)

CACHE_OWNER = "permission_cache"

# Events after which cached sets may be wrong for everyone
_GLOBAL_INVALIDATION_EVENTS = (
    AppEvent.ROLE_CREATED,
    AppEvent.ROLE_UPDATED,
    AppEvent.ROLE_DELETED,
    AppEvent.ROLE_PERMISSIONS_CHANGED,
    AppEvent.PERMISSIONS_REFRESHED,
)

# Events that only affect the user named in the payload
_USER_INVALIDATION_EVENTS = (
    AppEvent.USER_ROLE_ASSIGNED,
    AppEvent.USER_ROLE_REMOVED,
)


@dataclass
class _Entry:
    permissions: frozenset[str]
    expires_at: float


class PermissionCache:
    """Maps user id to a frozen permission set for ``ttl_seconds``.

    A TTL of 0 disables caching. Entries are also dropped explicitly through
    the event bus whenever roles, attachments or assignments change.
    """

    def __init__(
        self,
        ttl_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[uuid.UUID, _Entry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self, user_id: uuid.UUID) -> frozenset[str] | None:
        """Return the cached set, or None when missing or expired."""
        if not self.enabled:
            return None
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is None:
                self._misses += 1
                return None
            if entry.expires_at <= self._clock():
                del self._entries[user_id]
                self._misses += 1
                return None
            self._hits += 1
            return entry.permissions

    def set(self, user_id: uuid.UUID, permissions: frozenset[str]) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._entries[user_id] = _Entry(
                permissions=frozenset(permissions),
                expires_at=self._clock() + self.ttl_seconds,
            )

    def invalidate_user(self, user_id: uuid.UUID) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def invalidate_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, int | bool]:
        with self._lock:
            return {
                "enabled": self.enabled,
                "ttl_seconds": self.ttl_seconds,
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
            }

    def _on_global_change(self, payload: EventPayload) -> None:
        logger.debug(f"Clearing permission cache after {payload.event_type.value}")
        self.invalidate_all()

    def _on_user_change(self, payload: EventPayload) -> None:
        raw = payload.data.get("user_id")
        if raw is None:
            self.invalidate_all()
            return
        self.invalidate_user(uuid.UUID(str(raw)))

    def register(self, bus: EventBus) -> None:
        """Subscribe the cache's invalidation handlers to an event bus."""
        bus.unsubscribe_owner(CACHE_OWNER)
        for event_type in _GLOBAL_INVALIDATION_EVENTS:
            bus.subscribe(event_type, self._on_global_change, owner=CACHE_OWNER)
        for event_type in _USER_INVALIDATION_EVENTS:
            bus.subscribe(event_type, self._on_user_change, owner=CACHE_OWNER)
