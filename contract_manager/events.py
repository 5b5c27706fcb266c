# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application event bus.

Events are delivered synchronously in the publishing thread, before the
publishing call returns. The permission cache relies on this to drop stale
entries before the next request reads them.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class AppEvent(str, Enum):
    """Application events that components can subscribe to."""

    # Role registry events
    ROLE_CREATED = "role.created"
    ROLE_UPDATED = "role.updated"
    ROLE_DELETED = "role.deleted"
    ROLE_PERMISSIONS_CHANGED = "role.permissions_changed"

    # Assignment events
    USER_ROLE_ASSIGNED = "user_role.assigned"
    USER_ROLE_REMOVED = "user_role.removed"

    # Materialized view events
    PERMISSIONS_REFRESHED = "permissions.refreshed"

    # Guard events
    PERMISSION_DENIED = "permission.denied"


@dataclass
class EventPayload:
    """Payload for an application event."""

    event_type: AppEvent
    timestamp: datetime
    data: dict[str, Any]
    source: str | None = None  # None means from the host app


# Type alias for event handlers
EventHandler = Callable[[EventPayload], Any]


class EventBus:
    """Central event bus for application-wide events.

    Handlers are isolated from each other: an exception in one handler is
    logged and does not stop delivery to the rest.
    """

    def __init__(self) -> None:
        self._handlers: dict[AppEvent, list[tuple[str | None, EventHandler]]] = (
            defaultdict(list)
        )

    def subscribe(
        self,
        event_type: AppEvent,
        handler: EventHandler,
        owner: str | None = None,
    ) -> None:
        """Subscribe to an event.

        Args:
            event_type: Event type to subscribe to
            handler: Function to call when event fires
            owner: Name of the subscribing component (for unsubscribe)
        """
        self._handlers[event_type].append((owner, handler))
        logger.debug(f"Subscribed {owner or 'host'} to event {event_type.value}")

    def unsubscribe(
        self,
        event_type: AppEvent,
        handler: EventHandler,
        owner: str | None = None,
    ) -> None:
        """Unsubscribe a handler from an event."""
        entry = (owner, handler)
        if entry in self._handlers[event_type]:
            self._handlers[event_type].remove(entry)

    def unsubscribe_owner(self, owner: str) -> None:
        """Remove all handlers registered by one component."""
        for event_type in list(self._handlers.keys()):
            self._handlers[event_type] = [
                (name, handler)
                for name, handler in self._handlers[event_type]
                if name != owner
            ]

        logger.debug(f"Unsubscribed all handlers for {owner}")

    def publish(
        self,
        event_type: AppEvent,
        data: dict[str, Any],
        source: str | None = None,
    ) -> None:
        """Publish an event to all subscribers."""
        payload = EventPayload(
            event_type=event_type,
            timestamp=datetime.utcnow(),
            data=data,
            source=source,
        )

        for owner, handler in self._handlers.get(event_type, []):
            try:
                handler(payload)
            except Exception as e:
                logger.error(
                    f"Error in event handler for {event_type.value} "
                    f"(owner: {owner}): {e}"
                )

    def get_subscriber_count(self, event_type: AppEvent) -> int:
        """Get the number of subscribers for an event type."""
        return len(self._handlers.get(event_type, []))


# Global event bus singleton
event_bus = EventBus()
