"""Notification tap routing.

A tapped reminder carries the plant id in its payload. The router hands that
id to whoever subscribed (the plant list controller) instead of parking it in
process-wide state.
"""

import logging
from typing import Any, Callable, List, Mapping, Optional
from uuid import UUID

logger = logging.getLogger(__name__)

TapHandler = Callable[[str], Any]


def parse_tap_payload(user_info: Mapping[str, Any]) -> Optional[str]:
    """Extract the plant id from a notification payload, or None if absent/invalid."""
    raw = user_info.get("plantID")
    if not isinstance(raw, str):
        return None
    try:
        return str(UUID(raw))
    except ValueError:
        return None


class NotificationRouter:
    """Fan tapped plant ids out to subscribers."""

    def __init__(self):
        self._handlers: List[TapHandler] = []

    def subscribe(self, handler: TapHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: TapHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, plant_id: str) -> int:
        """Deliver `plant_id` to every subscriber; returns how many were called."""
        handlers = list(self._handlers)
        logger.debug(f"Routing notification tap for plant {plant_id} to {len(handlers)} handler(s)")
        for handler in handlers:
            handler(plant_id)
        return len(handlers)

    def handle_payload(self, user_info: Mapping[str, Any]) -> bool:
        """Parse a raw payload and publish it. Unparseable payloads are ignored."""
        plant_id = parse_tap_payload(user_info)
        if plant_id is None:
            return False
        self.publish(plant_id)
        return True
