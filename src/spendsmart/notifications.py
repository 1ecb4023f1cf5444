"""
Process-wide notifications.

Named publish/subscribe signals without payloads. Navigation and UI
collaborators subscribe; engines post.
"""

import logging
from collections import defaultdict
from typing import Callable

logger = logging.getLogger(__name__)

ONBOARDING_COMPLETED = "onboarding_completed"


class NotificationCenter:
    """Synchronous in-process signal dispatcher."""

    def __init__(self):
        self._observers: dict[str, list[Callable[[], None]]] = defaultdict(list)

    def subscribe(self, name: str, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback for a signal. Returns an unsubscribe function."""
        self._observers[name].append(callback)

        def unsubscribe() -> None:
            if callback in self._observers[name]:
                self._observers[name].remove(callback)

        return unsubscribe

    def post(self, name: str) -> None:
        """Invoke every observer of `name`. Observer errors are logged, not raised."""
        for callback in list(self._observers[name]):
            try:
                callback()
            except Exception as e:
                logger.error(f"Observer for {name} failed: {e}")


# Default process-wide center
notification_center = NotificationCenter()
