"""Invalidation channel broadcast after every successful mutation.

Read subscriptions (the sidebar list, the detail pane) subscribe to the
bus and re-run their loader when a write lands, so nothing rendered after
an action reflects pre-action data.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Invalidation:
    """One broadcast: why loader data went stale and which record changed."""
    reason: str
    contact_id: Optional[str]
    sequence: int


Subscriber = Callable[[Invalidation], None]


class InvalidationBus:
    def __init__(self) -> None:
        self._subscribers: List[Subscriber] = []
        self._sequence = 0
        self._lock = threading.Lock()

    @property
    def version(self) -> int:
        """Sequence number of the most recent publish (0 before any)."""
        return self._sequence

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` and return a function that removes it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, reason: str, contact_id: Optional[str] = None) -> Invalidation:
        with self._lock:
            self._sequence += 1
            event = Invalidation(reason=reason, contact_id=contact_id, sequence=self._sequence)
            subscribers = list(self._subscribers)

        logger.debug(f"[Revalidate] #{event.sequence} {reason} -> {len(subscribers)} subscribers")
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(f"[Revalidate] Subscriber failed on {reason}")
        return event
