"""Explicit notify/subscribe channel for engine state changes.

INVARIANT: Subscriber failures are warnings, never errors.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class EventKind(StrEnum):
    """What changed."""

    VALUE = "value"
    FIELD = "field"
    FORM = "form"


@dataclass(frozen=True)
class StateEvent:
    """Notification payload; *field* is None for form-level changes."""

    kind: EventKind
    field: str | None = None


Subscriber = Callable[[StateEvent], None]


class StateObservers:
    """Ordered list of subscriber callbacks."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback*; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def notify(self, event: StateEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.warning("State subscriber failed on %s", event, exc_info=True)

    def __len__(self) -> int:
        return len(self._subscribers)
