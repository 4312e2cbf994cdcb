"""
Change notifier.

Publish/subscribe interface between the registry and whatever pushes
updates to clients. The core only knows `notify(kind, payload)`; transports
(WebSocket, test fakes) subscribe callbacks.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional
import logging

from bedflow.models.enums import EventKindEnum
from bedflow.models.patient import utcnow

logger = logging.getLogger("bedflow.notifier")


@dataclass
class ChangeEvent:
    """A state change pushed to subscribers."""
    kind: EventKindEnum
    payload: Any
    emitted_at: datetime = field(default_factory=utcnow)

    def to_message(self) -> dict:
        """JSON-ready message for push transports."""
        return {
            "type": self.kind.value,
            "data": self.payload,
            "emitted_at": self.emitted_at.isoformat(),
        }


Subscriber = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """
    Synchronous fan-out to the currently registered subscribers.

    Delivery is at-most-once per event and subscriber. Nothing is queued for
    subscribers that register later; they re-fetch full state instead.
    """

    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> None:
        """Registers a subscriber. Registering twice has no effect."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def notify(self, kind: EventKindEnum, payload: Any) -> ChangeEvent:
        """
        Publishes an event to every subscriber.

        A failing subscriber is logged and skipped; the others still receive
        the event and the caller never sees the error.

        Args:
            kind: Event kind
            payload: Full bed record, removed bed id, or full sorted queue

        Returns:
            The published event
        """
        event = ChangeEvent(kind=kind, payload=payload)

        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                logger.warning(f"Subscriber failed on {kind.value}: {e}")

        return event


class RecordingSubscriber:
    """
    In-memory subscriber that keeps every event it receives.

    Usage:
        recorder = RecordingSubscriber()
        notifier.subscribe(recorder)
        ...
        assert recorder.kinds() == [EventKindEnum.BED_UPDATED]
    """

    def __init__(self):
        self.events: List[ChangeEvent] = []

    def __call__(self, event: ChangeEvent) -> None:
        self.events.append(event)

    def kinds(self) -> List[EventKindEnum]:
        return [event.kind for event in self.events]

    def last(self, kind: Optional[EventKindEnum] = None) -> Optional[ChangeEvent]:
        """Last event received, optionally of a given kind."""
        for event in reversed(self.events):
            if kind is None or event.kind == kind:
                return event
        return None

    def clear(self) -> None:
        self.events.clear()
