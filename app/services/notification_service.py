# app/services/notification_service.py

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger("notifications.dispatcher")


@dataclass(frozen=True)
class SchedulingEvent:
    entity_kind: str  # "booking" or "slot"
    entity_id: str
    transition: str  # "booked", "cancelled", "rescheduled", "scheduled->in_progress", ...
    participant_ids: Tuple[str, ...]
    occurred_at: datetime
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["participant_ids"] = list(self.participant_ids)
        data["occurred_at"] = self.occurred_at.isoformat()
        return data


Subscriber = Callable[[SchedulingEvent], None]


def log_event(event: SchedulingEvent) -> None:
    logger.info(
        f"[Event] {event.entity_kind}:{event.entity_id} {event.transition} "
        f"-> {', '.join(event.participant_ids) or 'admins'}"
    )


class NotificationDispatcher:
    """
    Fire-and-forget fan-out of scheduling events to the notification subsystem.

    Events are emitted after the owning transaction commits. A failing
    subscriber is logged and skipped; it never fails the scheduling request.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._subscribers: List[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def emit(self, event: SchedulingEvent) -> None:
        if not self.enabled:
            return
        for subscriber in self._subscribers:
            try:
                subscriber(event)
            except Exception as e:
                logger.warning(f"[Notify] Subscriber {getattr(subscriber, '__name__', subscriber)} failed: {e}")


def default_dispatcher(enabled: bool = True) -> NotificationDispatcher:
    dispatcher = NotificationDispatcher(enabled=enabled)
    dispatcher.subscribe(log_event)
    return dispatcher
