"""
Tool: Notification Sink
Purpose: Contract for "deliver at time T" requests, plus an in-memory sink

The engine only decides what to send and when. How delivery happens (push,
desktop, chat) belongs to a sink implementation.

Usage:
    from cadence.engagement.sink import InMemoryNotificationSink, deliver

    sink = InMemoryNotificationSink()
    notification_id = await deliver(sink, "focus_reminder", "Cadence", "Ready?", at_time)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cadence.history.models import generate_id
from cadence.logging_config import get_logger


logger = get_logger(__name__)


class NotificationSink(ABC):
    """
    Delivery backend.

    schedule() returns None on a non-fatal failure; callers treat that as
    "not scheduled" and carry on.
    """

    @abstractmethod
    async def schedule(
        self,
        type: str,
        title: str,
        body: str,
        at_time: datetime,
        repeat: list[int] | None = None,
    ) -> str | None:
        pass

    @abstractmethod
    async def cancel(self, notification_id: str) -> bool:
        pass

    @abstractmethod
    async def cancel_all(self) -> None:
        pass


@dataclass
class SinkRequest:
    id: str
    type: str
    title: str
    body: str
    at_time: datetime
    repeat: list[int] | None = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "body": self.body,
            "at_time": self.at_time.isoformat(),
            "repeat": self.repeat,
        }


class InMemoryNotificationSink(NotificationSink):
    """Keeps scheduled requests in a dict keyed by id."""

    def __init__(self):
        self.scheduled: dict[str, SinkRequest] = {}

    async def schedule(
        self,
        type: str,
        title: str,
        body: str,
        at_time: datetime,
        repeat: list[int] | None = None,
    ) -> str | None:
        request = SinkRequest(
            id=generate_id("ntf"),
            type=type,
            title=title,
            body=body,
            at_time=at_time,
            repeat=list(repeat) if repeat is not None else None,
        )
        self.scheduled[request.id] = request
        return request.id

    async def cancel(self, notification_id: str) -> bool:
        return self.scheduled.pop(notification_id, None) is not None

    async def cancel_all(self) -> None:
        self.scheduled.clear()


async def deliver(
    sink: NotificationSink,
    type: str,
    title: str,
    body: str,
    at_time: datetime,
    repeat: list[int] | None = None,
) -> str | None:
    """
    Ask the sink to deliver, converting failures into None.

    Returns:
        Sink identifier, or None if scheduling failed
    """
    try:
        notification_id = await sink.schedule(type, title, body, at_time, repeat)
    except Exception as e:
        logger.error("notification_schedule_failed", type=type, at_time=at_time.isoformat(),
                     error=str(e))
        return None

    if notification_id is None:
        logger.warning("notification_not_scheduled", type=type, at_time=at_time.isoformat())
    return notification_id
