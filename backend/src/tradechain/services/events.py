"""
Event sinks for letter of credit domain events.

The service publishes every event after the state change it describes
has been persisted. Sinks are used for notification and audit; the
engine never reads them back.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any

from sqlalchemy import select

from tradechain.domain.events import LetterEvent
from tradechain.infrastructure.database import Database, LetterEventRecord

logger = logging.getLogger(__name__)


class EventSink(ABC):
    """Receives domain events."""

    @abstractmethod
    async def publish(self, event: LetterEvent) -> None:
        pass


class EventStore(EventSink):
    """A sink that also keeps the event history of each letter."""

    @abstractmethod
    async def history(self, letter_id: str) -> list[dict[str, Any]]:
        """Events recorded for a letter, oldest first, in dictionary form."""
        pass


class InMemoryEventSink(EventStore):
    """Keeps published events in memory. Used in development and tests."""

    def __init__(self) -> None:
        self.events: list[LetterEvent] = []
        self._by_letter: dict[str, list[LetterEvent]] = defaultdict(list)

    async def publish(self, event: LetterEvent) -> None:
        self.events.append(event)
        self._by_letter[event.letter_id].append(event)

    async def history(self, letter_id: str) -> list[dict[str, Any]]:
        return [event.to_dict() for event in self._by_letter.get(letter_id, [])]


class LoggingEventSink(EventSink):
    """Writes each event to the application log."""

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    async def publish(self, event: LetterEvent) -> None:
        logger.log(self.level, f"{event.event_type} letter={event.letter_id} payload={event.payload()}")


class SqlEventSink(EventStore):
    """Appends events to the ``letter_events`` audit table."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def publish(self, event: LetterEvent) -> None:
        async with self.db.session() as session:
            session.add(
                LetterEventRecord(
                    letter_id=event.letter_id,
                    event_type=event.event_type,
                    payload_json=event.payload(),
                )
            )
            await session.commit()

    async def history(self, letter_id: str) -> list[dict[str, Any]]:
        query = (
            select(LetterEventRecord)
            .where(LetterEventRecord.letter_id == letter_id)
            .order_by(LetterEventRecord.id)
        )
        async with self.db.session() as session:
            result = await session.scalars(query)
            return [
                {
                    "event_type": record.event_type,
                    "letter_id": record.letter_id,
                    "payload": record.payload_json,
                }
                for record in result.all()
            ]


class CompositeEventSink(EventSink):
    """Fans an event out to several sinks in order."""

    def __init__(self, sinks: list[EventSink]) -> None:
        self.sinks = list(sinks)

    async def publish(self, event: LetterEvent) -> None:
        for sink in self.sinks:
            await sink.publish(event)
