"""
Services package - Action orchestration and event delivery.

Includes the letter of credit service and the domain event sinks.
"""

from .events import (
    CompositeEventSink,
    EventSink,
    EventStore,
    InMemoryEventSink,
    LoggingEventSink,
    SqlEventSink,
)
from .letters import LetterOfCreditService

__all__ = [
    "LetterOfCreditService",
    "EventSink",
    "EventStore",
    "InMemoryEventSink",
    "LoggingEventSink",
    "SqlEventSink",
    "CompositeEventSink",
]
