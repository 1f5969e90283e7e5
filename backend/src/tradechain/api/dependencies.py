"""
Request-scoped access to application services.

Services are created once in the application lifespan and stored on
``app.state``; routes receive them through FastAPI dependencies.
"""

from fastapi import Request

from tradechain.services.events import EventStore
from tradechain.services.letters import LetterOfCreditService


def get_letter_service(request: Request) -> LetterOfCreditService:
    return request.app.state.letter_service


def get_event_store(request: Request) -> EventStore:
    return request.app.state.event_store
