"""
Domain events emitted alongside successful transitions.

Events are produced by the engine but never consumed by it; they exist
for downstream notification and audit. Each carries the letter id and
the action-specific payload.
"""

from dataclasses import dataclass
from typing import Any, ClassVar

from .models import LetterOfCredit, PersonRef, Rule


@dataclass(frozen=True)
class LetterEvent:
    """Base class for all letter of credit events."""
    letter_id: str

    event_type: ClassVar[str] = "LetterEvent"

    def payload(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "letter_id": self.letter_id,
            "payload": self.payload(),
        }


@dataclass(frozen=True)
class InitialApplicationEvent(LetterEvent):
    letter: LetterOfCredit

    event_type: ClassVar[str] = "InitialApplicationEvent"

    def payload(self) -> dict[str, Any]:
        return {"letter": self.letter.to_dict()}


@dataclass(frozen=True)
class ApproveEvent(LetterEvent):
    approving_party: PersonRef

    event_type: ClassVar[str] = "ApproveEvent"

    def payload(self) -> dict[str, Any]:
        return {"approving_party": self.approving_party.to_dict()}


@dataclass(frozen=True)
class RejectEvent(LetterEvent):
    close_reason: str

    event_type: ClassVar[str] = "RejectEvent"

    def payload(self) -> dict[str, Any]:
        return {"close_reason": self.close_reason}


@dataclass(frozen=True)
class SuggestChangesEvent(LetterEvent):
    rules: tuple[Rule, ...]
    suggesting_party: PersonRef

    event_type: ClassVar[str] = "SuggestChangesEvent"

    def payload(self) -> dict[str, Any]:
        return {
            "rules": [rule.to_dict() for rule in self.rules],
            "suggesting_party": self.suggesting_party.to_dict(),
        }


@dataclass(frozen=True)
class ShipProductEvent(LetterEvent):
    evidence: str

    event_type: ClassVar[str] = "ShipProductEvent"

    def payload(self) -> dict[str, Any]:
        return {"evidence": self.evidence}


@dataclass(frozen=True)
class ReceiveProductEvent(LetterEvent):
    event_type: ClassVar[str] = "ReceiveProductEvent"


@dataclass(frozen=True)
class ReadyForPaymentEvent(LetterEvent):
    event_type: ClassVar[str] = "ReadyForPaymentEvent"


@dataclass(frozen=True)
class CloseEvent(LetterEvent):
    close_reason: str

    event_type: ClassVar[str] = "CloseEvent"

    def payload(self) -> dict[str, Any]:
        return {"close_reason": self.close_reason}
