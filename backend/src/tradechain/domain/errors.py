"""
Error taxonomy for the letter of credit workflow.

Every failure carries a stable machine-checkable ``code`` plus a
human-readable message. All errors are scoped to a single action on a
single record; none of them is fatal to the process and none is retried.
"""

from typing import Any


class LetterOfCreditError(Exception):
    """Base exception for all letter of credit errors."""

    code = "LETTER_OF_CREDIT_ERROR"
    default_message = "Letter of credit operation failed"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses and audit logs."""
        return {"error": self.code, "detail": self.message, "details": self.details}


# =============================================================================
# Transition rule failures
# =============================================================================

class AlreadyClosedError(LetterOfCreditError):
    """Action attempted on a CLOSED or REJECTED letter."""
    code = "ALREADY_CLOSED"
    default_message = "This letter of credit has already been closed"


class DuplicateLetterIdError(LetterOfCreditError):
    """InitialApplication reuses an existing letter id."""
    code = "DUPLICATE_ID"
    default_message = "A letter of credit with this id already exists"


class AlreadyApprovedError(LetterOfCreditError):
    """Approver is already in the approval list."""
    code = "ALREADY_APPROVED"
    default_message = "This person has already approved this letter of credit"


class BankAlreadyApprovedError(LetterOfCreditError):
    """Another employee of the approver's bank already approved."""
    code = "BANK_ALREADY_APPROVED"
    default_message = "Your bank has already approved of this request"


class AlreadyShippedError(LetterOfCreditError):
    """Shipment or rule change attempted once goods have shipped."""
    code = "ALREADY_SHIPPED"
    default_message = "The product has already been shipped"


class NotFullyApprovedError(LetterOfCreditError):
    """Shipment attempted before all required roles approved."""
    code = "NOT_FULLY_APPROVED"
    default_message = "This letter needs to be fully approved before the product can be shipped"


class NotYetShippedError(LetterOfCreditError):
    """Receipt confirmed for goods that were never shipped."""
    code = "NOT_YET_SHIPPED"
    default_message = "The product needs to be shipped before it can be received"


class AlreadyReceivedError(LetterOfCreditError):
    """Receipt confirmed a second time."""
    code = "ALREADY_RECEIVED"
    default_message = "The product has already been received"


class NotYetReceivedError(LetterOfCreditError):
    """Payment readiness set before the goods were received."""
    code = "NOT_YET_RECEIVED"
    default_message = (
        "The payment cannot be made until the product has been received by the applicant"
    )


class AlreadyReadyError(LetterOfCreditError):
    """Payment readiness set a second time."""
    code = "ALREADY_READY"
    default_message = "The payment has already been made"


class NotReadyToCloseError(LetterOfCreditError):
    """Close attempted before payment is ready."""
    code = "NOT_READY_TO_CLOSE"
    default_message = (
        "Cannot close this letter of credit until it is fully approved "
        "and the product has been received by the applicant"
    )


class InvalidTransitionError(LetterOfCreditError):
    """Status change that is not an edge of the transition graph."""
    code = "INVALID_TRANSITION"
    default_message = "Illegal letter of credit status transition"


class InvalidParticipantError(LetterOfCreditError):
    """Participant of the wrong kind, or the same person in two roles."""
    code = "INVALID_PARTICIPANT"
    default_message = "Participant cannot act in this role"


# =============================================================================
# Lookup / registry failures
# =============================================================================

class LetterNotFoundError(LetterOfCreditError):
    """No letter of credit is stored under the given id."""
    code = "LETTER_NOT_FOUND"
    default_message = "Letter of credit not found"


class ParticipantNotFoundError(LetterOfCreditError):
    """No bank or person is registered under the given id."""
    code = "PARTICIPANT_NOT_FOUND"
    default_message = "Participant not found"


class DuplicateParticipantError(LetterOfCreditError):
    """Bank or person id is already registered."""
    code = "DUPLICATE_PARTICIPANT"
    default_message = "A participant with this id already exists"
