"""
Domain models for the letter of credit network.

These models represent the participants and the letter of credit asset
that moves through the approval, shipment and payment lifecycle.

Design Decisions:
- Frozen dataclasses; transitions produce new records via dataclasses.replace
- Letters reference participants by identifier (PersonRef), never by
  embedding a mutable participant object
- Person is a tagged variant (PersonKind) rather than a class hierarchy
- Decimal for all monetary values to avoid floating-point errors
- The status graph is plain data; behavior lives in transitions.py
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from .errors import InvalidTransitionError


class LetterStatus(str, Enum):
    """Lifecycle status of a letter of credit."""
    AWAITING_APPROVAL = "AWAITING_APPROVAL"
    APPROVED = "APPROVED"
    SHIPPED = "SHIPPED"
    RECEIVED = "RECEIVED"
    READY_FOR_PAYMENT = "READY_FOR_PAYMENT"
    CLOSED = "CLOSED"
    REJECTED = "REJECTED"


class PersonKind(str, Enum):
    """Variant tag for participants that can act on a letter."""
    CUSTOMER = "Customer"
    BANK_EMPLOYEE = "BankEmployee"


# Terminal statuses: once reached, the letter is retained for audit only.
TERMINAL_STATUSES: frozenset[LetterStatus] = frozenset(
    {
        LetterStatus.CLOSED,
        LetterStatus.REJECTED,
    }
)

# Allowed status transitions.
#
# Key   : current status
# Value : statuses reachable by a single action
#
# Rejection is reachable from every non-terminal status.
STATUS_TRANSITIONS: dict[LetterStatus, frozenset[LetterStatus]] = {
    LetterStatus.AWAITING_APPROVAL: frozenset({LetterStatus.APPROVED, LetterStatus.REJECTED}),
    LetterStatus.APPROVED: frozenset({LetterStatus.SHIPPED, LetterStatus.REJECTED}),
    LetterStatus.SHIPPED: frozenset({LetterStatus.RECEIVED, LetterStatus.REJECTED}),
    LetterStatus.RECEIVED: frozenset({LetterStatus.READY_FOR_PAYMENT, LetterStatus.REJECTED}),
    LetterStatus.READY_FOR_PAYMENT: frozenset({LetterStatus.CLOSED, LetterStatus.REJECTED}),
    LetterStatus.CLOSED: frozenset(),
    LetterStatus.REJECTED: frozenset(),
}

# Forward order of the happy path, used for "X or later" guards.
STATUS_ORDER: tuple[LetterStatus, ...] = (
    LetterStatus.AWAITING_APPROVAL,
    LetterStatus.APPROVED,
    LetterStatus.SHIPPED,
    LetterStatus.RECEIVED,
    LetterStatus.READY_FOR_PAYMENT,
    LetterStatus.CLOSED,
)


def is_terminal(status: LetterStatus) -> bool:
    """Return True if no further action may be applied in this status."""
    return status in TERMINAL_STATUSES


def is_valid_transition(current: LetterStatus, new: LetterStatus) -> bool:
    """Return True if current -> new is an edge of the status graph."""
    return new in STATUS_TRANSITIONS.get(current, frozenset())


def validate_transition(current: LetterStatus, new: LetterStatus) -> None:
    """Raise when a transition is not allowed by the status graph."""
    if not is_valid_transition(current, new):
        raise InvalidTransitionError(
            f"Invalid transition: {current.value} -> {new.value}",
            details={"current": current.value, "new": new.value},
        )


def reached(status: LetterStatus, milestone: LetterStatus) -> bool:
    """
    True if ``status`` is at or past ``milestone`` on the happy path.

    REJECTED is off the happy path and never counts as reaching anything.
    """
    if status not in STATUS_ORDER or milestone not in STATUS_ORDER:
        return False
    return STATUS_ORDER.index(status) >= STATUS_ORDER.index(milestone)


@dataclass(frozen=True)
class Bank:
    """A bank participant; referenced by persons and letters."""
    bank_id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"bank_id": self.bank_id, "name": self.name}

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Bank":
        return Bank(bank_id=data["bank_id"], name=data["name"])


@dataclass(frozen=True)
class PersonRef:
    """
    Lightweight reference to a person stored on a letter.

    Carries the bank affiliation captured when the person acted so that
    approval rules can be evaluated without another registry lookup.
    """
    person_id: str
    kind: PersonKind
    bank_id: str

    @property
    def is_bank_employee(self) -> bool:
        return self.kind == PersonKind.BANK_EMPLOYEE

    @property
    def is_customer(self) -> bool:
        return self.kind == PersonKind.CUSTOMER

    def to_dict(self) -> dict[str, Any]:
        return {"person_id": self.person_id, "kind": self.kind.value, "bank_id": self.bank_id}

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "PersonRef":
        return PersonRef(
            person_id=data["person_id"],
            kind=PersonKind(data["kind"]),
            bank_id=data["bank_id"],
        )


@dataclass(frozen=True)
class Person:
    """
    A participant who can act on a letter: a Customer or a BankEmployee.

    Both variants belong to exactly one bank. Customers additionally
    carry the company they trade on behalf of.
    """
    person_id: str
    kind: PersonKind
    name: str
    bank_id: str
    last_name: str | None = None
    company_name: str | None = None

    @property
    def display_name(self) -> str:
        if self.last_name:
            return f"{self.name} {self.last_name}"
        return self.name

    @property
    def is_bank_employee(self) -> bool:
        return self.kind == PersonKind.BANK_EMPLOYEE

    @property
    def is_customer(self) -> bool:
        return self.kind == PersonKind.CUSTOMER

    def ref(self) -> PersonRef:
        """Reference stored on letters in place of the person itself."""
        return PersonRef(person_id=self.person_id, kind=self.kind, bank_id=self.bank_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "person_id": self.person_id,
            "kind": self.kind.value,
            "name": self.name,
            "bank_id": self.bank_id,
            "last_name": self.last_name,
            "company_name": self.company_name,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Person":
        return Person(
            person_id=data["person_id"],
            kind=PersonKind(data["kind"]),
            name=data["name"],
            bank_id=data["bank_id"],
            last_name=data.get("last_name"),
            company_name=data.get("company_name"),
        )


def customer(
    person_id: str,
    name: str,
    bank_id: str,
    company_name: str | None = None,
    last_name: str | None = None,
) -> Person:
    """Build a Customer participant."""
    return Person(
        person_id=person_id,
        kind=PersonKind.CUSTOMER,
        name=name,
        bank_id=bank_id,
        last_name=last_name,
        company_name=company_name,
    )


def bank_employee(person_id: str, name: str, bank_id: str) -> Person:
    """Build a BankEmployee participant."""
    return Person(person_id=person_id, kind=PersonKind.BANK_EMPLOYEE, name=name, bank_id=bank_id)


@dataclass(frozen=True)
class Rule:
    """A single contract term of the letter."""
    rule_id: str
    rule_text: str

    def to_dict(self) -> dict[str, Any]:
        return {"rule_id": self.rule_id, "rule_text": self.rule_text}

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Rule":
        return Rule(rule_id=data["rule_id"], rule_text=data["rule_text"])


@dataclass(frozen=True)
class ProductDetails:
    """Goods covered by the letter. Set once at creation."""
    product_type: str
    quantity: int
    price_per_unit: Decimal

    def __post_init__(self) -> None:
        """Validate quantity and price."""
        if self.quantity < 0:
            raise ValueError(f"Quantity must be non-negative, got {self.quantity}")
        if self.price_per_unit < 0:
            raise ValueError(f"Price per unit must be non-negative, got {self.price_per_unit}")

    @property
    def total_value(self) -> Decimal:
        """Face value of the goods: quantity * price_per_unit."""
        return self.price_per_unit * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_type": self.product_type,
            "quantity": self.quantity,
            "price_per_unit": str(self.price_per_unit),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "ProductDetails":
        return ProductDetails(
            product_type=data["product_type"],
            quantity=int(data["quantity"]),
            price_per_unit=Decimal(str(data["price_per_unit"])),
        )


@dataclass(frozen=True)
class LetterOfCredit:
    """
    The letter of credit asset.

    ``approval`` lists the persons who approved the *current* rules, in
    the order they approved. ``evidence`` is append-only.
    """
    letter_id: str
    applicant: PersonRef
    beneficiary: PersonRef
    issuing_bank: str
    exporting_bank: str
    rules: tuple[Rule, ...]
    product_details: ProductDetails
    evidence: tuple[str, ...] = ()
    approval: tuple[PersonRef, ...] = ()
    status: LetterStatus = LetterStatus.AWAITING_APPROVAL
    close_reason: str | None = None

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    @property
    def approver_ids(self) -> list[str]:
        return [ref.person_id for ref in self.approval]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "letter_id": self.letter_id,
            "applicant": self.applicant.to_dict(),
            "beneficiary": self.beneficiary.to_dict(),
            "issuing_bank": self.issuing_bank,
            "exporting_bank": self.exporting_bank,
            "rules": [rule.to_dict() for rule in self.rules],
            "product_details": self.product_details.to_dict(),
            "evidence": list(self.evidence),
            "approval": [ref.to_dict() for ref in self.approval],
            "status": self.status.value,
            "close_reason": self.close_reason,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "LetterOfCredit":
        """Create a letter from its dictionary form."""
        return LetterOfCredit(
            letter_id=data["letter_id"],
            applicant=PersonRef.from_dict(data["applicant"]),
            beneficiary=PersonRef.from_dict(data["beneficiary"]),
            issuing_bank=data["issuing_bank"],
            exporting_bank=data["exporting_bank"],
            rules=tuple(Rule.from_dict(r) for r in data.get("rules", [])),
            product_details=ProductDetails.from_dict(data["product_details"]),
            evidence=tuple(data.get("evidence", [])),
            approval=tuple(PersonRef.from_dict(a) for a in data.get("approval", [])),
            status=LetterStatus(data.get("status", LetterStatus.AWAITING_APPROVAL.value)),
            close_reason=data.get("close_reason"),
        )
