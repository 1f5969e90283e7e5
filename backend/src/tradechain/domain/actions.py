"""
Actions submitted against letters of credit.

Each action is addressed to one letter and names the acting persons by
identifier; the service resolves them before invoking the engine.
"""

from dataclasses import dataclass
from enum import Enum

from .models import ProductDetails, Rule


class ActionType(str, Enum):
    INITIAL_APPLICATION = "InitialApplication"
    APPROVE = "Approve"
    REJECT = "Reject"
    SUGGEST_CHANGES = "SuggestChanges"
    SHIP_PRODUCT = "ShipProduct"
    RECEIVE_PRODUCT = "ReceiveProduct"
    READY_FOR_PAYMENT = "ReadyForPayment"
    CLOSE = "Close"


@dataclass(frozen=True)
class InitialApplication:
    letter_id: str
    applicant_id: str
    beneficiary_id: str
    rules: tuple[Rule, ...]
    product_details: ProductDetails
    action_type = ActionType.INITIAL_APPLICATION


@dataclass(frozen=True)
class Approve:
    letter_id: str
    approving_party_id: str
    action_type = ActionType.APPROVE


@dataclass(frozen=True)
class Reject:
    letter_id: str
    close_reason: str
    action_type = ActionType.REJECT


@dataclass(frozen=True)
class SuggestChanges:
    letter_id: str
    rules: tuple[Rule, ...]
    suggesting_party_id: str
    action_type = ActionType.SUGGEST_CHANGES


@dataclass(frozen=True)
class ShipProduct:
    letter_id: str
    evidence: str
    action_type = ActionType.SHIP_PRODUCT


@dataclass(frozen=True)
class ReceiveProduct:
    letter_id: str
    action_type = ActionType.RECEIVE_PRODUCT


@dataclass(frozen=True)
class ReadyForPayment:
    letter_id: str
    action_type = ActionType.READY_FOR_PAYMENT


@dataclass(frozen=True)
class Close:
    letter_id: str
    close_reason: str
    action_type = ActionType.CLOSE


Action = (
    InitialApplication
    | Approve
    | Reject
    | SuggestChanges
    | ShipProduct
    | ReceiveProduct
    | ReadyForPayment
    | Close
)
