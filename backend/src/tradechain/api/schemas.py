"""
Pydantic schemas for API request/response validation.

These schemas define the contract between clients and the backend.
Monetary values are exchanged as strings to avoid floating point issues.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from tradechain.domain.models import (
    Bank,
    LetterOfCredit,
    LetterStatus,
    Person,
    PersonKind,
    ProductDetails,
    Rule,
)


# =============================================================================
# Shared Schemas
# =============================================================================

class RuleSchema(BaseModel):
    """A single contract term."""
    rule_id: str = Field(..., min_length=1)
    rule_text: str

    def to_domain(self) -> Rule:
        return Rule(rule_id=self.rule_id, rule_text=self.rule_text)


class ProductDetailsSchema(BaseModel):
    """Goods covered by the letter."""
    product_type: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)
    price_per_unit: Decimal = Field(..., ge=0)

    def to_domain(self) -> ProductDetails:
        return ProductDetails(
            product_type=self.product_type,
            quantity=self.quantity,
            price_per_unit=self.price_per_unit,
        )


class PersonRefResponse(BaseModel):
    person_id: str
    kind: PersonKind
    bank_id: str


# =============================================================================
# Participant Schemas
# =============================================================================

class CreateBankRequest(BaseModel):
    bank_id: str = Field(..., min_length=1, description="Unique bank identifier, e.g. a BIC")
    name: str

    def to_domain(self) -> Bank:
        return Bank(bank_id=self.bank_id, name=self.name)


class CreateCustomerRequest(BaseModel):
    person_id: str = Field(..., min_length=1)
    name: str
    last_name: str | None = None
    company_name: str | None = None
    bank_id: str = Field(..., description="Bank the customer trades through")


class CreateEmployeeRequest(BaseModel):
    person_id: str = Field(..., min_length=1)
    name: str
    bank_id: str = Field(..., description="Bank the employee signs on behalf of")


class BankResponse(BaseModel):
    bank_id: str
    name: str

    @classmethod
    def from_domain(cls, bank: Bank) -> "BankResponse":
        return cls(bank_id=bank.bank_id, name=bank.name)


class PersonResponse(BaseModel):
    person_id: str
    kind: PersonKind
    name: str
    display_name: str
    bank_id: str
    last_name: str | None = None
    company_name: str | None = None

    @classmethod
    def from_domain(cls, person: Person) -> "PersonResponse":
        return cls(
            person_id=person.person_id,
            kind=person.kind,
            name=person.name,
            display_name=person.display_name,
            bank_id=person.bank_id,
            last_name=person.last_name,
            company_name=person.company_name,
        )


# =============================================================================
# Action Request Schemas
# =============================================================================

class InitialApplicationRequest(BaseModel):
    """Request to open a new letter of credit."""
    letter_id: str = Field(..., min_length=1)
    applicant: str = Field(..., description="Person id of the applicant customer")
    beneficiary: str = Field(..., description="Person id of the beneficiary customer")
    rules: list[RuleSchema] = Field(default_factory=list)
    product_details: ProductDetailsSchema


class ApproveRequest(BaseModel):
    approving_party: str = Field(..., description="Person id of the approver")


class RejectRequest(BaseModel):
    close_reason: str


class SuggestChangesRequest(BaseModel):
    rules: list[RuleSchema]
    suggesting_party: str = Field(..., description="Person id of the party suggesting changes")


class ShipProductRequest(BaseModel):
    evidence: str = Field(..., min_length=1, description="Shipment evidence, e.g. a bill of lading hash")


class CloseRequest(BaseModel):
    close_reason: str


# =============================================================================
# Response Schemas
# =============================================================================

class LetterResponse(BaseModel):
    """Current state of a letter of credit."""
    letter_id: str
    status: LetterStatus
    applicant: PersonRefResponse
    beneficiary: PersonRefResponse
    issuing_bank: str
    exporting_bank: str
    rules: list[RuleSchema]
    product_details: ProductDetailsSchema
    evidence: list[str]
    approval: list[PersonRefResponse]
    close_reason: str | None = None

    @classmethod
    def from_domain(cls, letter: LetterOfCredit) -> "LetterResponse":
        return cls(
            letter_id=letter.letter_id,
            status=letter.status,
            applicant=PersonRefResponse(**letter.applicant.to_dict()),
            beneficiary=PersonRefResponse(**letter.beneficiary.to_dict()),
            issuing_bank=letter.issuing_bank,
            exporting_bank=letter.exporting_bank,
            rules=[RuleSchema(rule_id=r.rule_id, rule_text=r.rule_text) for r in letter.rules],
            product_details=ProductDetailsSchema(
                product_type=letter.product_details.product_type,
                quantity=letter.product_details.quantity,
                price_per_unit=letter.product_details.price_per_unit,
            ),
            evidence=list(letter.evidence),
            approval=[PersonRefResponse(**ref.to_dict()) for ref in letter.approval],
            close_reason=letter.close_reason,
        )


class LetterEventResponse(BaseModel):
    event_type: str
    letter_id: str
    payload: dict[str, Any] = {}


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    storage: str = "memory"


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: str | None = None
    details: dict[str, Any] = {}
