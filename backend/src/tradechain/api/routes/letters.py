"""
Letter of credit endpoints.

One endpoint per workflow action plus read access to letters and their
event history. Rule violations surface as JSON errors through the
application's exception handlers.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from tradechain.api.dependencies import get_event_store, get_letter_service
from tradechain.api.schemas import (
    ApproveRequest,
    CloseRequest,
    ErrorResponse,
    InitialApplicationRequest,
    LetterEventResponse,
    LetterResponse,
    RejectRequest,
    ShipProductRequest,
    SuggestChangesRequest,
)
from tradechain.domain.actions import (
    Approve,
    Close,
    InitialApplication,
    ReadyForPayment,
    ReceiveProduct,
    Reject,
    ShipProduct,
    SuggestChanges,
)
from tradechain.domain.models import LetterStatus
from tradechain.services.events import EventStore
from tradechain.services.letters import LetterOfCreditService

router = APIRouter(prefix="/letters", tags=["letters"])

Service = Annotated[LetterOfCreditService, Depends(get_letter_service)]

RULE_ERRORS = {
    404: {"model": ErrorResponse, "description": "Letter or participant not found"},
    409: {"model": ErrorResponse, "description": "Action not allowed in the letter's current state"},
}


@router.post(
    "",
    response_model=LetterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Applicant or beneficiary not found"},
        409: {"model": ErrorResponse, "description": "Letter id already in use"},
        422: {"model": ErrorResponse, "description": "Applicant or beneficiary is not a customer"},
    },
)
async def initial_application(request: InitialApplicationRequest, service: Service) -> LetterResponse:
    """
    Open a new letter of credit.

    The applicant is recorded as the first approver and the issuing and
    exporting banks are taken from the two customers.
    """
    letter = await service.submit(
        InitialApplication(
            letter_id=request.letter_id,
            applicant_id=request.applicant,
            beneficiary_id=request.beneficiary,
            rules=tuple(rule.to_domain() for rule in request.rules),
            product_details=request.product_details.to_domain(),
        )
    )
    return LetterResponse.from_domain(letter)


@router.get("", response_model=list[LetterResponse])
async def list_letters(
    service: Service,
    status_filter: Annotated[LetterStatus | None, Query(alias="status")] = None,
) -> list[LetterResponse]:
    letters = await service.list_letters(status_filter)
    return [LetterResponse.from_domain(letter) for letter in letters]


@router.get("/{letter_id}", response_model=LetterResponse, responses={404: {"model": ErrorResponse}})
async def get_letter(letter_id: str, service: Service) -> LetterResponse:
    return LetterResponse.from_domain(await service.get_letter(letter_id))


@router.get(
    "/{letter_id}/events",
    response_model=list[LetterEventResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_letter_events(
    letter_id: str,
    service: Service,
    store: Annotated[EventStore, Depends(get_event_store)],
) -> list[LetterEventResponse]:
    """Domain events recorded for a letter, oldest first."""
    await service.get_letter(letter_id)
    return [LetterEventResponse(**event) for event in await store.history(letter_id)]


@router.post("/{letter_id}/approve", response_model=LetterResponse, responses=RULE_ERRORS)
async def approve(letter_id: str, request: ApproveRequest, service: Service) -> LetterResponse:
    letter = await service.submit(Approve(letter_id=letter_id, approving_party_id=request.approving_party))
    return LetterResponse.from_domain(letter)


@router.post("/{letter_id}/reject", response_model=LetterResponse, responses=RULE_ERRORS)
async def reject(letter_id: str, request: RejectRequest, service: Service) -> LetterResponse:
    letter = await service.submit(Reject(letter_id=letter_id, close_reason=request.close_reason))
    return LetterResponse.from_domain(letter)


@router.post("/{letter_id}/suggest-changes", response_model=LetterResponse, responses=RULE_ERRORS)
async def suggest_changes(letter_id: str, request: SuggestChangesRequest, service: Service) -> LetterResponse:
    letter = await service.submit(
        SuggestChanges(
            letter_id=letter_id,
            rules=tuple(rule.to_domain() for rule in request.rules),
            suggesting_party_id=request.suggesting_party,
        )
    )
    return LetterResponse.from_domain(letter)


@router.post("/{letter_id}/ship", response_model=LetterResponse, responses=RULE_ERRORS)
async def ship_product(letter_id: str, request: ShipProductRequest, service: Service) -> LetterResponse:
    letter = await service.submit(ShipProduct(letter_id=letter_id, evidence=request.evidence))
    return LetterResponse.from_domain(letter)


@router.post("/{letter_id}/receive", response_model=LetterResponse, responses=RULE_ERRORS)
async def receive_product(letter_id: str, service: Service) -> LetterResponse:
    letter = await service.submit(ReceiveProduct(letter_id=letter_id))
    return LetterResponse.from_domain(letter)


@router.post("/{letter_id}/ready-for-payment", response_model=LetterResponse, responses=RULE_ERRORS)
async def ready_for_payment(letter_id: str, service: Service) -> LetterResponse:
    letter = await service.submit(ReadyForPayment(letter_id=letter_id))
    return LetterResponse.from_domain(letter)


@router.post("/{letter_id}/close", response_model=LetterResponse, responses=RULE_ERRORS)
async def close(letter_id: str, request: CloseRequest, service: Service) -> LetterResponse:
    letter = await service.submit(Close(letter_id=letter_id, close_reason=request.close_reason))
    return LetterResponse.from_domain(letter)
