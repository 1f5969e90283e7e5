"""
Participant registration endpoints.

Banks must be registered before the customers and employees that
belong to them.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from tradechain.api.dependencies import get_letter_service
from tradechain.api.schemas import (
    BankResponse,
    CreateBankRequest,
    CreateCustomerRequest,
    CreateEmployeeRequest,
    ErrorResponse,
    PersonResponse,
)
from tradechain.domain.models import bank_employee, customer
from tradechain.services.letters import LetterOfCreditService

router = APIRouter(prefix="/participants", tags=["participants"])

Service = Annotated[LetterOfCreditService, Depends(get_letter_service)]


@router.post(
    "/banks",
    response_model=BankResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "Bank id already registered"}},
)
async def create_bank(request: CreateBankRequest, service: Service) -> BankResponse:
    bank = await service.register_bank(request.to_domain())
    return BankResponse.from_domain(bank)


@router.get(
    "/banks/{bank_id}",
    response_model=BankResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_bank(bank_id: str, service: Service) -> BankResponse:
    bank = await service.participants.get_bank(bank_id)
    return BankResponse.from_domain(bank)


@router.post(
    "/customers",
    response_model=PersonResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Bank not found"},
        409: {"model": ErrorResponse, "description": "Person id already registered"},
    },
)
async def create_customer(request: CreateCustomerRequest, service: Service) -> PersonResponse:
    person = customer(
        person_id=request.person_id,
        name=request.name,
        bank_id=request.bank_id,
        company_name=request.company_name,
        last_name=request.last_name,
    )
    await service.register_person(person)
    return PersonResponse.from_domain(person)


@router.post(
    "/employees",
    response_model=PersonResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Bank not found"},
        409: {"model": ErrorResponse, "description": "Person id already registered"},
    },
)
async def create_employee(request: CreateEmployeeRequest, service: Service) -> PersonResponse:
    person = bank_employee(person_id=request.person_id, name=request.name, bank_id=request.bank_id)
    await service.register_person(person)
    return PersonResponse.from_domain(person)


@router.get(
    "/persons/{person_id}",
    response_model=PersonResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_person(person_id: str, service: Service) -> PersonResponse:
    person = await service.participants.get_person(person_id)
    return PersonResponse.from_domain(person)
