"""
Registries for letters of credit and participants.

These are the lookup and persistence collaborators of the transition
engine. The engine never calls them; the service loads a letter,
applies a handler and puts the returned letter back.

Design Decisions:
- Abstract interfaces so the service is independent of the backend
- In-memory backend for development and tests
- SQLAlchemy backend for durable storage
- Letters are stored and returned as immutable domain objects, so no
  caller can mutate a stored record through an alias
"""

import logging
from abc import ABC, abstractmethod

from sqlalchemy import select

from tradechain.domain.errors import (
    DuplicateParticipantError,
    LetterNotFoundError,
    ParticipantNotFoundError,
)
from tradechain.domain.models import (
    Bank,
    LetterOfCredit,
    LetterStatus,
    Person,
    PersonKind,
    PersonRef,
    ProductDetails,
    Rule,
)

from .database import BankRecord, Database, LetterRecord, PersonRecord

logger = logging.getLogger(__name__)


class LetterRegistry(ABC):
    """Abstract interface for letter of credit storage."""

    @abstractmethod
    async def get(self, letter_id: str) -> LetterOfCredit:
        """Return the letter or raise LetterNotFoundError."""
        pass

    @abstractmethod
    async def find(self, letter_id: str) -> LetterOfCredit | None:
        """Return the letter, or None if no letter has this id."""
        pass

    @abstractmethod
    async def put(self, letter: LetterOfCredit) -> None:
        """Insert or replace a letter."""
        pass

    @abstractmethod
    async def list_letters(self, status: LetterStatus | None = None) -> list[LetterOfCredit]:
        """All letters, optionally filtered by status, ordered by id."""
        pass

    async def exists(self, letter_id: str) -> bool:
        return await self.find(letter_id) is not None


class ParticipantRegistry(ABC):
    """Abstract interface for bank and person storage."""

    @abstractmethod
    async def add_bank(self, bank: Bank) -> None:
        pass

    @abstractmethod
    async def get_bank(self, bank_id: str) -> Bank:
        pass

    @abstractmethod
    async def add_person(self, person: Person) -> None:
        """Register a customer or employee. Their bank must already exist."""
        pass

    @abstractmethod
    async def get_person(self, person_id: str) -> Person:
        pass


# =============================================================================
# In-memory backend
# =============================================================================

class InMemoryLetterRegistry(LetterRegistry):
    """Dictionary-backed letter storage."""

    def __init__(self) -> None:
        self._letters: dict[str, LetterOfCredit] = {}

    async def get(self, letter_id: str) -> LetterOfCredit:
        letter = self._letters.get(letter_id)
        if letter is None:
            raise LetterNotFoundError(details={"letter_id": letter_id})
        return letter

    async def find(self, letter_id: str) -> LetterOfCredit | None:
        return self._letters.get(letter_id)

    async def put(self, letter: LetterOfCredit) -> None:
        self._letters[letter.letter_id] = letter

    async def list_letters(self, status: LetterStatus | None = None) -> list[LetterOfCredit]:
        letters = sorted(self._letters.values(), key=lambda l: l.letter_id)
        if status is not None:
            letters = [l for l in letters if l.status == status]
        return letters


class InMemoryParticipantRegistry(ParticipantRegistry):
    """Dictionary-backed participant storage."""

    def __init__(self) -> None:
        self._banks: dict[str, Bank] = {}
        self._persons: dict[str, Person] = {}

    async def add_bank(self, bank: Bank) -> None:
        if bank.bank_id in self._banks:
            raise DuplicateParticipantError(details={"bank_id": bank.bank_id})
        self._banks[bank.bank_id] = bank

    async def get_bank(self, bank_id: str) -> Bank:
        bank = self._banks.get(bank_id)
        if bank is None:
            raise ParticipantNotFoundError(f"Bank {bank_id} not found", details={"bank_id": bank_id})
        return bank

    async def add_person(self, person: Person) -> None:
        if person.person_id in self._persons:
            raise DuplicateParticipantError(details={"person_id": person.person_id})
        await self.get_bank(person.bank_id)
        self._persons[person.person_id] = person

    async def get_person(self, person_id: str) -> Person:
        person = self._persons.get(person_id)
        if person is None:
            raise ParticipantNotFoundError(
                f"Person {person_id} not found",
                details={"person_id": person_id},
            )
        return person


# =============================================================================
# SQLAlchemy backend
# =============================================================================

def letter_to_record(letter: LetterOfCredit, record: LetterRecord | None = None) -> LetterRecord:
    """Copy a domain letter onto a (new or existing) database row."""
    record = record or LetterRecord(letter_id=letter.letter_id)
    record.status = letter.status.value
    record.applicant_json = letter.applicant.to_dict()
    record.beneficiary_json = letter.beneficiary.to_dict()
    record.issuing_bank = letter.issuing_bank
    record.exporting_bank = letter.exporting_bank
    record.rules_json = [rule.to_dict() for rule in letter.rules]
    record.product_details_json = letter.product_details.to_dict()
    record.evidence_json = list(letter.evidence)
    record.approval_json = [ref.to_dict() for ref in letter.approval]
    record.close_reason = letter.close_reason
    return record


def record_to_letter(record: LetterRecord) -> LetterOfCredit:
    """Rebuild the immutable domain letter from a database row."""
    return LetterOfCredit(
        letter_id=record.letter_id,
        applicant=PersonRef.from_dict(record.applicant_json),
        beneficiary=PersonRef.from_dict(record.beneficiary_json),
        issuing_bank=record.issuing_bank,
        exporting_bank=record.exporting_bank,
        rules=tuple(Rule.from_dict(r) for r in record.rules_json or []),
        product_details=ProductDetails.from_dict(record.product_details_json),
        evidence=tuple(record.evidence_json or []),
        approval=tuple(PersonRef.from_dict(a) for a in record.approval_json or []),
        status=LetterStatus(record.status),
        close_reason=record.close_reason,
    )


class SqlLetterRegistry(LetterRegistry):
    """Letter storage backed by the ``letters_of_credit`` table."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def get(self, letter_id: str) -> LetterOfCredit:
        letter = await self.find(letter_id)
        if letter is None:
            raise LetterNotFoundError(details={"letter_id": letter_id})
        return letter

    async def find(self, letter_id: str) -> LetterOfCredit | None:
        async with self.db.session() as session:
            record = await session.get(LetterRecord, letter_id)
            return record_to_letter(record) if record is not None else None

    async def put(self, letter: LetterOfCredit) -> None:
        async with self.db.session() as session:
            record = await session.get(LetterRecord, letter.letter_id)
            if record is None:
                session.add(letter_to_record(letter))
            else:
                letter_to_record(letter, record)
            await session.commit()
        logger.debug(f"Stored letter {letter.letter_id} ({letter.status.value})")

    async def list_letters(self, status: LetterStatus | None = None) -> list[LetterOfCredit]:
        query = select(LetterRecord).order_by(LetterRecord.letter_id)
        if status is not None:
            query = query.where(LetterRecord.status == status.value)
        async with self.db.session() as session:
            result = await session.scalars(query)
            return [record_to_letter(record) for record in result.all()]


class SqlParticipantRegistry(ParticipantRegistry):
    """Participant storage backed by the ``banks`` and ``persons`` tables."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def add_bank(self, bank: Bank) -> None:
        async with self.db.session() as session:
            if await session.get(BankRecord, bank.bank_id) is not None:
                raise DuplicateParticipantError(details={"bank_id": bank.bank_id})
            session.add(BankRecord(bank_id=bank.bank_id, name=bank.name))
            await session.commit()

    async def get_bank(self, bank_id: str) -> Bank:
        async with self.db.session() as session:
            record = await session.get(BankRecord, bank_id)
        if record is None:
            raise ParticipantNotFoundError(f"Bank {bank_id} not found", details={"bank_id": bank_id})
        return Bank(bank_id=record.bank_id, name=record.name)

    async def add_person(self, person: Person) -> None:
        await self.get_bank(person.bank_id)
        async with self.db.session() as session:
            if await session.get(PersonRecord, person.person_id) is not None:
                raise DuplicateParticipantError(details={"person_id": person.person_id})
            session.add(
                PersonRecord(
                    person_id=person.person_id,
                    kind=person.kind.value,
                    name=person.name,
                    last_name=person.last_name,
                    company_name=person.company_name,
                    bank_id=person.bank_id,
                )
            )
            await session.commit()

    async def get_person(self, person_id: str) -> Person:
        async with self.db.session() as session:
            record = await session.get(PersonRecord, person_id)
        if record is None:
            raise ParticipantNotFoundError(
                f"Person {person_id} not found",
                details={"person_id": person_id},
            )
        return Person(
            person_id=record.person_id,
            kind=PersonKind(record.kind),
            name=record.name,
            bank_id=record.bank_id,
            last_name=record.last_name,
            company_name=record.company_name,
        )
