"""
Letter of credit service.

Invokes the transition engine on behalf of callers:
1. Load the letter from the registry
2. Resolve the acting participants
3. Apply the matching pure handler
4. Persist the new letter
5. Publish the domain event

This is the primary interface for submitting actions.

Read-modify-write of a single letter, including publication of its event,
is serialized with a per-letter asyncio lock; different letters proceed
concurrently. A lock lives only while some caller holds or awaits it. Domain rule
failures propagate to the caller unchanged and are never retried.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from tradechain.domain import transitions
from tradechain.domain.actions import (
    Action,
    Approve,
    Close,
    InitialApplication,
    ReadyForPayment,
    ReceiveProduct,
    Reject,
    ShipProduct,
    SuggestChanges,
)
from tradechain.domain.approval import DEFAULT_APPROVAL_POLICY, ApprovalPolicy
from tradechain.domain.errors import LetterOfCreditError
from tradechain.domain.models import Bank, LetterOfCredit, LetterStatus, Person
from tradechain.domain.transitions import TransitionResult
from tradechain.infrastructure.registry import LetterRegistry, ParticipantRegistry

from .events import EventSink

logger = logging.getLogger(__name__)


@dataclass
class _LetterLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class LetterOfCreditService:
    """
    Applies actions to letters of credit and records the outcome.

    Usage:
        service = LetterOfCreditService(letters, participants, sink)
        letter = await service.submit(Approve(letter_id="L1", approving_party_id="emma"))
    """

    def __init__(
        self,
        letters: LetterRegistry,
        participants: ParticipantRegistry,
        events: EventSink,
        policy: ApprovalPolicy = DEFAULT_APPROVAL_POLICY,
    ) -> None:
        self.letters = letters
        self.participants = participants
        self.events = events
        self.policy = policy
        self._locks: dict[str, _LetterLock] = {}

        self._handlers: dict[type, Callable[[Action], Awaitable[TransitionResult]]] = {
            InitialApplication: self._initial_application,
            Approve: self._approve,
            Reject: self._reject,
            SuggestChanges: self._suggest_changes,
            ShipProduct: self._ship_product,
            ReceiveProduct: self._receive_product,
            ReadyForPayment: self._ready_for_payment,
            Close: self._close,
        }

    # -------------------------------------------------------------------------
    # Participants
    # -------------------------------------------------------------------------

    async def register_bank(self, bank: Bank) -> Bank:
        await self.participants.add_bank(bank)
        logger.info(f"Registered bank {bank.bank_id} ({bank.name})")
        return bank

    async def register_person(self, person: Person) -> Person:
        await self.participants.add_person(person)
        logger.info(f"Registered {person.kind.value} {person.person_id} at bank {person.bank_id}")
        return person

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def get_letter(self, letter_id: str) -> LetterOfCredit:
        return await self.letters.get(letter_id)

    async def list_letters(self, status: LetterStatus | None = None) -> list[LetterOfCredit]:
        return await self.letters.list_letters(status)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def submit(self, action: Action) -> LetterOfCredit:
        """
        Apply an action and return the updated letter.

        The new letter is persisted and its event published while the
        letter's lock is held, so event history follows state order.

        Raises:
            LetterOfCreditError: Any domain rule failure or lookup miss
        """
        handler = self._handlers.get(type(action))
        if handler is None:
            raise TypeError(f"Unsupported action: {type(action).__name__}")

        async with self._letter_lock(action.letter_id):
            try:
                result = await handler(action)
            except LetterOfCreditError as e:
                logger.warning(
                    f"{action.action_type.value} rejected for letter {action.letter_id}: "
                    f"[{e.code}] {e.message}"
                )
                raise

            await self.letters.put(result.letter)
            logger.info(
                f"{action.action_type.value} applied to letter {action.letter_id}: "
                f"status={result.letter.status.value}"
            )
            await self.events.publish(result.event)

        return result.letter

    @asynccontextmanager
    async def _letter_lock(self, letter_id: str) -> AsyncIterator[None]:
        """Hold the lock for one letter, discarding it once nobody uses it."""
        entry = self._locks.get(letter_id)
        if entry is None:
            entry = self._locks[letter_id] = _LetterLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[letter_id]

    async def _initial_application(self, action: InitialApplication) -> TransitionResult:
        existing = await self.letters.find(action.letter_id)
        applicant = await self.participants.get_person(action.applicant_id)
        beneficiary = await self.participants.get_person(action.beneficiary_id)
        return transitions.initial_application(existing, action, applicant, beneficiary)

    async def _approve(self, action: Approve) -> TransitionResult:
        letter = await self.letters.get(action.letter_id)
        party = await self.participants.get_person(action.approving_party_id)
        return transitions.approve(letter, action, party, self.policy)

    async def _reject(self, action: Reject) -> TransitionResult:
        letter = await self.letters.get(action.letter_id)
        return transitions.reject(letter, action)

    async def _suggest_changes(self, action: SuggestChanges) -> TransitionResult:
        letter = await self.letters.get(action.letter_id)
        party = await self.participants.get_person(action.suggesting_party_id)
        return transitions.suggest_changes(letter, action, party)

    async def _ship_product(self, action: ShipProduct) -> TransitionResult:
        letter = await self.letters.get(action.letter_id)
        return transitions.ship_product(letter, action)

    async def _receive_product(self, action: ReceiveProduct) -> TransitionResult:
        letter = await self.letters.get(action.letter_id)
        return transitions.receive_product(letter, action)

    async def _ready_for_payment(self, action: ReadyForPayment) -> TransitionResult:
        letter = await self.letters.get(action.letter_id)
        return transitions.ready_for_payment(letter, action)

    async def _close(self, action: Close) -> TransitionResult:
        letter = await self.letters.get(action.letter_id)
        return transitions.close(letter, action)
