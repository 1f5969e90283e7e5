"""
Letter of credit transition engine.

One pure function per action. Each takes the current letter (plus the
action and any resolved participants) and returns a TransitionResult
holding the next letter and the domain event, or raises a
LetterOfCreditError naming the rule that was violated.

No side effects, no I/O. Loading the letter, resolving participants,
persisting the result and publishing the event belong to the caller.

Every handler except InitialApplication first runs the shared terminal
guard: CLOSED and REJECTED letters reject every action with
AlreadyClosedError.
"""

from dataclasses import dataclass, replace

from .actions import (
    Approve,
    Close,
    InitialApplication,
    ReadyForPayment,
    ReceiveProduct,
    Reject,
    ShipProduct,
    SuggestChanges,
)
from .approval import (
    DEFAULT_APPROVAL_POLICY,
    ApprovalPolicy,
    bank_already_approved,
    person_already_approved,
)
from .errors import (
    AlreadyApprovedError,
    AlreadyClosedError,
    AlreadyReadyError,
    AlreadyReceivedError,
    AlreadyShippedError,
    BankAlreadyApprovedError,
    DuplicateLetterIdError,
    InvalidParticipantError,
    NotFullyApprovedError,
    NotReadyToCloseError,
    NotYetReceivedError,
    NotYetShippedError,
)
from .events import (
    ApproveEvent,
    CloseEvent,
    InitialApplicationEvent,
    LetterEvent,
    ReadyForPaymentEvent,
    ReceiveProductEvent,
    RejectEvent,
    ShipProductEvent,
    SuggestChangesEvent,
)
from .models import (
    LetterOfCredit,
    LetterStatus,
    Person,
    reached,
    validate_transition,
)


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a successful action: the next letter and its event."""
    letter: LetterOfCredit
    event: LetterEvent


def ensure_open(letter: LetterOfCredit) -> None:
    """
    Shared guard for every action on an existing letter.

    Rejection is treated as a closed state.
    """
    if letter.status in (LetterStatus.CLOSED, LetterStatus.REJECTED):
        raise AlreadyClosedError(details={"letter_id": letter.letter_id, "status": letter.status.value})


def _move(letter: LetterOfCredit, new_status: LetterStatus, **changes) -> LetterOfCredit:
    """Return a copy of ``letter`` in ``new_status``, checked against the graph."""
    validate_transition(letter.status, new_status)
    return replace(letter, status=new_status, **changes)


def initial_application(
    existing: LetterOfCredit | None,
    action: InitialApplication,
    applicant: Person,
    beneficiary: Person,
) -> TransitionResult:
    """
    Create a new letter of credit.

    The issuing and exporting banks are derived from the applicant's and
    beneficiary's bank. The applicant is recorded as the first approver.

    Args:
        existing: The letter currently stored under ``action.letter_id``, if any
        action: The application payload
        applicant: Resolved applicant participant
        beneficiary: Resolved beneficiary participant

    Raises:
        DuplicateLetterIdError: If the letter id is already in use
        InvalidParticipantError: If applicant or beneficiary is not a customer,
            or both name the same person
    """
    if existing is not None:
        raise DuplicateLetterIdError(details={"letter_id": action.letter_id})

    for role, person in (("applicant", applicant), ("beneficiary", beneficiary)):
        if not person.is_customer:
            raise InvalidParticipantError(
                f"The {role} must be a customer",
                details={"role": role, "person_id": person.person_id, "kind": person.kind.value},
            )

    if applicant.person_id == beneficiary.person_id:
        raise InvalidParticipantError(
            "The applicant and beneficiary must be different customers",
            details={"person_id": applicant.person_id},
        )

    letter = LetterOfCredit(
        letter_id=action.letter_id,
        applicant=applicant.ref(),
        beneficiary=beneficiary.ref(),
        issuing_bank=applicant.bank_id,
        exporting_bank=beneficiary.bank_id,
        rules=tuple(action.rules),
        product_details=action.product_details,
        evidence=(),
        approval=(applicant.ref(),),
        status=LetterStatus.AWAITING_APPROVAL,
    )
    return TransitionResult(letter, InitialApplicationEvent(letter_id=letter.letter_id, letter=letter))


def approve(
    letter: LetterOfCredit,
    action: Approve,
    approving_party: Person,
    policy: ApprovalPolicy = DEFAULT_APPROVAL_POLICY,
) -> TransitionResult:
    """
    Record an approval of the current rules.

    A letter awaiting approval is promoted to APPROVED as soon as the
    approval policy is satisfied. Approvals recorded after that point
    never move the status.
    """
    ensure_open(letter)

    if person_already_approved(letter, approving_party):
        raise AlreadyApprovedError(details={"person_id": approving_party.person_id})

    if bank_already_approved(letter, approving_party):
        raise BankAlreadyApprovedError(details={"bank_id": approving_party.bank_id})

    ref = approving_party.ref()
    updated = replace(letter, approval=letter.approval + (ref,))

    if updated.status == LetterStatus.AWAITING_APPROVAL and policy.is_satisfied(updated):
        updated = _move(updated, LetterStatus.APPROVED)

    return TransitionResult(updated, ApproveEvent(letter_id=letter.letter_id, approving_party=ref))


def reject(letter: LetterOfCredit, action: Reject) -> TransitionResult:
    """Reject the letter from any non-terminal status."""
    ensure_open(letter)

    updated = _move(letter, LetterStatus.REJECTED, close_reason=action.close_reason)
    return TransitionResult(
        updated,
        RejectEvent(letter_id=letter.letter_id, close_reason=action.close_reason),
    )


def suggest_changes(
    letter: LetterOfCredit,
    action: SuggestChanges,
    suggesting_party: Person,
) -> TransitionResult:
    """
    Replace the rules wholesale and restart approval.

    The suggesting party becomes the sole approver of the new rules.
    The status is left unchanged. Not allowed once the product has shipped.
    """
    ensure_open(letter)

    if reached(letter.status, LetterStatus.SHIPPED):
        raise AlreadyShippedError(details={"status": letter.status.value})

    ref = suggesting_party.ref()
    updated = replace(letter, rules=tuple(action.rules), approval=(ref,))
    return TransitionResult(
        updated,
        SuggestChangesEvent(letter_id=letter.letter_id, rules=updated.rules, suggesting_party=ref),
    )


def ship_product(letter: LetterOfCredit, action: ShipProduct) -> TransitionResult:
    """Append shipment evidence and mark the letter SHIPPED."""
    ensure_open(letter)

    if letter.status == LetterStatus.AWAITING_APPROVAL:
        raise NotFullyApprovedError(details={"status": letter.status.value})

    if reached(letter.status, LetterStatus.SHIPPED):
        raise AlreadyShippedError(details={"status": letter.status.value})

    updated = _move(letter, LetterStatus.SHIPPED, evidence=letter.evidence + (action.evidence,))
    return TransitionResult(updated, ShipProductEvent(letter_id=letter.letter_id, evidence=action.evidence))


def receive_product(letter: LetterOfCredit, action: ReceiveProduct) -> TransitionResult:
    """Confirm receipt of shipped goods."""
    ensure_open(letter)

    if reached(letter.status, LetterStatus.RECEIVED):
        raise AlreadyReceivedError(details={"status": letter.status.value})

    if letter.status != LetterStatus.SHIPPED:
        raise NotYetShippedError(details={"status": letter.status.value})

    updated = _move(letter, LetterStatus.RECEIVED)
    return TransitionResult(updated, ReceiveProductEvent(letter_id=letter.letter_id))


def ready_for_payment(letter: LetterOfCredit, action: ReadyForPayment) -> TransitionResult:
    """Mark received goods as ready for payment."""
    ensure_open(letter)

    if letter.status == LetterStatus.READY_FOR_PAYMENT:
        raise AlreadyReadyError(details={"status": letter.status.value})

    if letter.status != LetterStatus.RECEIVED:
        raise NotYetReceivedError(details={"status": letter.status.value})

    updated = _move(letter, LetterStatus.READY_FOR_PAYMENT)
    return TransitionResult(updated, ReadyForPaymentEvent(letter_id=letter.letter_id))


def close(letter: LetterOfCredit, action: Close) -> TransitionResult:
    """Close a letter whose payment is ready."""
    ensure_open(letter)

    if letter.status != LetterStatus.READY_FOR_PAYMENT:
        raise NotReadyToCloseError(details={"status": letter.status.value})

    updated = _move(letter, LetterStatus.CLOSED, close_reason=action.close_reason)
    return TransitionResult(
        updated,
        CloseEvent(letter_id=letter.letter_id, close_reason=action.close_reason),
    )
