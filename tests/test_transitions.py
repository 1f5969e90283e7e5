"""
Tests for the letter of credit transition engine.

Every handler is pure: the input letter must never change, whether the
action succeeds or fails.
"""

from dataclasses import replace

import pytest

from tradechain.domain import transitions
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
from tradechain.domain.errors import (
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
from tradechain.domain.events import (
    ApproveEvent,
    CloseEvent,
    InitialApplicationEvent,
    ReadyForPaymentEvent,
    ReceiveProductEvent,
    RejectEvent,
    ShipProductEvent,
    SuggestChangesEvent,
)
from tradechain.domain.models import LetterStatus

from .conftest import LETTER_ID


# =============================================================================
# InitialApplication
# =============================================================================

def test_initial_application_creates_letter(wapo, peniel, rules, product_details):
    action = InitialApplication(
        letter_id="newLetter",
        applicant_id="wapo",
        beneficiary_id="peniel",
        rules=rules,
        product_details=product_details,
    )

    result = transitions.initial_application(None, action, wapo, peniel)
    letter = result.letter

    assert letter.letter_id == "newLetter"
    assert letter.applicant == wapo.ref()
    assert letter.beneficiary == peniel.ref()
    assert letter.issuing_bank == "VIB"
    assert letter.exporting_bank == "SEA"
    assert letter.rules == rules
    assert letter.product_details == product_details
    assert letter.evidence == ()
    assert letter.approval == (wapo.ref(),)
    assert letter.status == LetterStatus.AWAITING_APPROVAL
    assert isinstance(result.event, InitialApplicationEvent)
    assert result.event.letter == letter


def test_initial_application_rejects_duplicate_id(letter, wapo, peniel, rules, product_details):
    action = InitialApplication(LETTER_ID, "wapo", "peniel", rules, product_details)

    with pytest.raises(DuplicateLetterIdError):
        transitions.initial_application(letter, action, wapo, peniel)


def test_initial_application_requires_customers(wapo, emma, rules, product_details):
    action = InitialApplication("L9", "wapo", "emma", rules, product_details)

    with pytest.raises(InvalidParticipantError):
        transitions.initial_application(None, action, wapo, emma)


def test_initial_application_requires_distinct_parties(wapo, rules, product_details):
    action = InitialApplication("L9", "wapo", "wapo", rules, product_details)

    with pytest.raises(InvalidParticipantError) as exc_info:
        transitions.initial_application(None, action, wapo, wapo)

    assert exc_info.value.details == {"person_id": "wapo"}


# =============================================================================
# Approve
# =============================================================================

def test_approve_appends_party(letter, emma):
    result = transitions.approve(letter, Approve(LETTER_ID, "emma"), emma)

    assert result.letter.approval == (letter.approval[0], emma.ref())
    assert result.letter.status == LetterStatus.AWAITING_APPROVAL
    assert result.event == ApproveEvent(letter_id=LETTER_ID, approving_party=emma.ref())


def test_same_person_cannot_approve_twice(letter, wapo):
    with pytest.raises(AlreadyApprovedError) as exc_info:
        transitions.approve(letter, Approve(LETTER_ID, "wapo"), wapo)

    assert str(exc_info.value).startswith("This person has already approved this letter of credit")


def test_second_employee_of_same_bank_cannot_approve(letter, trevor, emma):
    approved = transitions.approve(letter, Approve(LETTER_ID, "trevor"), trevor).letter

    with pytest.raises(BankAlreadyApprovedError) as exc_info:
        transitions.approve(approved, Approve(LETTER_ID, "emma"), emma)

    assert exc_info.value.message == "Your bank has already approved of this request"


def test_fourth_approval_marks_letter_approved(letter, emma, kokou, peniel):
    three = replace(letter, approval=letter.approval + (emma.ref(), kokou.ref()))

    result = transitions.approve(three, Approve(LETTER_ID, "peniel"), peniel)

    assert [ref.person_id for ref in result.letter.approval] == ["wapo", "emma", "kokou", "peniel"]
    assert result.letter.status == LetterStatus.APPROVED


def test_approval_after_suggested_changes_keeps_status(letter_in, wapo, emma):
    # suggest_changes on an approved letter resets approvals but not status
    approved = replace(letter_in(LetterStatus.APPROVED), approval=(wapo.ref(),))

    result = transitions.approve(approved, Approve(LETTER_ID, "emma"), emma)

    assert result.letter.status == LetterStatus.APPROVED


# =============================================================================
# Reject
# =============================================================================

def test_reject_before_full_approval(letter):
    result = transitions.reject(letter, Reject(LETTER_ID, "testing the Reject transaction"))

    assert result.letter.status == LetterStatus.REJECTED
    assert result.letter.close_reason == "testing the Reject transaction"
    assert isinstance(result.event, RejectEvent)


@pytest.mark.parametrize(
    "status",
    [LetterStatus.APPROVED, LetterStatus.SHIPPED, LetterStatus.RECEIVED, LetterStatus.READY_FOR_PAYMENT],
)
def test_reject_from_any_open_status(letter_in, status):
    result = transitions.reject(letter_in(status), Reject(LETTER_ID, "buyer withdrew"))

    assert result.letter.status == LetterStatus.REJECTED


# =============================================================================
# SuggestChanges
# =============================================================================

def test_suggest_changes_replaces_rules_and_resets_approval(letter, emma, new_rules):
    action = SuggestChanges(LETTER_ID, new_rules, "emma")

    result = transitions.suggest_changes(letter, action, emma)

    assert result.letter.rules == new_rules
    assert result.letter.approval == (emma.ref(),)
    assert result.letter.status == letter.status
    assert result.event == SuggestChangesEvent(
        letter_id=LETTER_ID,
        rules=new_rules,
        suggesting_party=emma.ref(),
    )


@pytest.mark.parametrize(
    "status",
    [LetterStatus.SHIPPED, LetterStatus.RECEIVED, LetterStatus.READY_FOR_PAYMENT],
)
def test_suggest_changes_after_shipping(letter_in, emma, new_rules, status):
    with pytest.raises(AlreadyShippedError):
        transitions.suggest_changes(letter_in(status), SuggestChanges(LETTER_ID, new_rules, "emma"), emma)


# =============================================================================
# ShipProduct
# =============================================================================

def test_ship_requires_full_approval(letter):
    with pytest.raises(NotFullyApprovedError):
        transitions.ship_product(letter, ShipProduct(LETTER_ID, "asdfghjk"))


def test_ship_approved_letter(letter_in):
    result = transitions.ship_product(letter_in(LetterStatus.APPROVED), ShipProduct(LETTER_ID, "doc1"))

    assert result.letter.status == LetterStatus.SHIPPED
    assert result.letter.evidence == ("doc1",)
    assert result.event == ShipProductEvent(letter_id=LETTER_ID, evidence="doc1")


def test_ship_appends_to_existing_evidence(letter_in):
    approved = letter_in(LetterStatus.APPROVED, evidence=("inspection-cert",))

    result = transitions.ship_product(approved, ShipProduct(LETTER_ID, "bill-of-lading"))

    assert result.letter.evidence == ("inspection-cert", "bill-of-lading")


def test_ship_twice_fails(letter_in):
    shipped = transitions.ship_product(letter_in(LetterStatus.APPROVED), ShipProduct(LETTER_ID, "doc1")).letter

    with pytest.raises(AlreadyShippedError):
        transitions.ship_product(shipped, ShipProduct(LETTER_ID, "doc1"))

    assert shipped.evidence == ("doc1",)


# =============================================================================
# ReceiveProduct
# =============================================================================

@pytest.mark.parametrize("status", [LetterStatus.AWAITING_APPROVAL, LetterStatus.APPROVED])
def test_receive_before_shipping(letter_in, status):
    with pytest.raises(NotYetShippedError):
        transitions.receive_product(letter_in(status), ReceiveProduct(LETTER_ID))


def test_receive_shipped_letter(letter_in):
    result = transitions.receive_product(letter_in(LetterStatus.SHIPPED), ReceiveProduct(LETTER_ID))

    assert result.letter.status == LetterStatus.RECEIVED
    assert isinstance(result.event, ReceiveProductEvent)


@pytest.mark.parametrize("status", [LetterStatus.RECEIVED, LetterStatus.READY_FOR_PAYMENT])
def test_receive_twice_fails(letter_in, status):
    with pytest.raises(AlreadyReceivedError):
        transitions.receive_product(letter_in(status), ReceiveProduct(LETTER_ID))


# =============================================================================
# ReadyForPayment
# =============================================================================

def test_ready_for_payment_before_receipt(letter):
    with pytest.raises(NotYetReceivedError) as exc_info:
        transitions.ready_for_payment(letter, ReadyForPayment(LETTER_ID))

    assert "payment cannot be made until" in exc_info.value.message


def test_ready_for_payment_after_receipt(letter_in):
    result = transitions.ready_for_payment(letter_in(LetterStatus.RECEIVED), ReadyForPayment(LETTER_ID))

    assert result.letter.status == LetterStatus.READY_FOR_PAYMENT
    assert isinstance(result.event, ReadyForPaymentEvent)


def test_ready_for_payment_twice(letter_in):
    with pytest.raises(AlreadyReadyError) as exc_info:
        transitions.ready_for_payment(letter_in(LetterStatus.READY_FOR_PAYMENT), ReadyForPayment(LETTER_ID))

    assert exc_info.value.message == "The payment has already been made"


# =============================================================================
# Close
# =============================================================================

def test_close_before_payment_ready(letter):
    with pytest.raises(NotReadyToCloseError):
        transitions.close(letter, Close(LETTER_ID, "testing the Close transaction"))


def test_close_then_approve_fails(letter_in, wapo):
    closed = transitions.close(letter_in(LetterStatus.READY_FOR_PAYMENT), Close(LETTER_ID, "paid")).letter

    assert closed.status == LetterStatus.CLOSED
    assert closed.close_reason == "paid"

    with pytest.raises(AlreadyClosedError):
        transitions.approve(closed, Approve(LETTER_ID, "wapo"), wapo)


def test_close_event(letter_in):
    result = transitions.close(letter_in(LetterStatus.READY_FOR_PAYMENT), Close(LETTER_ID, "paid"))

    assert result.event == CloseEvent(letter_id=LETTER_ID, close_reason="paid")


# =============================================================================
# Terminal guard
# =============================================================================

def _every_action(emma, new_rules):
    return [
        lambda l: transitions.approve(l, Approve(LETTER_ID, "emma"), emma),
        lambda l: transitions.reject(l, Reject(LETTER_ID, "again")),
        lambda l: transitions.suggest_changes(l, SuggestChanges(LETTER_ID, new_rules, "emma"), emma),
        lambda l: transitions.ship_product(l, ShipProduct(LETTER_ID, "doc")),
        lambda l: transitions.receive_product(l, ReceiveProduct(LETTER_ID)),
        lambda l: transitions.ready_for_payment(l, ReadyForPayment(LETTER_ID)),
        lambda l: transitions.close(l, Close(LETTER_ID, "again")),
    ]


@pytest.mark.parametrize("status", [LetterStatus.CLOSED, LetterStatus.REJECTED])
def test_terminal_letters_reject_every_action(letter, emma, new_rules, status):
    terminal = replace(letter, status=status, close_reason="done")
    snapshot = terminal.to_dict()

    for apply in _every_action(emma, new_rules):
        with pytest.raises(AlreadyClosedError) as exc_info:
            apply(terminal)
        assert exc_info.value.message == "This letter of credit has already been closed"

    assert terminal.to_dict() == snapshot


# =============================================================================
# Whole lifecycle
# =============================================================================

def test_full_lifecycle(wapo, peniel, emma, kokou, trevor, rules, product_details):
    letter = transitions.initial_application(
        None,
        InitialApplication("L1", "wapo", "peniel", rules, product_details),
        wapo,
        peniel,
    ).letter

    letter = transitions.approve(letter, Approve("L1", "emma"), emma).letter
    assert letter.approver_ids == ["wapo", "emma"]

    with pytest.raises(BankAlreadyApprovedError):
        transitions.approve(letter, Approve("L1", "trevor"), trevor)

    letter = transitions.approve(letter, Approve("L1", "kokou"), kokou).letter
    assert letter.status == LetterStatus.AWAITING_APPROVAL

    letter = transitions.approve(letter, Approve("L1", "peniel"), peniel).letter
    assert letter.status == LetterStatus.APPROVED

    letter = transitions.ship_product(letter, ShipProduct("L1", "doc1")).letter
    letter = transitions.receive_product(letter, ReceiveProduct("L1")).letter
    letter = transitions.ready_for_payment(letter, ReadyForPayment("L1")).letter
    letter = transitions.close(letter, Close("L1", "paid")).letter

    assert letter.status == LetterStatus.CLOSED
    assert letter.evidence == ("doc1",)
    assert letter.close_reason == "paid"
