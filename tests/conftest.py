"""
Shared fixtures: two banks, two trading customers and their bank employees.

    VIB (Vietnam International Bank)  SEA (SeaBank)
      wapo   - customer, applicant      peniel - customer, beneficiary
      emma   - employee                 kokou  - employee
      trevor - employee
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from tradechain.domain.models import (
    Bank,
    LetterOfCredit,
    LetterStatus,
    ProductDetails,
    Rule,
    bank_employee,
    customer,
)

LETTER_ID = "L123"


@pytest.fixture
def vib():
    return Bank(bank_id="VIB", name="Vietnam International Bank")


@pytest.fixture
def sea():
    return Bank(bank_id="SEA", name="SeaBank")


@pytest.fixture
def wapo():
    return customer("wapo", "Solim", "VIB", company_name="NAT'S Company", last_name="MAYABA")


@pytest.fixture
def peniel():
    return customer("peniel", "Peniel", "SEA", company_name="KtxDreams Inc.", last_name="Winchester")


@pytest.fixture
def emma():
    return bank_employee("emma", "Emma Gnofam", "VIB")


@pytest.fixture
def kokou():
    return bank_employee("kokou", "Kokou Abalo", "SEA")


@pytest.fixture
def trevor():
    return bank_employee("trevor", "Trevor", "VIB")


@pytest.fixture
def rules():
    return (
        Rule(rule_id="rule1", rule_text="This is a test rule"),
        Rule(rule_id="rule2", rule_text="This is another test rule"),
    )


@pytest.fixture
def new_rules():
    return (
        Rule(rule_id="newRule1", rule_text="This is an updated test rule"),
        Rule(rule_id="newRule2", rule_text="This is another updated test rule"),
    )


@pytest.fixture
def product_details():
    return ProductDetails(product_type="Computers", quantity=100, price_per_unit=Decimal("250"))


@pytest.fixture
def letter(wapo, peniel, rules, product_details):
    """A freshly applied letter: awaiting approval, applicant approved."""
    return LetterOfCredit(
        letter_id=LETTER_ID,
        applicant=wapo.ref(),
        beneficiary=peniel.ref(),
        issuing_bank=wapo.bank_id,
        exporting_bank=peniel.bank_id,
        rules=rules,
        product_details=product_details,
        evidence=(),
        approval=(wapo.ref(),),
        status=LetterStatus.AWAITING_APPROVAL,
    )


@pytest.fixture
def all_approvals(wapo, emma, kokou, peniel):
    return (wapo.ref(), emma.ref(), kokou.ref(), peniel.ref())


@pytest.fixture
def letter_in(letter, all_approvals):
    """Factory for a fully approved letter moved to the given status."""
    def _make(status: LetterStatus, **changes) -> LetterOfCredit:
        return replace(letter, approval=all_approvals, status=status, **changes)
    return _make
