"""
Approval rules for letters of credit.

The approval record is not a separate structure - it is a derived view
over ``LetterOfCredit.approval``. Every predicate here recomputes from
scratch so that a reset by SuggestChanges can never leave a stale count.

Deduplication rules:
1. A person may approve the current rules only once
2. Only one employee per bank may approve; one authorized signer per
   institution suffices
3. Customers are exempt from rule 2 - they sign for themselves, not on
   behalf of their bank
"""

from dataclasses import dataclass
from enum import Enum

from .models import LetterOfCredit, Person, PersonKind, PersonRef


class ApproverRole(str, Enum):
    """Roles whose approval a letter may require."""
    APPLICANT = "applicant"
    BENEFICIARY = "beneficiary"
    ISSUING_BANK = "issuing_bank"
    EXPORTING_BANK = "exporting_bank"


def person_already_approved(letter: LetterOfCredit, person: Person | PersonRef) -> bool:
    """True if this person is already in the approval list."""
    return any(ref.person_id == person.person_id for ref in letter.approval)


def bank_already_approved(letter: LetterOfCredit, person: Person | PersonRef) -> bool:
    """
    True if ``person`` is a bank employee and a colleague already approved.

    Always False for customers.
    """
    if person.kind != PersonKind.BANK_EMPLOYEE:
        return False
    return any(
        ref.is_bank_employee and ref.bank_id == person.bank_id
        for ref in letter.approval
    )


def _employee_of(letter: LetterOfCredit, bank_id: str) -> bool:
    return any(ref.is_bank_employee and ref.bank_id == bank_id for ref in letter.approval)


@dataclass(frozen=True)
class ApprovalPolicy:
    """
    The set of roles that must approve before a letter is fully approved.

    The default policy requires all four roles: the applicant, the
    beneficiary, and one employee of each of the issuing and exporting
    banks. When both customers bank at the same institution a single
    employee covers both bank roles.
    """
    require_applicant: bool = True
    require_beneficiary: bool = True
    require_issuing_bank: bool = True
    require_exporting_bank: bool = True

    def missing_roles(self, letter: LetterOfCredit) -> list[ApproverRole]:
        """Roles that have not approved the current rules yet."""
        missing: list[ApproverRole] = []

        if self.require_applicant and not person_already_approved(letter, letter.applicant):
            missing.append(ApproverRole.APPLICANT)
        if self.require_beneficiary and not person_already_approved(letter, letter.beneficiary):
            missing.append(ApproverRole.BENEFICIARY)
        if self.require_issuing_bank and not _employee_of(letter, letter.issuing_bank):
            missing.append(ApproverRole.ISSUING_BANK)
        if self.require_exporting_bank and not _employee_of(letter, letter.exporting_bank):
            missing.append(ApproverRole.EXPORTING_BANK)

        return missing

    def is_satisfied(self, letter: LetterOfCredit) -> bool:
        return not self.missing_roles(letter)


DEFAULT_APPROVAL_POLICY = ApprovalPolicy()


def is_fully_approved(
    letter: LetterOfCredit,
    policy: ApprovalPolicy = DEFAULT_APPROVAL_POLICY,
) -> bool:
    """True when every role required by ``policy`` has approved."""
    return policy.is_satisfied(letter)
