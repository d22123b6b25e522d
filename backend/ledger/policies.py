# ledger/policies.py
"""
Business policy functions for ledger postings.

Policies answer: "Is this posting allowed?" They do NOT write anything;
the recorder composes them and raises on the first failure.

Each policy returns a (bool, reason) tuple.
"""

from decimal import Decimal

from ledger.models import Transaction


def check_tenant_boundary(company, entity) -> bool:
    """Verify entity belongs to the given company."""
    entity_company_id = getattr(entity, "company_id", None)
    if entity_company_id is None:
        entity_company = getattr(entity, "company", None)
        entity_company_id = getattr(entity_company, "id", None) if entity_company else None
    return entity_company_id == company.id


def can_post_to_account(account) -> tuple[bool, str]:
    """
    Check if lines can be posted to this account.

    Rules:
    - Cannot post to inactive accounts
    """
    if not account.is_active:
        return False, f"Cannot post to inactive account: {account.code}"
    return True, ""


def can_post_amount(amount: Decimal) -> tuple[bool, str]:
    if amount < 0:
        return False, f"Transaction amount must not be negative (got {amount})."
    return True, ""


def can_post_account_pair(company, debit_account, credit_account) -> tuple[bool, str]:
    """
    Rules:
    - Debit and credit must be different accounts
    - Both accounts must belong to the posting company
    """
    if debit_account.pk == credit_account.pk:
        return False, f"Debit and credit account must differ (both are {debit_account.code})."

    for account in (debit_account, credit_account):
        if not check_tenant_boundary(company, account):
            return False, f"Account {account.code} does not belong to company {company.id}."

    return True, ""


def can_post_source(source: str) -> tuple[bool, str]:
    if source not in Transaction.Source.values:
        return False, f"Unknown transaction source: {source!r}"
    return True, ""


def can_reconcile(company, txn) -> tuple[bool, str]:
    if company is not None and not check_tenant_boundary(company, txn):
        return False, "Cross-company action denied."
    return True, ""
