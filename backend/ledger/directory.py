# ledger/directory.py
"""
Ledger account directory: per-company lookup of accounts by code.

Adapters resolve both sides of a posting here before anything is written,
so a company with an incomplete chart fails fast with a
ChartOfAccountsError instead of leaving half a posting behind.
"""

import logging

from django.db import transaction

from ledger.chart import DEFAULT_CHART
from ledger.exceptions import AccountNotFoundError, InactiveAccountError
from ledger.models import LedgerAccount
from ledger.policies import can_post_to_account


logger = logging.getLogger(__name__)


def find_account_by_code(company, code: str) -> LedgerAccount:
    """
    Return the company's account with ``code``.

    Raises:
        AccountNotFoundError: no such code in the company's chart
    """
    try:
        return LedgerAccount.objects.get(company=company, code=code)
    except LedgerAccount.DoesNotExist:
        raise AccountNotFoundError(code, company_id=company.id)


def find_account_by_id(company, account_id) -> LedgerAccount:
    try:
        return LedgerAccount.objects.get(company=company, pk=account_id)
    except (LedgerAccount.DoesNotExist, ValueError, TypeError):
        raise AccountNotFoundError(account_id, company_id=company.id)


def resolve_account_pair(company, debit_code: str, credit_code: str):
    """
    Resolve the debit and credit accounts of a posting.

    Both codes are looked up before either is used. Inactive accounts are
    rejected with InactiveAccountError.

    Returns:
        (debit_account, credit_account)
    """
    debit_account = find_account_by_code(company, debit_code)
    credit_account = find_account_by_code(company, credit_code)

    for account in (debit_account, credit_account):
        allowed, _reason = can_post_to_account(account)
        if not allowed:
            raise InactiveAccountError(account.code, company_id=company.id)

    return debit_account, credit_account


@transaction.atomic
def seed_chart_of_accounts(company) -> list[LedgerAccount]:
    """
    Install the default account codes for a company.

    Existing codes are left untouched, so the call can be repeated.
    Returns the accounts that were created.
    """
    created = []
    for code, name, account_type, description in DEFAULT_CHART:
        account, was_created = LedgerAccount.objects.get_or_create(
            company=company,
            code=code,
            defaults={
                "name": name,
                "account_type": account_type,
                "description": description,
            },
        )
        if was_created:
            created.append(account)

    if created:
        logger.info(
            "Seeded chart of accounts",
            extra={
                "company_id": company.id,
                "codes": [account.code for account in created],
            },
        )
    return created
