# ledger/queries.py
"""
Read side of the ledger: transaction trail, summaries and balances.

Nothing here writes. Every query is scoped to one company.
"""

from decimal import Decimal

from django.conf import settings
from django.db.models import Count, DecimalField, F, Q, Sum, Value
from django.db.models.functions import Coalesce

from ledger.models import LedgerAccount, Transaction, TransactionLine


ZERO = Decimal("0.00")


def _zero_sum(expression):
    return Coalesce(
        Sum(expression),
        Value(ZERO),
        output_field=DecimalField(max_digits=18, decimal_places=2),
    )


def query_trail(
    company,
    date_from=None,
    date_to=None,
    source=None,
    search=None,
    reconciled=None,
    limit=None,
) -> list[Transaction]:
    """
    Transaction trail for a company, newest first.

    Args:
        date_from / date_to: inclusive posting-date bounds
        source: a Transaction.Source value; "all" or None means every source
        search: case-insensitive substring of description, transaction
            number, reference or source document number
        reconciled: True/False to filter on reconciliation state
        limit: maximum rows fetched (LEDGER_TRAIL_PAGE_SIZE by default)

    The search term is applied after the capped fetch, so it narrows the
    newest ``limit`` rows rather than the whole history.
    """
    if limit is None:
        limit = settings.LEDGER_TRAIL_PAGE_SIZE

    queryset = Transaction.objects.filter(company=company).select_related(
        "debit_account",
        "credit_account",
    )

    if date_from:
        queryset = queryset.filter(date__gte=date_from)
    if date_to:
        queryset = queryset.filter(date__lte=date_to)
    if source and source != "all":
        queryset = queryset.filter(source=source)
    if reconciled is not None:
        queryset = queryset.filter(reconciled=reconciled)

    rows = list(queryset.order_by("-date", "-id")[:limit])

    if search:
        term = search.strip().lower()
        rows = [
            txn for txn in rows
            if term in txn.description.lower()
            or term in txn.transaction_number.lower()
            or term in (txn.reference or "").lower()
            or term in (txn.source_reference or "").lower()
        ]

    return rows


def transaction_summary(company, date_from=None, date_to=None) -> dict:
    """Counts and totals per source, plus reconciliation counts."""
    queryset = Transaction.objects.filter(company=company)
    if date_from:
        queryset = queryset.filter(date__gte=date_from)
    if date_to:
        queryset = queryset.filter(date__lte=date_to)

    by_source = {
        source: {"count": 0, "total": ZERO}
        for source in Transaction.Source.values
    }
    for row in queryset.order_by().values("source").annotate(
        count=Count("id"),
        total=_zero_sum("total_amount"),
    ):
        by_source[row["source"]] = {"count": row["count"], "total": row["total"]}

    totals = queryset.aggregate(
        count=Count("id"),
        total=_zero_sum("total_amount"),
        reconciled_count=Count("id", filter=Q(reconciled=True)),
    )

    return {
        "total_count": totals["count"],
        "total_amount": totals["total"],
        "reconciled_count": totals["reconciled_count"],
        "unreconciled_count": totals["count"] - totals["reconciled_count"],
        "by_source": by_source,
    }


def account_balances(company, as_of=None, accounts=None) -> list[dict]:
    """
    Computed balance of every account in the company's chart.

    balance = opening_balance + movements, signed by the account's normal
    balance (debits increase debit-normal accounts, credits increase
    credit-normal ones). Only posted transactions dated on or before
    ``as_of`` count.

    ``accounts`` optionally restricts the result to a list of account pks.
    """
    account_qs = LedgerAccount.objects.filter(company=company).order_by("code")
    if accounts is not None:
        account_qs = account_qs.filter(pk__in=accounts)

    lines = TransactionLine.objects.filter(
        company=company,
        transaction__status=Transaction.Status.POSTED,
    )
    if as_of:
        lines = lines.filter(transaction__date__lte=as_of)
    if accounts is not None:
        lines = lines.filter(account_id__in=accounts)

    movements = {
        row["account_id"]: row
        for row in lines.order_by().values("account_id").annotate(
            debit_total=_zero_sum("debit_amount"),
            credit_total=_zero_sum("credit_amount"),
        )
    }

    results = []
    for account in account_qs:
        movement = movements.get(account.pk, {})
        debit_total = movement.get("debit_total", ZERO)
        credit_total = movement.get("credit_total", ZERO)
        if account.is_debit_normal:
            balance = account.opening_balance + debit_total - credit_total
        else:
            balance = account.opening_balance + credit_total - debit_total
        results.append({
            "account": account,
            "code": account.code,
            "name": account.name,
            "account_type": account.account_type,
            "normal_balance": account.normal_balance,
            "is_active": account.is_active,
            "opening_balance": account.opening_balance,
            "debit_total": debit_total,
            "credit_total": credit_total,
            "balance": balance,
        })
    return results


def trial_balance(company, as_of=None) -> dict:
    """
    Trial balance: each account's balance placed in its debit or credit
    column, with column totals.
    """
    rows = []
    total_debit = ZERO
    total_credit = ZERO

    for row in account_balances(company, as_of=as_of):
        balance = row["balance"]
        if row["account"].is_debit_normal:
            debit, credit = (balance, ZERO) if balance >= 0 else (ZERO, -balance)
        else:
            debit, credit = (ZERO, balance) if balance >= 0 else (-balance, ZERO)

        if debit == 0 and credit == 0 and not row["is_active"]:
            continue

        total_debit += debit
        total_credit += credit
        rows.append({
            "code": row["code"],
            "name": row["name"],
            "account_type": row["account_type"],
            "debit": debit,
            "credit": credit,
        })

    return {
        "as_of": as_of,
        "rows": rows,
        "total_debit": total_debit,
        "total_credit": total_credit,
        "is_balanced": total_debit == total_credit,
    }


def find_unbalanced_transactions(company):
    """
    Transactions whose lines break the double-entry rules: not exactly two
    lines, or debit/credit totals that differ from the header amount.
    An empty result is the expected state.
    """
    return (
        Transaction.objects.filter(company=company)
        .annotate(
            line_count=Count("lines"),
            line_debit=_zero_sum("lines__debit_amount"),
            line_credit=_zero_sum("lines__credit_amount"),
        )
        .filter(
            ~Q(line_count=2)
            | ~Q(line_debit=F("total_amount"))
            | ~Q(line_credit=F("total_amount"))
        )
        .order_by("id")
    )
