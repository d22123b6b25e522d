# ledger/sequences.py
"""
Per-company transaction numbering.

Numbers look like ``TXN-2024-000001``: the posting year followed by a
six-digit counter that restarts every year. The counter lives in a
CompanySequence row named ``transaction_number:<year>`` and is locked with
SELECT ... FOR UPDATE until the enclosing database transaction ends, so two
postings for the same company never read the same value.

A value handed out inside a transaction that later rolls back is released
with it; committed numbers are never handed out again.
"""

from django.db import IntegrityError, transaction
from django.utils import timezone

from ledger.models import CompanySequence
from ledger.write_barrier import command_writes_allowed


TRANSACTION_NUMBER_PREFIX = "TXN"


def sequence_name_for_year(year: int) -> str:
    return f"transaction_number:{year}"


def format_transaction_number(year: int, value: int) -> str:
    return f"{TRANSACTION_NUMBER_PREFIX}-{year:04d}-{value:06d}"


def _next_company_sequence(company, name: str) -> int:
    """
    Allocate the next sequence value for a company/name pair.
    Uses select_for_update to avoid concurrent duplicates.
    """
    with command_writes_allowed():
        try:
            seq = CompanySequence.objects.select_for_update().get(
                company=company,
                name=name,
            )
        except CompanySequence.DoesNotExist:
            try:
                # Savepoint so a lost creation race does not poison the outer transaction.
                with transaction.atomic():
                    seq = CompanySequence.objects.create(
                        company=company,
                        name=name,
                        next_value=1,
                    )
            except IntegrityError:
                seq = CompanySequence.objects.select_for_update().get(
                    company=company,
                    name=name,
                )

        value = seq.next_value
        seq.next_value = value + 1
        seq.save(update_fields=["next_value", "updated_at"])
        return value


def next_transaction_number(company, on=None) -> str:
    """
    Return the next transaction number for ``company``.

    ``on`` is the posting date; its year selects the counter. Defaults to
    today. Must be called inside a database transaction for the lock to
    hold until the header is inserted.
    """
    year = (on or timezone.localdate()).year
    value = _next_company_sequence(company, sequence_name_for_year(year))
    return format_transaction_number(year, value)
