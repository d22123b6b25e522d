# tests/test_sequences.py
"""
Tests for per-company transaction numbering.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import connection, connections, transaction

from ledger.commands import record_transaction
from ledger.exceptions import NumberGenerationConflict
from ledger.models import CompanySequence, Transaction
from ledger.sequences import format_transaction_number, next_transaction_number


def _post(company, chart, source_id, posting_date=None):
    return record_transaction(
        description=f"Expense {source_id}",
        amount=Decimal("10.00"),
        currency="USD",
        source="expense",
        source_id=source_id,
        source_reference=f"EXP-{source_id}",
        debit_account=chart["500"],
        credit_account=chart["110"],
        company=company,
        posting_date=posting_date,
    )


def test_format_transaction_number():
    assert format_transaction_number(2024, 1) == "TXN-2024-000001"
    assert format_transaction_number(2024, 123456) == "TXN-2024-123456"


@pytest.mark.django_db
class TestNextTransactionNumber:
    def test_numbers_increase_per_company(self, company, second_company):
        on = date(2024, 3, 1)
        with transaction.atomic():
            assert next_transaction_number(company, on=on) == "TXN-2024-000001"
            assert next_transaction_number(company, on=on) == "TXN-2024-000002"
            assert next_transaction_number(second_company, on=on) == "TXN-2024-000001"

    def test_counter_restarts_each_year(self, company):
        with transaction.atomic():
            assert next_transaction_number(company, on=date(2024, 12, 31)) == "TXN-2024-000001"
            assert next_transaction_number(company, on=date(2025, 1, 1)) == "TXN-2025-000001"

        names = set(CompanySequence.objects.filter(company=company).values_list("name", flat=True))
        assert names == {"transaction_number:2024", "transaction_number:2025"}

    def test_postings_get_sequential_numbers(self, company, chart):
        first = _post(company, chart, 1, posting_date=date(2024, 5, 1))
        second = _post(company, chart, 2, posting_date=date(2024, 5, 2))

        assert first.transaction_number == "TXN-2024-000001"
        assert second.transaction_number == "TXN-2024-000002"

    def test_number_year_follows_posting_date(self, company, chart):
        txn = _post(company, chart, 1, posting_date=date(2023, 7, 15))
        assert txn.transaction_number.startswith("TXN-2023-")
        assert txn.date == date(2023, 7, 15)


@pytest.mark.django_db
class TestNumberCollisionRetry:
    def test_collision_retries_with_fresh_number(self, company, chart):
        existing = _post(company, chart, 1, posting_date=date(2024, 1, 10))
        numbers = iter([existing.transaction_number, "TXN-2024-000777"])

        with patch(
            "ledger.commands.next_transaction_number",
            side_effect=lambda company, on=None: next(numbers),
        ):
            txn = _post(company, chart, 2, posting_date=date(2024, 1, 10))

        assert txn.transaction_number == "TXN-2024-000777"
        assert Transaction.objects.filter(company=company).count() == 2

    def test_gives_up_after_max_attempts(self, company, chart, settings):
        settings.LEDGER_NUMBER_MAX_ATTEMPTS = 2
        existing = _post(company, chart, 1, posting_date=date(2024, 1, 10))

        with patch(
            "ledger.commands.next_transaction_number",
            return_value=existing.transaction_number,
        ) as allocate:
            with pytest.raises(NumberGenerationConflict) as excinfo:
                _post(company, chart, 2, posting_date=date(2024, 1, 10))

        assert allocate.call_count == 2
        assert excinfo.value.attempts == 2
        assert Transaction.objects.filter(company=company).count() == 1


@pytest.mark.postgres
@pytest.mark.skipif(
    connection.vendor != "postgresql",
    reason="SELECT ... FOR UPDATE serialization needs PostgreSQL",
)
@pytest.mark.django_db(transaction=True)
def test_concurrent_postings_get_unique_numbers(company, chart):
    workers = 8

    def post(source_id):
        try:
            return _post(company, chart, source_id).transaction_number
        finally:
            connections.close_all()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        numbers = list(pool.map(post, range(1, workers + 1)))

    assert len(set(numbers)) == workers
    assert Transaction.objects.filter(company=company).count() == workers
