# tests/test_recorder.py
"""
Tests for ledger.commands.record_transaction.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.core.exceptions import ValidationError

from ledger.commands import record_transaction
from ledger.exceptions import (
    AccountNotFoundError,
    DuplicatePostingError,
    InvalidPostingError,
    PersistenceError,
)
from ledger.models import CompanySequence, Transaction, TransactionLine
from ledger.queries import find_unbalanced_transactions
from ledger.write_barrier import command_writes_allowed


def _record(company, chart, **overrides):
    kwargs = dict(
        description="Invoice INV-1 - Customer billing",
        amount=Decimal("100.00"),
        currency="USD",
        source="invoice",
        source_id=1,
        source_reference="INV-1",
        debit_account=chart["120"],
        credit_account=chart["400"],
        company=company,
    )
    kwargs.update(overrides)
    return record_transaction(**kwargs)


@pytest.mark.django_db
class TestRecordTransaction:
    def test_writes_header_and_two_balanced_lines(self, company, chart, user):
        txn = _record(company, chart, created_by=user)

        assert txn.pk is not None
        assert txn.total_amount == Decimal("100.00")
        assert txn.status == Transaction.Status.POSTED
        assert txn.reconciled is False
        assert txn.reconciled_at is None
        assert txn.created_by == user

        lines = list(txn.lines.order_by("line_no"))
        assert len(lines) == 2
        debit, credit = lines
        assert debit.account == chart["120"]
        assert (debit.debit_amount, debit.credit_amount) == (Decimal("100.00"), Decimal("0.00"))
        assert debit.is_debit and not credit.is_debit
        assert credit.account == chart["400"]
        assert (credit.debit_amount, credit.credit_amount) == (Decimal("0.00"), Decimal("100.00"))
        assert txn.is_balanced
        assert debit.description == "INVOICE - Invoice INV-1 - Customer billing"

    def test_accepts_account_primary_keys(self, company, chart):
        txn = _record(
            company,
            chart,
            debit_account=chart["110"].pk,
            credit_account=chart["120"].pk,
            source="payment",
        )
        assert txn.debit_account == chart["110"]
        assert txn.credit_account == chart["120"]

    def test_unknown_account_pk_raises_not_found(self, company, chart):
        with pytest.raises(AccountNotFoundError):
            _record(company, chart, debit_account=999999)
        assert Transaction.objects.count() == 0

    def test_malformed_account_pk_raises_not_found(self, company, chart):
        with pytest.raises(AccountNotFoundError):
            _record(company, chart, credit_account="abc")
        assert Transaction.objects.count() == 0

    def test_amount_is_quantized_to_cents(self, company, chart):
        txn = _record(company, chart, amount="10.005")
        assert txn.total_amount == Decimal("10.01")
        assert txn.total_debit == txn.total_credit == Decimal("10.01")

    def test_zero_amount_is_recorded_with_warning(self, company, chart, app_logs):
        with app_logs.at_level("WARNING", logger="ledger.commands"):
            txn = _record(company, chart, amount=Decimal("0"))
        assert txn.total_amount == Decimal("0.00")
        assert [line.is_debit for line in txn.lines.order_by("line_no")] == [True, False]
        assert txn.lines.count() == 2
        assert "zero-amount" in app_logs.text

    def test_currency_falls_back_to_company_default(self, company, chart):
        company.default_currency = "GBP"
        company.save()
        txn = _record(company, chart, currency="")
        assert txn.currency == "GBP"

    def test_posting_logs_info(self, company, chart, app_logs):
        with app_logs.at_level("INFO", logger="ledger.commands"):
            txn = _record(company, chart)
        record = next(r for r in app_logs.records if r.getMessage() == "Recorded transaction")
        assert record.transaction_number == txn.transaction_number
        assert record.source == "invoice"


@pytest.mark.django_db
class TestRecorderPreconditions:
    def test_negative_amount_rejected_before_any_write(self, company, chart):
        with pytest.raises(InvalidPostingError):
            _record(company, chart, amount=Decimal("-1.00"))
        assert Transaction.objects.count() == 0
        assert CompanySequence.objects.count() == 0

    def test_non_numeric_amount_rejected(self, company, chart):
        with pytest.raises(InvalidPostingError):
            _record(company, chart, amount="abc")

    def test_same_account_on_both_sides_rejected(self, company, chart):
        with pytest.raises(InvalidPostingError, match="must differ"):
            _record(company, chart, debit_account=chart["110"], credit_account=chart["110"])
        assert Transaction.objects.count() == 0

    def test_account_of_another_company_rejected(self, company, chart, second_company, second_chart):
        with pytest.raises(InvalidPostingError, match="does not belong"):
            _record(company, chart, credit_account=second_chart["400"])
        assert Transaction.objects.count() == 0

    def test_unknown_source_rejected(self, company, chart):
        with pytest.raises(InvalidPostingError, match="Unknown transaction source"):
            _record(company, chart, source="journal")


@pytest.mark.django_db
class TestRecorderAtomicity:
    def test_line_insert_failure_leaves_no_header(self, company, chart):
        with patch.object(
            TransactionLine.objects,
            "bulk_create",
            side_effect=DatabaseError("disk full"),
        ):
            with pytest.raises(PersistenceError) as excinfo:
                _record(company, chart)

        assert excinfo.value.transaction_number.startswith("TXN-")
        assert Transaction.objects.count() == 0
        assert TransactionLine.objects.count() == 0

    def test_failed_posting_does_not_consume_a_number(self, company, chart):
        with patch.object(
            TransactionLine.objects,
            "bulk_create",
            side_effect=DatabaseError("disk full"),
        ):
            with pytest.raises(PersistenceError) as excinfo:
                _record(company, chart)

        txn = _record(company, chart)
        assert txn.transaction_number == excinfo.value.transaction_number

    def test_duplicate_source_document_raises(self, company, chart):
        first = _record(company, chart)
        with pytest.raises(DuplicatePostingError):
            _record(company, chart)

        assert Transaction.objects.filter(source="invoice", source_id=1).get() == first
        assert TransactionLine.objects.count() == 2
        assert not find_unbalanced_transactions(company).exists()


@pytest.mark.django_db
class TestAppendOnly:
    def test_direct_save_outside_commands_raises(self, company, chart):
        txn = _record(company, chart)
        txn.description = "edited"
        with pytest.raises(RuntimeError, match="command-owned"):
            txn.save()

    def test_header_fields_immutable_even_in_command_context(self, company, chart):
        txn = _record(company, chart)
        txn.total_amount = Decimal("1.00")
        with command_writes_allowed():
            with pytest.raises(ValidationError):
                txn.save()

    def test_delete_is_refused(self, company, chart):
        txn = _record(company, chart)
        with pytest.raises(RuntimeError):
            txn.delete()
        with pytest.raises(RuntimeError):
            Transaction.objects.filter(pk=txn.pk).delete()
        with pytest.raises(RuntimeError):
            txn.lines.first().delete()

    def test_bulk_create_outside_commands_raises(self, company, chart):
        with pytest.raises(RuntimeError, match="command_writes_allowed"):
            CompanySequence.objects.bulk_create([CompanySequence(company=company, name="x")])

    def test_ledger_account_cannot_be_deleted(self, chart):
        with pytest.raises(RuntimeError, match="never deleted"):
            chart["110"].delete()
