# ledger/models.py
"""
Ledger models for Corebook.

- LedgerAccount: per-company chart of accounts (never deleted, only deactivated)
- CompanySequence: per-company counters used to number transactions
- Transaction: header of one balanced financial event (append-only)
- TransactionLine: one side of the double entry (exactly two per transaction)

Transaction, TransactionLine and CompanySequence are command-owned: rows are
written only inside ``command_writes_allowed()`` (see ledger/commands.py).
Transactions are never deleted; the only mutation after insert is
reconciliation.
"""

from decimal import Decimal
import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q, Sum
from django.utils import timezone

from accounts.models import Company
from ledger.write_barrier import write_context_allowed


class LedgerWriteQuerySet(models.QuerySet):
    """QuerySet that refuses bulk writes outside the command layer."""

    def bulk_create(self, objs, *args, **kwargs):
        if not write_context_allowed({"command"}):
            raise RuntimeError(
                f"{self.model.__name__} is command-owned ledger data. "
                "bulk_create is only allowed within command_writes_allowed()."
            )
        return super().bulk_create(objs, *args, **kwargs)

    def update(self, **kwargs):
        if not write_context_allowed({"command"}):
            raise RuntimeError(
                f"{self.model.__name__} is command-owned ledger data. "
                "update is only allowed within command_writes_allowed()."
            )
        return super().update(**kwargs)

    def delete(self):
        raise RuntimeError(f"{self.model.__name__} rows are append-only and cannot be deleted.")


class LedgerWriteManager(models.Manager.from_queryset(LedgerWriteQuerySet)):
    pass


class CompanySequence(models.Model):
    """
    Per-company counters for sequential identifiers.

    Commands lock the row with select_for_update while allocating, so two
    postings for the same company and name never receive the same value.
    """

    objects = LedgerWriteManager()

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="sequences",
    )
    name = models.CharField(max_length=100)
    next_value = models.BigIntegerField(default=1)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "name"],
                name="uniq_company_sequence_name",
            ),
        ]

    def __str__(self):
        return f"{self.company_id}:{self.name}={self.next_value}"

    def save(self, *args, **kwargs):
        if not write_context_allowed({"command"}):
            raise RuntimeError(
                "CompanySequence is a command-owned write model. "
                "Direct saves are only allowed within command_writes_allowed()."
            )
        super().save(*args, **kwargs)


class LedgerAccount(models.Model):
    """
    Chart of Accounts entry.

    The running balance is not stored: it is computed on read from
    transaction lines (see get_balance). ``opening_balance`` carries the
    figure the account was set up with.
    """

    class AccountType(models.TextChoices):
        ASSET = "ASSET", "Asset"
        LIABILITY = "LIABILITY", "Liability"
        EQUITY = "EQUITY", "Equity"
        REVENUE = "REVENUE", "Revenue"
        EXPENSE = "EXPENSE", "Expense"

    class NormalBalance(models.TextChoices):
        DEBIT = "DEBIT", "Debit"
        CREDIT = "CREDIT", "Credit"

    NORMAL_BALANCE_MAP = {
        AccountType.ASSET: NormalBalance.DEBIT,
        AccountType.LIABILITY: NormalBalance.CREDIT,
        AccountType.EQUITY: NormalBalance.CREDIT,
        AccountType.REVENUE: NormalBalance.CREDIT,
        AccountType.EXPENSE: NormalBalance.DEBIT,
    }

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="ledger_accounts",
    )

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
    )

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=255)

    account_type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
    )

    normal_balance = models.CharField(
        max_length=10,
        choices=NormalBalance.choices,
        editable=False,
    )

    is_active = models.BooleanField(default=True)

    opening_balance = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    description = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "code"],
                name="uniq_ledger_account_code_per_company",
            )
        ]
        ordering = ["code"]
        indexes = [
            models.Index(fields=["company", "account_type"], name="idx_ledger_account_type"),
            models.Index(fields=["company", "is_active"], name="idx_ledger_account_active"),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        self.normal_balance = self.NORMAL_BALANCE_MAP.get(
            self.account_type,
            self.NormalBalance.DEBIT,
        )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError(
            "Ledger accounts are never deleted. Use deactivate_ledger_account instead."
        )

    @property
    def is_debit_normal(self) -> bool:
        return self.normal_balance == self.NormalBalance.DEBIT

    def get_balance(self, as_of=None) -> Decimal:
        """Opening balance plus every posted movement up to ``as_of`` (inclusive)."""
        from ledger.queries import account_balances

        rows = account_balances(self.company, as_of=as_of, accounts=[self.pk])
        if not rows:
            return self.opening_balance
        return rows[0]["balance"]


class Transaction(models.Model):
    """
    Header of one balanced financial event.

    Created exactly once per source document by the recorder; afterwards
    only the reconciliation fields may change.
    """

    class Source(models.TextChoices):
        INVOICE = "invoice", "Invoice"
        PAYMENT = "payment", "Payment"
        EXPENSE = "expense", "Expense"
        BILL = "bill", "Bill"
        CREDIT = "credit", "Credit"
        CREDIT_NOTE = "credit_note", "Credit Note"

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        POSTED = "posted", "Posted"
        REVERSED = "reversed", "Reversed"

    RECONCILIATION_FIELDS = frozenset({
        "reconciled",
        "reconciled_at",
        "reconciled_by",
        "updated_at",
    })

    objects = LedgerWriteManager()

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="ledger_transactions",
    )

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
    )

    transaction_number = models.CharField(max_length=30)
    date = models.DateField(default=timezone.localdate)
    description = models.TextField()
    reference = models.CharField(max_length=100, blank=True, default="")

    total_amount = models.DecimalField(max_digits=18, decimal_places=2)
    currency = models.CharField(max_length=3, default="USD")

    status = models.CharField(
        max_length=12,
        choices=Status.choices,
        default=Status.POSTED,
    )

    # Source document tracking (not a foreign key: documents live in other modules)
    source = models.CharField(max_length=20, choices=Source.choices)
    source_id = models.PositiveBigIntegerField()
    source_reference = models.CharField(max_length=100, blank=True, default="")

    debit_account = models.ForeignKey(
        LedgerAccount,
        on_delete=models.PROTECT,
        related_name="debit_transactions",
    )
    credit_account = models.ForeignKey(
        LedgerAccount,
        on_delete=models.PROTECT,
        related_name="credit_transactions",
    )

    reconciled = models.BooleanField(default=False)
    reconciled_at = models.DateTimeField(null=True, blank=True)
    reconciled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="reconciled_ledger_transactions",
        db_constraint=False,
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="created_ledger_transactions",
        db_constraint=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "transaction_number"],
                name="uniq_transaction_number_per_company",
            ),
            models.UniqueConstraint(
                fields=["company", "source", "source_id"],
                name="uniq_transaction_source_document",
            ),
            models.CheckConstraint(
                condition=Q(total_amount__gte=0),
                name="chk_transaction_amount_non_negative",
            ),
            models.CheckConstraint(
                condition=~Q(debit_account=F("credit_account")),
                name="chk_transaction_distinct_accounts",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "date", "id"], name="idx_transaction_trail"),
            models.Index(fields=["company", "source"], name="idx_transaction_source"),
            models.Index(fields=["company", "reconciled"], name="idx_transaction_reconciled"),
        ]
        ordering = ["-date", "-id"]

    def __str__(self):
        return f"{self.transaction_number} ({self.source} {self.total_amount} {self.currency})"

    def save(self, *args, **kwargs):
        if not write_context_allowed({"command"}):
            raise RuntimeError(
                "Transaction is command-owned ledger data. Use ledger.commands to record "
                "or reconcile transactions."
            )
        if not self._state.adding:
            update_fields = kwargs.get("update_fields")
            if update_fields is None or not set(update_fields) <= self.RECONCILIATION_FIELDS:
                raise ValidationError(
                    "Posted transactions are immutable except for reconciliation fields."
                )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("Transactions are append-only and cannot be deleted.")

    @property
    def total_debit(self) -> Decimal:
        return self.lines.aggregate(total=Sum("debit_amount"))["total"] or Decimal("0.00")

    @property
    def total_credit(self) -> Decimal:
        return self.lines.aggregate(total=Sum("credit_amount"))["total"] or Decimal("0.00")

    @property
    def is_balanced(self) -> bool:
        """Debits equal credits equal the header amount."""
        return self.total_debit == self.total_credit == self.total_amount


class TransactionLine(models.Model):
    """
    One side of a transaction: either a debit or a credit against one account.
    """

    objects = LedgerWriteManager()

    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="ledger_transaction_lines",
    )

    line_no = models.PositiveSmallIntegerField()

    account = models.ForeignKey(
        LedgerAccount,
        on_delete=models.PROTECT,
        related_name="transaction_lines",
    )

    debit_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    description = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["transaction", "line_no"]
        constraints = [
            models.UniqueConstraint(
                fields=["transaction", "line_no"],
                name="uniq_transaction_line_no",
            ),
            models.CheckConstraint(
                condition=Q(debit_amount__gte=0) & Q(credit_amount__gte=0),
                name="chk_transaction_line_non_negative",
            ),
            models.CheckConstraint(
                condition=~(Q(debit_amount__gt=0) & Q(credit_amount__gt=0)),
                name="chk_transaction_line_one_side",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "account"], name="idx_transaction_line_account"),
        ]

    def __str__(self):
        return f"{self.transaction_id} L{self.line_no}"

    def save(self, *args, **kwargs):
        if not write_context_allowed({"command"}):
            raise RuntimeError(
                "TransactionLine is command-owned ledger data. "
                "Lines are written only by ledger.commands.record_transaction."
            )
        if not self._state.adding:
            raise ValidationError("Transaction lines cannot be changed once recorded.")
        if self.transaction_id and self.transaction.company_id != self.company_id:
            raise ValidationError("TransactionLine company must match transaction company.")
        if self.account_id and self.account.company_id != self.company_id:
            raise ValidationError("TransactionLine company must match account company.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("Transaction lines are append-only and cannot be deleted.")

    @property
    def amount(self) -> Decimal:
        return self.debit_amount if self.debit_amount > 0 else self.credit_amount

    @property
    def is_debit(self) -> bool:
        if self.debit_amount or self.credit_amount:
            return self.debit_amount > 0
        # Zero-amount postings: line 1 is the debit line.
        return self.line_no == 1
