# finance/models.py
"""
Financial documents that trigger ledger postings.

Each document belongs to one company and carries a number unique within
it. Documents never hold a foreign key to their ledger transaction; the
link is the transaction's (source, source_id) pair.
"""

from decimal import Decimal
import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from accounts.models import Company


class FinanceDocument(models.Model):
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="%(class)ss",
    )
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    currency = models.CharField(max_length=3, default="USD")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
        db_constraint=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Invoice(FinanceDocument):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        SENT = "sent", "Sent"
        PAID = "paid", "Paid"
        OVERDUE = "overdue", "Overdue"
        CANCELLED = "cancelled", "Cancelled"

    invoice_number = models.CharField(max_length=50)
    customer_name = models.CharField(max_length=255)
    issue_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)
    total_amount = models.DecimalField(max_digits=18, decimal_places=2)
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.SENT)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "invoice_number"],
                name="uniq_invoice_number_per_company",
            ),
        ]
        ordering = ["-issue_date", "-id"]

    def __str__(self):
        return self.invoice_number


class Bill(FinanceDocument):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        PAID = "paid", "Paid"
        CANCELLED = "cancelled", "Cancelled"

    bill_number = models.CharField(max_length=50)
    vendor_name = models.CharField(max_length=255)
    bill_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)
    total_amount = models.DecimalField(max_digits=18, decimal_places=2)
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.PENDING)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "bill_number"],
                name="uniq_bill_number_per_company",
            ),
        ]
        ordering = ["-bill_date", "-id"]

    def __str__(self):
        return self.bill_number


class Payment(FinanceDocument):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"
        REFUNDED = "refunded", "Refunded"

    class Method(models.TextChoices):
        CASH = "cash", "Cash"
        CHECK = "check", "Check"
        CREDIT_CARD = "credit_card", "Credit Card"
        BANK_TRANSFER = "bank_transfer", "Bank Transfer"

    payment_number = models.CharField(max_length=50)
    invoice = models.ForeignKey(
        Invoice,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="payments",
    )
    payment_date = models.DateField(default=timezone.localdate)
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=Method.choices, default=Method.BANK_TRANSFER)
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.COMPLETED)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "payment_number"],
                name="uniq_payment_number_per_company",
            ),
        ]
        ordering = ["-payment_date", "-id"]

    def __str__(self):
        return self.payment_number


class CreditNote(FinanceDocument):
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        APPLIED = "applied", "Applied"
        VOID = "void", "Void"

    credit_note_number = models.CharField(max_length=50)
    invoice = models.ForeignKey(
        Invoice,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="credit_notes",
    )
    issue_date = models.DateField(default=timezone.localdate)
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    reason = models.TextField(blank=True, default="")
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.ACTIVE)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "credit_note_number"],
                name="uniq_credit_note_number_per_company",
            ),
        ]
        ordering = ["-issue_date", "-id"]

    def __str__(self):
        return self.credit_note_number


class Expense(FinanceDocument):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"
        PAID = "paid", "Paid"

    expense_number = models.CharField(max_length=50)
    description = models.CharField(max_length=255)
    expense_date = models.DateField(default=timezone.localdate)
    amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    reference = models.CharField(max_length=100, blank=True, default="")
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.APPROVED)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "expense_number"],
                name="uniq_expense_number_per_company",
            ),
        ]
        ordering = ["-expense_date", "-id"]

    def __str__(self):
        return self.expense_number
