# finance/commands.py
"""
Command layer for financial documents.

Each create_* command saves the document and posts it to the ledger in one
database transaction. If posting fails (for example the company's chart of
accounts lacks a required code) the ledger error propagates and the
document is rolled back with it.

Pattern:
1. Validate permissions (require)
2. Validate input (duplicate number, amount)
3. Save the document
4. Post it through ledger.adapters
5. Return CommandResult with {"document", "transaction"}
"""

from decimal import Decimal, InvalidOperation
import logging

from django.db import transaction

from accounts.authz import ActorContext, require
from ledger.adapters import (
    BILL_POSTING,
    CREDIT_NOTE_POSTING,
    EXPENSE_POSTING,
    INVOICE_POSTING,
    PAYMENT_POSTING,
    post_document_transaction,
)
from ledger.commands import CommandResult
from finance.models import Invoice


logger = logging.getLogger(__name__)


def _amount(value):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount.quantize(Decimal("0.01"))


def _create_and_post(actor: ActorContext, posting, number: str, amount, **fields) -> CommandResult:
    require(actor, "finance.create")

    model = posting.get_model()
    label = model._meta.verbose_name.title()

    number = (number or "").strip()
    if not number:
        return CommandResult.fail(f"{label} number is required.")

    if model.objects.filter(company=actor.company, **{posting.number_field: number}).exists():
        return CommandResult.fail(f"{label} '{number}' already exists.")

    amount = _amount(amount)
    if amount is None:
        return CommandResult.fail("Amount must be a non-negative number.")

    fields.setdefault("currency", actor.company.default_currency)

    with transaction.atomic():
        document = model.objects.create(
            company=actor.company,
            created_by=actor.user,
            **{posting.number_field: number, posting.amount_field: amount},
            **fields,
        )
        txn = post_document_transaction(
            posting,
            document.pk,
            actor.company,
            created_by=actor.user,
        )

    logger.info(
        "Created %s", posting.source,
        extra={
            "company_id": actor.company.id,
            "document_id": document.pk,
            "document_number": number,
            "transaction_number": txn.transaction_number,
        },
    )
    return CommandResult.ok({"document": document, "transaction": txn})


def _invoice_for(actor, invoice_id):
    require(actor, "finance.create")
    if invoice_id is None:
        return None, None
    invoice = Invoice.objects.filter(company=actor.company, pk=invoice_id).first()
    if invoice is None:
        return None, CommandResult.fail("Invoice not found.")
    return invoice, None


def create_invoice(
    actor: ActorContext,
    invoice_number: str,
    customer_name: str,
    total_amount,
    issue_date=None,
    due_date=None,
    currency: str = None,
) -> CommandResult:
    """Create an invoice and post Accounts Receivable / Sales Revenue."""
    fields = {"customer_name": customer_name, "due_date": due_date}
    if issue_date:
        fields["issue_date"] = issue_date
    if currency:
        fields["currency"] = currency
    return _create_and_post(actor, INVOICE_POSTING, invoice_number, total_amount, **fields)


def create_bill(
    actor: ActorContext,
    bill_number: str,
    vendor_name: str,
    total_amount,
    bill_date=None,
    due_date=None,
    currency: str = None,
) -> CommandResult:
    """Create a vendor bill and post Operating Expense / Accounts Payable."""
    fields = {"vendor_name": vendor_name, "due_date": due_date}
    if bill_date:
        fields["bill_date"] = bill_date
    if currency:
        fields["currency"] = currency
    return _create_and_post(actor, BILL_POSTING, bill_number, total_amount, **fields)


def create_payment(
    actor: ActorContext,
    payment_number: str,
    amount,
    invoice_id: int = None,
    payment_date=None,
    payment_method: str = None,
    currency: str = None,
) -> CommandResult:
    """Record a customer payment and post Cash / Accounts Receivable."""
    invoice, error = _invoice_for(actor, invoice_id)
    if error:
        return error

    fields = {"invoice": invoice}
    if payment_date:
        fields["payment_date"] = payment_date
    if payment_method:
        fields["payment_method"] = payment_method
    if currency:
        fields["currency"] = currency
    elif invoice:
        fields["currency"] = invoice.currency
    return _create_and_post(actor, PAYMENT_POSTING, payment_number, amount, **fields)


def create_credit_note(
    actor: ActorContext,
    credit_note_number: str,
    amount,
    invoice_id: int = None,
    reason: str = "",
    issue_date=None,
    currency: str = None,
) -> CommandResult:
    """Issue a credit note and post Sales Returns / Accounts Receivable."""
    invoice, error = _invoice_for(actor, invoice_id)
    if error:
        return error

    fields = {"invoice": invoice, "reason": reason}
    if issue_date:
        fields["issue_date"] = issue_date
    if currency:
        fields["currency"] = currency
    elif invoice:
        fields["currency"] = invoice.currency
    return _create_and_post(actor, CREDIT_NOTE_POSTING, credit_note_number, amount, **fields)


def create_expense(
    actor: ActorContext,
    expense_number: str,
    description: str,
    amount,
    expense_date=None,
    reference: str = "",
    currency: str = None,
) -> CommandResult:
    """Record a direct expense and post Operating Expense / Cash."""
    fields = {"description": description, "reference": reference}
    if expense_date:
        fields["expense_date"] = expense_date
    if currency:
        fields["currency"] = currency
    return _create_and_post(actor, EXPENSE_POSTING, expense_number, amount, **fields)
