# ledger/adapters.py
"""
Document-type adapters.

Every financial document posts through one routine,
post_document_transaction, parameterized by a DocumentPosting descriptor
that names the debit/credit account codes and how to read amount and
description off the document. The named post_*_transaction functions are
thin entry points for callers that know the document type.

Posting the same document twice returns the transaction recorded the
first time, also when two calls race and the second one loses the insert.
"""

from dataclasses import dataclass
from typing import Callable
import logging

from django.apps import apps
from django.utils import timezone

from ledger import chart
from ledger.commands import record_transaction
from ledger.directory import resolve_account_pair
from ledger.exceptions import DocumentNotFoundError, DuplicatePostingError, InvalidPostingError
from ledger.models import Transaction


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentPosting:
    """
    How one document type maps onto a ledger posting.

    Attributes:
        source: Transaction.Source value recorded on the header
        debit_code: Account code to debit
        credit_code: Account code to credit
        model: "app_label.ModelName" of the document
        number_field: Field holding the document number
        amount_field: Field holding the amount to post
        describe: Builds the transaction description from the document
        reference_field: Field copied to the header reference; falls back
            to the document number when unset or blank
    """
    source: str
    debit_code: str
    credit_code: str
    model: str
    number_field: str
    amount_field: str
    describe: Callable
    reference_field: str = None

    def get_model(self):
        return apps.get_model(self.model)

    def load(self, document_id, company):
        model = self.get_model()
        try:
            return model.objects.get(pk=document_id, company=company)
        except (model.DoesNotExist, ValueError, TypeError):
            raise DocumentNotFoundError(self.source, document_id, company_id=company.id)


def _number(document, posting: "DocumentPosting") -> str:
    return getattr(document, posting.number_field)


def _reference(document, posting: "DocumentPosting") -> str:
    if posting.reference_field:
        value = getattr(document, posting.reference_field, "")
        if value:
            return value
    return _number(document, posting)


def _existing_transaction(posting: "DocumentPosting", document, company):
    return Transaction.objects.filter(
        company=company,
        source=posting.source,
        source_id=document.pk,
    ).first()


INVOICE_POSTING = DocumentPosting(
    source=Transaction.Source.INVOICE.value,
    debit_code=chart.ACCOUNTS_RECEIVABLE,
    credit_code=chart.SALES_REVENUE,
    model="finance.Invoice",
    number_field="invoice_number",
    amount_field="total_amount",
    describe=lambda doc: f"Invoice {doc.invoice_number} - Customer billing",
)

BILL_POSTING = DocumentPosting(
    source=Transaction.Source.BILL.value,
    debit_code=chart.OPERATING_EXPENSE,
    credit_code=chart.ACCOUNTS_PAYABLE,
    model="finance.Bill",
    number_field="bill_number",
    amount_field="total_amount",
    describe=lambda doc: f"Bill {doc.bill_number} - Vendor expense",
)

PAYMENT_POSTING = DocumentPosting(
    source=Transaction.Source.PAYMENT.value,
    debit_code=chart.CASH,
    credit_code=chart.ACCOUNTS_RECEIVABLE,
    model="finance.Payment",
    number_field="payment_number",
    amount_field="amount",
    describe=lambda doc: f"Payment {doc.payment_number} - Customer payment received",
)

CREDIT_NOTE_POSTING = DocumentPosting(
    source=Transaction.Source.CREDIT_NOTE.value,
    debit_code=chart.SALES_RETURNS,
    credit_code=chart.ACCOUNTS_RECEIVABLE,
    model="finance.CreditNote",
    number_field="credit_note_number",
    amount_field="amount",
    describe=lambda doc: f"Credit Note {doc.credit_note_number} - Customer refund/credit",
)

EXPENSE_POSTING = DocumentPosting(
    source=Transaction.Source.EXPENSE.value,
    debit_code=chart.OPERATING_EXPENSE,
    credit_code=chart.CASH,
    model="finance.Expense",
    number_field="expense_number",
    amount_field="amount",
    describe=lambda doc: f"Expense: {doc.description}",
    reference_field="reference",
)


DOCUMENT_POSTINGS = {
    posting.source: posting
    for posting in (
        INVOICE_POSTING,
        BILL_POSTING,
        PAYMENT_POSTING,
        CREDIT_NOTE_POSTING,
        EXPENSE_POSTING,
    )
}


def post_document_transaction(posting: DocumentPosting, document_id, company, created_by=None) -> Transaction:
    """
    Post a document to the ledger.

    Steps:
    1. Load the document within the company (DocumentNotFoundError)
    2. Return the existing transaction if the document is already posted,
       including when a concurrent call posts it first
    3. Resolve both accounts (ChartOfAccountsError, nothing written)
    4. Record the transaction
    """
    document = posting.load(document_id, company)

    existing = _existing_transaction(posting, document, company)
    if existing is not None:
        logger.info(
            "Document already posted",
            extra={
                "company_id": company.id,
                "source": posting.source,
                "source_id": document.pk,
                "transaction_number": existing.transaction_number,
            },
        )
        return existing

    debit_account, credit_account = resolve_account_pair(
        company,
        posting.debit_code,
        posting.credit_code,
    )

    try:
        return record_transaction(
            description=posting.describe(document),
            amount=getattr(document, posting.amount_field),
            currency=getattr(document, "currency", "") or company.default_currency,
            source=posting.source,
            source_id=document.pk,
            source_reference=_number(document, posting),
            reference=_reference(document, posting),
            debit_account=debit_account,
            credit_account=credit_account,
            company=company,
            created_by=created_by or getattr(document, "created_by", None),
            posting_date=timezone.localdate(),
        )
    except DuplicatePostingError:
        existing = _existing_transaction(posting, document, company)
        if existing is None:
            raise
        logger.info(
            "Document posted concurrently",
            extra={
                "company_id": company.id,
                "source": posting.source,
                "source_id": document.pk,
                "transaction_number": existing.transaction_number,
            },
        )
        return existing


def post_invoice_transaction(invoice_id, company, created_by=None) -> Transaction:
    return post_document_transaction(INVOICE_POSTING, invoice_id, company, created_by)


def post_bill_transaction(bill_id, company, created_by=None) -> Transaction:
    return post_document_transaction(BILL_POSTING, bill_id, company, created_by)


def post_payment_transaction(payment_id, company, created_by=None) -> Transaction:
    return post_document_transaction(PAYMENT_POSTING, payment_id, company, created_by)


def post_credit_note_transaction(credit_note_id, company, created_by=None) -> Transaction:
    return post_document_transaction(CREDIT_NOTE_POSTING, credit_note_id, company, created_by)


def post_expense_transaction(expense_id, company, created_by=None) -> Transaction:
    return post_document_transaction(EXPENSE_POSTING, expense_id, company, created_by)


def post_for(source: str, document_id, company, created_by=None) -> Transaction:
    """Post a document given its source name ("invoice", "bill", ...)."""
    posting = DOCUMENT_POSTINGS.get(source)
    if posting is None:
        raise InvalidPostingError(f"No document posting registered for source {source!r}")
    return post_document_transaction(posting, document_id, company, created_by)
