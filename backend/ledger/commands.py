# ledger/commands.py
"""
Command layer for ledger operations.

Commands are the single point where ledger rows are written.
Adapters and views call commands; commands enforce rules and persist.

Pattern:
1. Validate permissions (require) where an actor is involved
2. Apply business policies (can_*)
3. Perform the operation inside command_writes_allowed()
4. Return the result (CommandResult, or the model instance for the
   engine-level record/reconcile calls which raise LedgerError subclasses)

Transactions and their lines are append-only. After insert, the only
change a transaction ever sees is reconciliation.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import logging

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from accounts.authz import ActorContext, require
from ledger.directory import find_account_by_id
from ledger.exceptions import (
    DuplicatePostingError,
    InvalidPostingError,
    NumberGenerationConflict,
    PersistenceError,
    TransactionNotFoundError,
)
from ledger.models import LedgerAccount, Transaction, TransactionLine
from ledger.policies import (
    can_post_account_pair,
    can_post_amount,
    can_post_source,
    can_reconcile,
)
from ledger.sequences import next_transaction_number
from ledger.write_barrier import command_writes_allowed


logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class CommandResult:
    """
    Wrapper for command results with success/failure info.

    Usage:
        result = create_ledger_account(actor, code="110", ...)
        if result.success:
            account = result.data
        else:
            error_message = result.error
    """

    def __init__(self, success: bool, data=None, error: str = None):
        self.success = success
        self.data = data
        self.error = error

    @classmethod
    def ok(cls, data=None):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str):
        return cls(success=False, error=error)


# =============================================================================
# Recording
# =============================================================================

def _to_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidPostingError(f"Transaction amount is not a number: {value!r}")
    if not amount.is_finite():
        raise InvalidPostingError(f"Transaction amount is not a number: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _as_account(company, account) -> LedgerAccount:
    if isinstance(account, LedgerAccount):
        return account
    return find_account_by_id(company, account)


def _check(policy_result) -> None:
    allowed, reason = policy_result
    if not allowed:
        raise InvalidPostingError(reason)


def record_transaction(
    description: str,
    amount,
    currency: str,
    source: str,
    source_id: int,
    source_reference: str,
    debit_account,
    credit_account,
    company,
    created_by=None,
    reference: str = None,
    posting_date=None,
) -> Transaction:
    """
    Record one balanced financial event: a header plus a debit line and a
    credit line of the same amount.

    Args:
        description: Human readable description of the event
        amount: Non-negative amount, quantized to cents
        currency: ISO currency code; falls back to the company default
        source: One of Transaction.Source values
        source_id: Primary key of the originating document
        source_reference: Document number shown in the trail
        debit_account: LedgerAccount (or its pk) to debit
        credit_account: LedgerAccount (or its pk) to credit
        company: Owning company
        created_by: User recording the posting (optional)
        reference: Free-form reference (optional)
        posting_date: Accounting date, defaults to today

    Returns:
        The committed Transaction

    Raises:
        AccountNotFoundError: an account pk is not in the company's chart
        InvalidPostingError: a precondition failed; nothing was written
        DuplicatePostingError: the source document is already posted
        NumberGenerationConflict: no free transaction number after retries
        PersistenceError: storage failed; nothing was written
    """
    amount = _to_amount(amount)
    debit_account = _as_account(company, debit_account)
    credit_account = _as_account(company, credit_account)

    _check(can_post_amount(amount))
    _check(can_post_account_pair(company, debit_account, credit_account))
    _check(can_post_source(source))

    if amount == 0:
        logger.warning(
            "Recording zero-amount transaction",
            extra={"company_id": company.id, "source": source, "source_id": source_id},
        )

    currency = (
        currency
        or getattr(company, "default_currency", "")
        or settings.LEDGER_DEFAULT_CURRENCY
    ).upper()
    posting_date = posting_date or timezone.localdate()
    max_attempts = settings.LEDGER_NUMBER_MAX_ATTEMPTS

    with transaction.atomic():
        for attempt in range(1, max_attempts + 1):
            transaction_number = next_transaction_number(company, on=posting_date)
            try:
                txn = _insert_transaction(
                    company=company,
                    transaction_number=transaction_number,
                    posting_date=posting_date,
                    description=description,
                    reference=reference or "",
                    amount=amount,
                    currency=currency,
                    source=source,
                    source_id=source_id,
                    source_reference=source_reference or "",
                    debit_account=debit_account,
                    credit_account=credit_account,
                    created_by=created_by,
                )
            except IntegrityError as exc:
                if Transaction.objects.filter(
                    company=company,
                    transaction_number=transaction_number,
                ).exists():
                    logger.warning(
                        "Transaction number collision, retrying",
                        extra={
                            "company_id": company.id,
                            "transaction_number": transaction_number,
                            "attempt": attempt,
                        },
                    )
                    continue
                if Transaction.objects.filter(
                    company=company,
                    source=source,
                    source_id=source_id,
                ).exists():
                    raise DuplicatePostingError(source, source_id, company_id=company.id) from exc
                logger.error(
                    "Failed to record transaction",
                    exc_info=True,
                    extra={"company_id": company.id, "transaction_number": transaction_number},
                )
                raise PersistenceError(
                    f"Failed to record transaction {transaction_number}: {exc}",
                    transaction_number=transaction_number,
                ) from exc
            except DatabaseError as exc:
                logger.error(
                    "Failed to record transaction",
                    exc_info=True,
                    extra={"company_id": company.id, "transaction_number": transaction_number},
                )
                raise PersistenceError(
                    f"Failed to record transaction {transaction_number}: {exc}",
                    transaction_number=transaction_number,
                ) from exc

            logger.info(
                "Recorded transaction",
                extra={
                    "company_id": company.id,
                    "transaction_id": txn.id,
                    "transaction_number": txn.transaction_number,
                    "source": source,
                    "source_id": source_id,
                    "amount": str(amount),
                    "currency": currency,
                    "debit_account": debit_account.code,
                    "credit_account": credit_account.code,
                },
            )
            return txn

    raise NumberGenerationConflict(company.id, max_attempts)


def _insert_transaction(
    *,
    company,
    transaction_number,
    posting_date,
    description,
    reference,
    amount,
    currency,
    source,
    source_id,
    source_reference,
    debit_account,
    credit_account,
    created_by,
) -> Transaction:
    """Write header and both lines under one savepoint. Line 1 is the debit line."""
    line_description = f"{source.upper()} - {description}"[:255]

    with transaction.atomic(), command_writes_allowed():
        txn = Transaction.objects.create(
            company=company,
            transaction_number=transaction_number,
            date=posting_date,
            description=description,
            reference=reference,
            total_amount=amount,
            currency=currency,
            status=Transaction.Status.POSTED,
            source=source,
            source_id=source_id,
            source_reference=source_reference,
            debit_account=debit_account,
            credit_account=credit_account,
            reconciled=False,
            created_by=created_by,
        )
        TransactionLine.objects.bulk_create([
            TransactionLine(
                transaction=txn,
                company=company,
                line_no=1,
                account=debit_account,
                debit_amount=amount,
                credit_amount=Decimal("0.00"),
                description=line_description,
            ),
            TransactionLine(
                transaction=txn,
                company=company,
                line_no=2,
                account=credit_account,
                debit_amount=Decimal("0.00"),
                credit_amount=amount,
                description=line_description,
            ),
        ])
    return txn


# =============================================================================
# Reconciliation
# =============================================================================

@transaction.atomic
def reconcile_transaction(transaction_id, user, company=None) -> Transaction:
    """
    Mark a transaction as reconciled.

    Reconciling an already reconciled transaction returns it unchanged;
    the original reconciliation time and user are kept.

    Raises:
        TransactionNotFoundError: unknown id, or an id of another company
            when ``company`` is given
    """
    queryset = Transaction.objects.select_for_update()
    if company is not None:
        queryset = queryset.filter(company=company)

    try:
        txn = queryset.get(pk=transaction_id)
    except (Transaction.DoesNotExist, ValueError, TypeError):
        raise TransactionNotFoundError(transaction_id)

    allowed, _reason = can_reconcile(company, txn)
    if not allowed:
        raise TransactionNotFoundError(transaction_id)

    if txn.reconciled:
        return txn

    txn.reconciled = True
    txn.reconciled_at = timezone.now()
    txn.reconciled_by = user if getattr(user, "is_authenticated", False) else None
    with command_writes_allowed():
        txn.save(update_fields=["reconciled", "reconciled_at", "reconciled_by", "updated_at"])

    logger.info(
        "Reconciled transaction",
        extra={
            "company_id": txn.company_id,
            "transaction_id": txn.id,
            "transaction_number": txn.transaction_number,
            "user_id": getattr(txn.reconciled_by, "id", None),
        },
    )
    return txn


# =============================================================================
# Chart of Accounts Commands
# =============================================================================

@transaction.atomic
def create_ledger_account(
    actor: ActorContext,
    code: str,
    name: str,
    account_type: str,
    opening_balance=Decimal("0.00"),
    description: str = "",
) -> CommandResult:
    """
    Create a new account in the company's chart of accounts.

    Returns:
        CommandResult with the created LedgerAccount or error
    """
    require(actor, "accounts.manage")

    code = (code or "").strip()
    if not code:
        return CommandResult.fail("Account code is required.")

    if account_type not in LedgerAccount.AccountType.values:
        return CommandResult.fail(f"Invalid account type: {account_type}")

    if LedgerAccount.objects.filter(company=actor.company, code=code).exists():
        return CommandResult.fail(f"Account code '{code}' already exists.")

    try:
        opening_balance = _to_amount(opening_balance)
    except InvalidPostingError as exc:
        return CommandResult.fail(str(exc))

    account = LedgerAccount.objects.create(
        company=actor.company,
        code=code,
        name=name,
        account_type=account_type,
        opening_balance=opening_balance,
        description=description,
    )

    logger.info(
        "Created ledger account",
        extra={"company_id": actor.company.id, "code": code, "user_id": actor.user.id},
    )
    return CommandResult.ok(account)


@transaction.atomic
def deactivate_ledger_account(actor: ActorContext, code: str) -> CommandResult:
    """
    Deactivate an account. Accounts are never deleted: existing
    transactions keep pointing at them, new postings are refused.
    """
    require(actor, "accounts.manage")

    try:
        account = LedgerAccount.objects.select_for_update().get(
            company=actor.company,
            code=code,
        )
    except LedgerAccount.DoesNotExist:
        return CommandResult.fail(f"Account '{code}' not found.")

    if not account.is_active:
        return CommandResult.ok(account)

    account.is_active = False
    account.save(update_fields=["is_active", "updated_at"])

    logger.info(
        "Deactivated ledger account",
        extra={"company_id": actor.company.id, "code": code, "user_id": actor.user.id},
    )
    return CommandResult.ok(account)
