# ledger/exceptions.py
"""
Errors raised by the ledger engine.

All of them derive from LedgerError and propagate unchanged from the
directory and recorder through the document adapters to the caller.
ChartOfAccountsError marks configuration defects (the tenant's chart is
incomplete) as opposed to problems with the document being posted.
"""


class LedgerError(Exception):
    """Base class for ledger engine failures."""


class ChartOfAccountsError(LedgerError):
    """The tenant's chart of accounts cannot satisfy a posting."""


class AccountNotFoundError(ChartOfAccountsError):
    def __init__(self, code, company_id=None):
        self.code = code
        self.company_id = company_id
        super().__init__(
            f"Ledger account '{code}' is not set up for company {company_id}."
        )


class InactiveAccountError(ChartOfAccountsError):
    def __init__(self, code, company_id=None):
        self.code = code
        self.company_id = company_id
        super().__init__(
            f"Ledger account '{code}' is inactive for company {company_id}."
        )


class DocumentNotFoundError(LedgerError):
    def __init__(self, source, document_id, company_id=None):
        self.source = source
        self.document_id = document_id
        self.company_id = company_id
        super().__init__(f"{source} {document_id} not found for company {company_id}.")


class TransactionNotFoundError(LedgerError):
    def __init__(self, transaction_id):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found.")


class InvalidPostingError(LedgerError):
    """The posting request violates a recorder precondition."""


class DuplicatePostingError(LedgerError):
    def __init__(self, source, source_id, company_id=None):
        self.source = source
        self.source_id = source_id
        self.company_id = company_id
        super().__init__(
            f"A transaction already exists for {source} {source_id} (company {company_id})."
        )


class PersistenceError(LedgerError):
    """Storage failed mid-write; nothing of the posting was kept."""

    def __init__(self, message, transaction_number=None):
        self.transaction_number = transaction_number
        super().__init__(message)


class NumberGenerationConflict(LedgerError):
    def __init__(self, company_id, attempts):
        self.company_id = company_id
        self.attempts = attempts
        super().__init__(
            f"Could not allocate a unique transaction number for company "
            f"{company_id} after {attempts} attempts."
        )
