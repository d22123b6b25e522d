# ledger/chart.py
"""
Account codes every company needs before documents can be posted.
"""

from ledger.models import LedgerAccount


CASH = "110"
ACCOUNTS_RECEIVABLE = "120"
ACCOUNTS_PAYABLE = "210"
SALES_REVENUE = "400"
SALES_RETURNS = "410"
OPERATING_EXPENSE = "500"


# (code, name, account_type, description)
DEFAULT_CHART = [
    (CASH, "Cash", LedgerAccount.AccountType.ASSET, "Cash on hand and in bank"),
    (ACCOUNTS_RECEIVABLE, "Accounts Receivable", LedgerAccount.AccountType.ASSET,
     "Amounts owed by customers"),
    (ACCOUNTS_PAYABLE, "Accounts Payable", LedgerAccount.AccountType.LIABILITY,
     "Amounts owed to vendors"),
    (SALES_REVENUE, "Sales Revenue", LedgerAccount.AccountType.REVENUE,
     "Revenue from invoiced sales"),
    (SALES_RETURNS, "Sales Returns", LedgerAccount.AccountType.REVENUE,
     "Contra revenue for credit notes"),
    (OPERATING_EXPENSE, "Operating Expense", LedgerAccount.AccountType.EXPENSE,
     "Vendor bills and direct expenses"),
]
