# accounts/permission_defaults.py

ROLE_DEFAULTS = {
    "OWNER": {
        # Chart of accounts
        "accounts.view",
        "accounts.manage",

        # Ledger
        "ledger.view",
        "ledger.reconcile",

        # Documents
        "finance.view",
        "finance.create",

        # Reports
        "reports.view",
        "reports.export",
    },
    "ADMIN": {
        "accounts.view",
        "accounts.manage",

        "ledger.view",
        "ledger.reconcile",

        "finance.view",
        "finance.create",

        "reports.view",
        "reports.export",
    },
    "ACCOUNTANT": {
        "accounts.view",

        "ledger.view",
        "ledger.reconcile",

        "finance.view",
        "finance.create",

        "reports.view",
        "reports.export",
    },
    "USER": {
        "accounts.view",
        "ledger.view",
        "finance.view",
        "finance.create",
        "reports.view",
    },
    "VIEWER": {
        "accounts.view",
        "ledger.view",
        "finance.view",
        "reports.view",
    },
}