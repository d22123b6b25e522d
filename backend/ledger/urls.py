# ledger/urls.py
"""
URL configuration for the ledger API.

Endpoints:
- /transactions/ - Transaction trail, summary, export, detail, reconcile
- /accounts/ - Chart of accounts with computed balances
- /trial-balance/ - Trial balance
"""

from django.urls import path

from .views import (
    # Transaction views
    TransactionTrailView,
    TransactionSummaryView,
    TransactionExportView,
    TransactionDetailView,
    TransactionReconcileView,
    # Account views
    LedgerAccountListCreateView,
    LedgerAccountExportView,
    LedgerAccountDetailView,
    # Reports
    TrialBalanceView,
)

app_name = "ledger"

urlpatterns = [
    # ==========================================================================
    # Transactions
    # ==========================================================================
    path("transactions/", TransactionTrailView.as_view(), name="transaction-trail"),
    path("transactions/summary/", TransactionSummaryView.as_view(), name="transaction-summary"),
    path("transactions/export/", TransactionExportView.as_view(), name="transaction-export"),
    path("transactions/<int:pk>/", TransactionDetailView.as_view(), name="transaction-detail"),
    path(
        "transactions/<int:pk>/reconcile/",
        TransactionReconcileView.as_view(),
        name="transaction-reconcile",
    ),

    # ==========================================================================
    # Chart of Accounts
    # ==========================================================================
    path("accounts/", LedgerAccountListCreateView.as_view(), name="account-list"),
    path("accounts/export/", LedgerAccountExportView.as_view(), name="account-export"),
    path("accounts/<str:code>/", LedgerAccountDetailView.as_view(), name="account-detail"),

    # ==========================================================================
    # Reports
    # ==========================================================================
    path("trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
]
