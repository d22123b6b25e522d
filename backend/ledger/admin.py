# ledger/admin.py
"""
Django admin configuration for ledger models.

Transactions, lines and sequences are append-only and written only by the
command layer (ledger/commands.py), so their admin is read-only. Ledger
accounts can be browsed here; create and deactivate them through the API or
the seed_chart_of_accounts command.
"""

from django.contrib import admin

from .models import CompanySequence, LedgerAccount, Transaction, TransactionLine


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """Base admin for models the command layer owns."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class TransactionLineInline(admin.TabularInline):
    model = TransactionLine
    extra = 0
    can_delete = False
    fields = ("line_no", "account", "debit_amount", "credit_amount", "description")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(LedgerAccount)
class LedgerAccountAdmin(ReadOnlyModelAdmin):
    list_display = ("code", "name", "company", "account_type", "normal_balance", "is_active")
    list_filter = ("account_type", "is_active", "company")
    search_fields = ("code", "name")
    ordering = ("company", "code")


@admin.register(Transaction)
class TransactionAdmin(ReadOnlyModelAdmin):
    list_display = (
        "transaction_number",
        "company",
        "date",
        "source",
        "source_reference",
        "total_amount",
        "currency",
        "reconciled",
    )
    list_filter = ("source", "reconciled", "status", "company")
    search_fields = ("transaction_number", "description", "reference", "source_reference")
    date_hierarchy = "date"
    list_select_related = ("company",)
    inlines = [TransactionLineInline]


@admin.register(CompanySequence)
class CompanySequenceAdmin(ReadOnlyModelAdmin):
    list_display = ("company", "name", "next_value", "updated_at")
    list_filter = ("company",)
