# finance/admin.py
from django.contrib import admin

from .models import Bill, CreditNote, Expense, Invoice, Payment


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "company", "customer_name", "issue_date", "total_amount", "currency", "status")
    list_filter = ("status", "company")
    search_fields = ("invoice_number", "customer_name")


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ("bill_number", "company", "vendor_name", "bill_date", "total_amount", "currency", "status")
    list_filter = ("status", "company")
    search_fields = ("bill_number", "vendor_name")


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("payment_number", "company", "invoice", "payment_date", "amount", "payment_method", "status")
    list_filter = ("status", "payment_method", "company")
    search_fields = ("payment_number",)


@admin.register(CreditNote)
class CreditNoteAdmin(admin.ModelAdmin):
    list_display = ("credit_note_number", "company", "invoice", "issue_date", "amount", "status")
    list_filter = ("status", "company")
    search_fields = ("credit_note_number", "reason")


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ("expense_number", "company", "description", "expense_date", "amount", "status")
    list_filter = ("status", "company")
    search_fields = ("expense_number", "description", "reference")
