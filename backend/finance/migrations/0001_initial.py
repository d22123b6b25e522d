import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


def _document_fields(company_related_name):
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
        ("currency", models.CharField(default="USD", max_length=3)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name=company_related_name, to="accounts.company")),
        ("created_by", models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Invoice",
            fields=_document_fields("invoices") + [
                ("invoice_number", models.CharField(max_length=50)),
                ("customer_name", models.CharField(max_length=255)),
                ("issue_date", models.DateField(default=django.utils.timezone.localdate)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("sent", "Sent"), ("paid", "Paid"), ("overdue", "Overdue"), ("cancelled", "Cancelled")], default="sent", max_length=12)),
            ],
            options={
                "ordering": ["-issue_date", "-id"],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "invoice_number"), name="uniq_invoice_number_per_company"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Bill",
            fields=_document_fields("bills") + [
                ("bill_number", models.CharField(max_length=50)),
                ("vendor_name", models.CharField(max_length=255)),
                ("bill_date", models.DateField(default=django.utils.timezone.localdate)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("paid", "Paid"), ("cancelled", "Cancelled")], default="pending", max_length=12)),
            ],
            options={
                "ordering": ["-bill_date", "-id"],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "bill_number"), name="uniq_bill_number_per_company"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=_document_fields("payments") + [
                ("payment_number", models.CharField(max_length=50)),
                ("payment_date", models.DateField(default=django.utils.timezone.localdate)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("payment_method", models.CharField(choices=[("cash", "Cash"), ("check", "Check"), ("credit_card", "Credit Card"), ("bank_transfer", "Bank Transfer")], default="bank_transfer", max_length=20)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed"), ("refunded", "Refunded")], default="completed", max_length=12)),
                ("invoice", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="payments", to="finance.invoice")),
            ],
            options={
                "ordering": ["-payment_date", "-id"],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "payment_number"), name="uniq_payment_number_per_company"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CreditNote",
            fields=_document_fields("creditnotes") + [
                ("credit_note_number", models.CharField(max_length=50)),
                ("issue_date", models.DateField(default=django.utils.timezone.localdate)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("reason", models.TextField(blank=True, default="")),
                ("status", models.CharField(choices=[("active", "Active"), ("applied", "Applied"), ("void", "Void")], default="active", max_length=12)),
                ("invoice", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="credit_notes", to="finance.invoice")),
            ],
            options={
                "ordering": ["-issue_date", "-id"],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "credit_note_number"), name="uniq_credit_note_number_per_company"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Expense",
            fields=_document_fields("expenses") + [
                ("expense_number", models.CharField(max_length=50)),
                ("description", models.CharField(max_length=255)),
                ("expense_date", models.DateField(default=django.utils.timezone.localdate)),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("reference", models.CharField(blank=True, default="", max_length=100)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected"), ("paid", "Paid")], default="approved", max_length=12)),
            ],
            options={
                "ordering": ["-expense_date", "-id"],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "expense_number"), name="uniq_expense_number_per_company"),
                ],
            },
        ),
    ]
