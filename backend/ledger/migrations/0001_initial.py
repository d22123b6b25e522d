import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CompanySequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("next_value", models.BigIntegerField(default=1)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="sequences", to="accounts.company")),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("company", "name"), name="uniq_company_sequence_name"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("code", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=255)),
                ("account_type", models.CharField(choices=[("ASSET", "Asset"), ("LIABILITY", "Liability"), ("EQUITY", "Equity"), ("REVENUE", "Revenue"), ("EXPENSE", "Expense")], max_length=20)),
                ("normal_balance", models.CharField(choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")], editable=False, max_length=10)),
                ("is_active", models.BooleanField(default=True)),
                ("opening_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ledger_accounts", to="accounts.company")),
            ],
            options={
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["company", "account_type"], name="idx_ledger_account_type"),
                    models.Index(fields=["company", "is_active"], name="idx_ledger_account_active"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "code"), name="uniq_ledger_account_code_per_company"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("transaction_number", models.CharField(max_length=30)),
                ("date", models.DateField(default=django.utils.timezone.localdate)),
                ("description", models.TextField()),
                ("reference", models.CharField(blank=True, default="", max_length=100)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("posted", "Posted"), ("reversed", "Reversed")], default="posted", max_length=12)),
                ("source", models.CharField(choices=[("invoice", "Invoice"), ("payment", "Payment"), ("expense", "Expense"), ("bill", "Bill"), ("credit", "Credit"), ("credit_note", "Credit Note")], max_length=20)),
                ("source_id", models.PositiveBigIntegerField()),
                ("source_reference", models.CharField(blank=True, default="", max_length=100)),
                ("reconciled", models.BooleanField(default=False)),
                ("reconciled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ledger_transactions", to="accounts.company")),
                ("credit_account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="credit_transactions", to="ledger.ledgeraccount")),
                ("debit_account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="debit_transactions", to="ledger.ledgeraccount")),
                ("created_by", models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_ledger_transactions", to=settings.AUTH_USER_MODEL)),
                ("reconciled_by", models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="reconciled_ledger_transactions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-date", "-id"],
                "indexes": [
                    models.Index(fields=["company", "date", "id"], name="idx_transaction_trail"),
                    models.Index(fields=["company", "source"], name="idx_transaction_source"),
                    models.Index(fields=["company", "reconciled"], name="idx_transaction_reconciled"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "transaction_number"), name="uniq_transaction_number_per_company"),
                    models.UniqueConstraint(fields=("company", "source", "source_id"), name="uniq_transaction_source_document"),
                    models.CheckConstraint(condition=models.Q(("total_amount__gte", 0)), name="chk_transaction_amount_non_negative"),
                    models.CheckConstraint(condition=models.Q(("debit_account", models.F("credit_account")), _negated=True), name="chk_transaction_distinct_accounts"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TransactionLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveSmallIntegerField()),
                ("debit_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("credit_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="transaction_lines", to="ledger.ledgeraccount")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ledger_transaction_lines", to="accounts.company")),
                ("transaction", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="ledger.transaction")),
            ],
            options={
                "ordering": ["transaction", "line_no"],
                "indexes": [
                    models.Index(fields=["company", "account"], name="idx_transaction_line_account"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("transaction", "line_no"), name="uniq_transaction_line_no"),
                    models.CheckConstraint(condition=models.Q(("debit_amount__gte", 0), ("credit_amount__gte", 0)), name="chk_transaction_line_non_negative"),
                    models.CheckConstraint(condition=models.Q(models.Q(("debit_amount__gt", 0), ("credit_amount__gt", 0)), _negated=True), name="chk_transaction_line_one_side"),
                ],
            },
        ),
    ]
