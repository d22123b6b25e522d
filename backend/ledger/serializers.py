# ledger/serializers.py
"""
Serializers for the ledger API.

Used for input validation and output formatting only; postings and
reconciliation happen in ledger.commands.
"""

from decimal import Decimal

from rest_framework import serializers

from .models import LedgerAccount, Transaction, TransactionLine


# =============================================================================
# Account Serializers
# =============================================================================

class LedgerAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerAccount
        fields = [
            "id",
            "public_id",
            "code",
            "name",
            "account_type",
            "normal_balance",
            "is_active",
            "opening_balance",
            "description",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class LedgerAccountBalanceSerializer(serializers.Serializer):
    """Row of ledger.queries.account_balances."""
    id = serializers.IntegerField(source="account.id")
    public_id = serializers.UUIDField(source="account.public_id")
    code = serializers.CharField()
    name = serializers.CharField()
    account_type = serializers.CharField()
    normal_balance = serializers.CharField()
    is_active = serializers.BooleanField()
    opening_balance = serializers.DecimalField(max_digits=18, decimal_places=2)
    debit_total = serializers.DecimalField(max_digits=18, decimal_places=2)
    credit_total = serializers.DecimalField(max_digits=18, decimal_places=2)
    balance = serializers.DecimalField(max_digits=18, decimal_places=2)


class LedgerAccountCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=255)
    account_type = serializers.ChoiceField(choices=LedgerAccount.AccountType.choices)
    opening_balance = serializers.DecimalField(
        max_digits=18,
        decimal_places=2,
        required=False,
        default=Decimal("0.00"),
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")


# =============================================================================
# Transaction Serializers
# =============================================================================

class AccountRefSerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerAccount
        fields = ["id", "code", "name", "account_type"]


class TransactionLineSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = TransactionLine
        fields = [
            "line_no",
            "account",
            "account_code",
            "account_name",
            "debit_amount",
            "credit_amount",
            "description",
        ]


class TransactionSerializer(serializers.ModelSerializer):
    """Trail row: header with both accounts embedded."""
    debit_account = AccountRefSerializer(read_only=True)
    credit_account = AccountRefSerializer(read_only=True)
    reconciled_by_email = serializers.EmailField(
        source="reconciled_by.email",
        read_only=True,
        default=None,
    )

    class Meta:
        model = Transaction
        fields = [
            "id",
            "public_id",
            "transaction_number",
            "date",
            "description",
            "reference",
            "total_amount",
            "currency",
            "status",
            "source",
            "source_id",
            "source_reference",
            "debit_account",
            "credit_account",
            "reconciled",
            "reconciled_at",
            "reconciled_by_email",
            "created_at",
        ]
        read_only_fields = fields


class TransactionDetailSerializer(TransactionSerializer):
    lines = TransactionLineSerializer(many=True, read_only=True)

    class Meta(TransactionSerializer.Meta):
        fields = TransactionSerializer.Meta.fields + ["lines"]
        read_only_fields = fields


class TrailQuerySerializer(serializers.Serializer):
    """Query parameters of the transaction trail."""
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    source = serializers.ChoiceField(
        choices=["all"] + list(Transaction.Source.values),
        required=False,
        default="all",
    )
    search = serializers.CharField(required=False, allow_blank=True)
    reconciled = serializers.BooleanField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError("start_date must be on or before end_date.")
        return attrs


# =============================================================================
# Report Serializers
# =============================================================================

class SourceTotalSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    total = serializers.DecimalField(max_digits=18, decimal_places=2)


class TransactionSummarySerializer(serializers.Serializer):
    total_count = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=18, decimal_places=2)
    reconciled_count = serializers.IntegerField()
    unreconciled_count = serializers.IntegerField()
    by_source = serializers.DictField(child=SourceTotalSerializer())


class TrialBalanceRowSerializer(serializers.Serializer):
    code = serializers.CharField()
    name = serializers.CharField()
    account_type = serializers.CharField()
    debit = serializers.DecimalField(max_digits=18, decimal_places=2)
    credit = serializers.DecimalField(max_digits=18, decimal_places=2)


class TrialBalanceSerializer(serializers.Serializer):
    as_of = serializers.DateField(allow_null=True)
    rows = TrialBalanceRowSerializer(many=True)
    total_debit = serializers.DecimalField(max_digits=18, decimal_places=2)
    total_credit = serializers.DecimalField(max_digits=18, decimal_places=2)
    is_balanced = serializers.BooleanField()
