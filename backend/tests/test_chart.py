# tests/test_chart.py
"""
Tests for the chart of accounts: seeding, lookup and account commands.
"""

from decimal import Decimal
from io import StringIO

import pytest
from django.core.exceptions import PermissionDenied
from django.core.management import call_command
from django.core.management.base import CommandError

from accounts.models import Company
from ledger.chart import DEFAULT_CHART
from ledger.commands import create_ledger_account, deactivate_ledger_account
from ledger.directory import (
    find_account_by_code,
    find_account_by_id,
    resolve_account_pair,
    seed_chart_of_accounts,
)
from ledger.exceptions import AccountNotFoundError, InactiveAccountError
from ledger.models import LedgerAccount


@pytest.mark.django_db
class TestSeedChart:
    def test_seed_creates_default_codes(self, company, app_logs):
        created = seed_chart_of_accounts(company)

        assert sorted(a.code for a in created) == sorted(code for code, *_ in DEFAULT_CHART)
        assert "Seeded chart of accounts" in app_logs.text

    def test_seed_is_repeatable(self, company):
        seed_chart_of_accounts(company)
        LedgerAccount.objects.filter(company=company, code="110").update(name="Petty Cash")

        assert seed_chart_of_accounts(company) == []
        assert LedgerAccount.objects.get(company=company, code="110").name == "Petty Cash"

    def test_normal_balance_follows_account_type(self, chart):
        assert chart["110"].normal_balance == LedgerAccount.NormalBalance.DEBIT
        assert chart["110"].is_debit_normal
        assert chart["210"].normal_balance == LedgerAccount.NormalBalance.CREDIT
        assert chart["400"].normal_balance == LedgerAccount.NormalBalance.CREDIT
        assert chart["500"].normal_balance == LedgerAccount.NormalBalance.DEBIT

    def test_accounts_are_never_deleted(self, chart):
        with pytest.raises(RuntimeError):
            chart["110"].delete()


@pytest.mark.django_db
class TestManagementCommand:
    def test_seed_single_company(self, company):
        out = StringIO()
        call_command("seed_chart_of_accounts", company="test-company", stdout=out)

        assert "test-company: created" in out.getvalue()
        assert LedgerAccount.objects.filter(company=company).count() == len(DEFAULT_CHART)

    def test_seed_all_companies(self, company, second_company):
        Company.objects.create(name="Dormant", slug="dormant", is_active=False)
        seed_chart_of_accounts(company)
        out = StringIO()

        call_command("seed_chart_of_accounts", all_companies=True, stdout=out)

        assert "test-company: chart already complete" in out.getvalue()
        assert LedgerAccount.objects.filter(company=second_company).count() == len(DEFAULT_CHART)
        assert not LedgerAccount.objects.filter(company__slug="dormant").exists()

    def test_unknown_company(self, db):
        with pytest.raises(CommandError):
            call_command("seed_chart_of_accounts", company="nope")

    def test_requires_a_target(self, db):
        with pytest.raises(CommandError):
            call_command("seed_chart_of_accounts")


@pytest.mark.django_db
class TestDirectory:
    def test_find_by_code_is_tenant_scoped(self, company, chart, second_company):
        assert find_account_by_code(company, "120") == chart["120"]

        with pytest.raises(AccountNotFoundError) as excinfo:
            find_account_by_code(second_company, "120")
        assert excinfo.value.company_id == second_company.id

    def test_find_by_id(self, company, chart, second_company):
        assert find_account_by_id(company, chart["400"].pk) == chart["400"]
        with pytest.raises(AccountNotFoundError):
            find_account_by_id(second_company, chart["400"].pk)

    def test_resolve_pair(self, company, chart):
        debit, credit = resolve_account_pair(company, "110", "120")
        assert (debit.code, credit.code) == ("110", "120")

    def test_resolve_pair_checks_both_sides_first(self, company, chart):
        with pytest.raises(AccountNotFoundError) as excinfo:
            resolve_account_pair(company, "110", "999")
        assert excinfo.value.code == "999"

    def test_resolve_pair_rejects_inactive(self, company, chart):
        LedgerAccount.objects.filter(pk=chart["110"].pk).update(is_active=False)

        with pytest.raises(InactiveAccountError):
            resolve_account_pair(company, "110", "120")


@pytest.mark.django_db
class TestAccountCommands:
    def test_create_account(self, actor_context, chart):
        result = create_ledger_account(
            actor_context, code=" 620 ", name="Rent", account_type="EXPENSE",
            opening_balance="12.345",
        )

        assert result.success
        assert result.data.code == "620"
        assert result.data.opening_balance == Decimal("12.35")
        assert result.data.normal_balance == LedgerAccount.NormalBalance.DEBIT

    def test_create_rejects_bad_input(self, actor_context, chart):
        assert not create_ledger_account(actor_context, "", "Blank", "ASSET").success
        assert not create_ledger_account(actor_context, "700", "Odd", "INCOME").success
        assert "already exists" in create_ledger_account(actor_context, "110", "Cash", "ASSET").error

    def test_create_requires_manage_permission(self, accountant_actor_context, chart):
        with pytest.raises(PermissionDenied):
            create_ledger_account(accountant_actor_context, "620", "Rent", "EXPENSE")

    def test_deactivate_is_idempotent(self, actor_context, chart):
        first = deactivate_ledger_account(actor_context, "500")
        second = deactivate_ledger_account(actor_context, "500")

        assert first.success and second.success
        assert second.data.is_active is False

    def test_deactivate_unknown_code(self, actor_context, chart):
        result = deactivate_ledger_account(actor_context, "999")
        assert not result.success

    def test_deactivate_stays_inside_tenant(self, second_actor_context, chart, second_chart):
        assert deactivate_ledger_account(second_actor_context, "500").success
        chart["500"].refresh_from_db()
        assert chart["500"].is_active is True
