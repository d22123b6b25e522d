# tests/conftest.py
"""
Pytest fixtures for Corebook tests.

- Companies: ``company`` (tenant 1, full chart) and ``second_company``
- Users/memberships per role, ActorContext fixtures built with actor_for
- ``chart`` seeds the default chart of accounts for ``company``
- Finance document fixtures are plain model rows (not yet posted)
"""

from decimal import Decimal
import logging

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from accounts.authz import actor_for
from accounts.models import Company, CompanyMembership
from finance.models import Bill, CreditNote, Expense, Invoice, Payment
from ledger.directory import seed_chart_of_accounts
from ledger.models import LedgerAccount
from ops.logging_config import APP_LOGGERS


User = get_user_model()


# =============================================================================
# Company & User Fixtures
# =============================================================================

@pytest.fixture
def company(db):
    return Company.objects.create(
        name="Test Company",
        slug="test-company",
        default_currency="USD",
    )


@pytest.fixture
def second_company(db):
    """A second tenant for isolation tests."""
    return Company.objects.create(
        name="Second Company",
        slug="second-company",
        default_currency="EUR",
    )


def _make_user(email, company, role):
    user = User.objects.create_user(
        email=email,
        password="testpass123",
        name=email.split("@")[0].title(),
    )
    user.active_company = company
    user.save()
    CompanyMembership.objects.create(company=company, user=user, role=role)
    return user


@pytest.fixture
def user(db, company):
    """Owner of ``company``."""
    return _make_user("owner@test.com", company, CompanyMembership.Role.OWNER)


@pytest.fixture
def accountant_user(db, company):
    return _make_user("accountant@test.com", company, CompanyMembership.Role.ACCOUNTANT)


@pytest.fixture
def viewer_user(db, company):
    return _make_user("viewer@test.com", company, CompanyMembership.Role.VIEWER)


@pytest.fixture
def second_user(db, second_company):
    """Owner of ``second_company``."""
    return _make_user("second@test.com", second_company, CompanyMembership.Role.OWNER)


# =============================================================================
# Actor Context Fixtures
# =============================================================================

@pytest.fixture
def actor_context(user, company):
    return actor_for(user, company)


@pytest.fixture
def accountant_actor_context(accountant_user, company):
    return actor_for(accountant_user, company)


@pytest.fixture
def viewer_actor_context(viewer_user, company):
    return actor_for(viewer_user, company)


@pytest.fixture
def second_actor_context(second_user, second_company):
    return actor_for(second_user, second_company)


# =============================================================================
# Chart of Accounts Fixtures
# =============================================================================

@pytest.fixture
def chart(company):
    """Default chart for ``company`` keyed by account code."""
    seed_chart_of_accounts(company)
    return {
        account.code: account
        for account in LedgerAccount.objects.filter(company=company)
    }


@pytest.fixture
def second_chart(second_company):
    seed_chart_of_accounts(second_company)
    return {
        account.code: account
        for account in LedgerAccount.objects.filter(company=second_company)
    }


# =============================================================================
# Finance Document Fixtures
# =============================================================================

@pytest.fixture
def invoice(company, user):
    return Invoice.objects.create(
        company=company,
        invoice_number="INV-1001",
        customer_name="Acme Corp",
        total_amount=Decimal("5450.00"),
        currency="USD",
        created_by=user,
    )


@pytest.fixture
def bill(company, user):
    return Bill.objects.create(
        company=company,
        bill_number="BILL-2002",
        vendor_name="Office Supplies Ltd",
        total_amount=Decimal("1200.50"),
        currency="USD",
        created_by=user,
    )


@pytest.fixture
def payment(company, invoice, user):
    return Payment.objects.create(
        company=company,
        payment_number="PAY-3003",
        invoice=invoice,
        amount=Decimal("2000.00"),
        currency="USD",
        created_by=user,
    )


@pytest.fixture
def credit_note(company, invoice, user):
    return CreditNote.objects.create(
        company=company,
        credit_note_number="CN-4004",
        invoice=invoice,
        amount=Decimal("450.00"),
        reason="Damaged goods",
        currency="USD",
        created_by=user,
    )


@pytest.fixture
def expense(company, user):
    return Expense.objects.create(
        company=company,
        expense_number="EXP-5005",
        description="Team lunch",
        amount=Decimal("86.40"),
        reference="PO-9911",
        currency="USD",
        created_by=user,
    )


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def owner_client(api_client, user):
    api_client.force_authenticate(user=user)
    return api_client


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def app_logs(caplog):
    """
    caplog wired to the application loggers, which do not propagate to
    the root logger under the project LOGGING config.
    """
    loggers = [logging.getLogger(name) for name in APP_LOGGERS]
    for logger in loggers:
        logger.addHandler(caplog.handler)
    yield caplog
    for logger in loggers:
        logger.removeHandler(caplog.handler)
