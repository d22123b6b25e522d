# tests/test_authz.py
"""
Tests for accounts.authz: actor resolution and role permissions.
"""

import pytest
from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import NotAuthenticated
from rest_framework.test import APIRequestFactory

from accounts.authz import actor_for, require, resolve_actor
from accounts.models import CompanyMembership


def _request(user=None):
    request = APIRequestFactory().get("/api/ledger/transactions/")
    if user is not None:
        request.user = user
    return request


@pytest.mark.django_db
class TestActorResolution:
    def test_resolve_actor_uses_active_company(self, user, company):
        actor = resolve_actor(_request(user))

        assert actor.company == company
        assert actor.membership.role == CompanyMembership.Role.OWNER

    def test_anonymous_request(self):
        with pytest.raises(NotAuthenticated):
            resolve_actor(_request())

    def test_non_member_is_denied(self, user, second_company):
        with pytest.raises(PermissionDenied):
            actor_for(user, second_company)

    def test_deactivated_membership_is_denied(self, accountant_user, company):
        CompanyMembership.objects.filter(user=accountant_user).update(is_active=False)
        with pytest.raises(PermissionDenied):
            actor_for(accountant_user, company)


@pytest.mark.django_db
class TestRolePermissions:
    def test_owner_is_allowed_everything(self, actor_context):
        assert actor_context.has("accounts.manage")
        assert actor_context.has("anything.at.all")

    def test_accountant(self, accountant_actor_context):
        require(accountant_actor_context, "ledger.reconcile")
        require(accountant_actor_context, "reports.export")
        with pytest.raises(PermissionDenied):
            require(accountant_actor_context, "accounts.manage")

    def test_viewer_is_read_only(self, viewer_actor_context):
        for code in ("accounts.view", "ledger.view", "finance.view", "reports.view"):
            require(viewer_actor_context, code)
        for code in ("ledger.reconcile", "finance.create", "reports.export"):
            assert not viewer_actor_context.has(code)
