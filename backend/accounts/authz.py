# accounts/authz.py
"""
Authorization utilities for Corebook.

Provides:
- ActorContext: Immutable context for the current request
- resolve_actor: Extract actor context from request
- require: Check permissions and raise if not granted

Permissions are role-based:
1. OWNER: implicit allow
2. everyone else: the role's default permission codes
"""

from dataclasses import dataclass
from typing import FrozenSet
from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import NotAuthenticated

from accounts.models import CompanyMembership, Company


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor (user + company).

    Passed to commands so they know who is acting and in which tenant.

    Attributes:
        user: The authenticated user
        company: The active company (tenant)
        membership: The user's membership in the company
        perms: Permission codes granted to the membership's role
    """
    user: object  # User model
    company: Company
    membership: CompanyMembership
    perms: FrozenSet[str]

    def has(self, code: str) -> bool:
        return self.membership.has_permission(code)


def actor_for(user, company) -> ActorContext:
    """
    Build an ActorContext for a user inside a specific company.

    Raises:
        PermissionDenied: If the user has no active membership there
    """
    try:
        membership = CompanyMembership.objects.select_related("company").get(
            user=user,
            company=company,
            is_active=True,
        )
    except CompanyMembership.DoesNotExist:
        raise PermissionDenied("You are not an active member of the selected company.")

    return ActorContext(
        user=user,
        company=membership.company,
        membership=membership,
        perms=membership.permission_codes,
    )


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    The membership is loaded fresh on every request so role changes take
    effect immediately.

    Raises:
        NotAuthenticated: If user is not authenticated
        PermissionDenied: If user has no active company or membership
    """
    user = getattr(request, "user", None)

    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication required.")

    company = getattr(user, "active_company", None)

    if not company:
        raise PermissionDenied("No active company selected. Please select a company first.")

    return actor_for(user, company)


def require(actor: ActorContext, code: str) -> None:
    """
    Require that the actor has a specific permission.

    Example:
        require(actor, "ledger.reconcile")
        # If we get here, permission is granted
    """
    if not actor.has(code):
        raise PermissionDenied(f"Permission denied: {code}")
