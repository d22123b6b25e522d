# accounts/__init__.py
"""
Accounts app - Authentication and multi-tenancy for Corebook.

This app provides:
- Company: Tenant/organization model
- User: Custom user model with active_company
- CompanyMembership: User-Company relationship with a role
- ActorContext: Authorization context utilities

Multi-tenancy is enforced at every layer through the ActorContext pattern
and the company foreign key carried by every ledger row.
"""
