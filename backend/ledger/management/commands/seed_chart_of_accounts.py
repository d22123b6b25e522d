# ledger/management/commands/seed_chart_of_accounts.py
"""
Install the default ledger accounts for one or all companies.

Usage:
    python manage.py seed_chart_of_accounts --company acme
    python manage.py seed_chart_of_accounts --all-companies

Existing account codes are left untouched.
"""

from django.core.management.base import BaseCommand, CommandError

from accounts.models import Company
from ledger.directory import seed_chart_of_accounts


class Command(BaseCommand):
    help = "Install the default chart of accounts"

    def add_arguments(self, parser):
        parser.add_argument("--company", type=str, help="Company slug")
        parser.add_argument(
            "--all-companies",
            action="store_true",
            help="Seed every active company",
        )

    def handle(self, *args, **options):
        slug = options.get("company")
        if options.get("all_companies"):
            companies = Company.objects.filter(is_active=True).order_by("slug")
        elif slug:
            companies = Company.objects.filter(slug=slug)
            if not companies.exists():
                raise CommandError(f"Company '{slug}' not found.")
        else:
            raise CommandError("Specify --company <slug> or --all-companies.")

        for company in companies:
            created = seed_chart_of_accounts(company)
            if created:
                codes = ", ".join(account.code for account in created)
                self.stdout.write(self.style.SUCCESS(f"{company.slug}: created {codes}"))
            else:
                self.stdout.write(f"{company.slug}: chart already complete")
