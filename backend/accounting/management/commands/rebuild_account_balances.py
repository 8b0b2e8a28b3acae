# accounting/management/commands/rebuild_account_balances.py
"""
Recompute every account balance from its entries.

Entries are the source of truth; Account.balance can always be rebuilt.

Usage:
    # Show drifted accounts without writing
    python manage.py rebuild_account_balances --dry-run

    # Rewrite drifted balances (one atomic unit)
    python manage.py rebuild_account_balances
"""

from django.core.management.base import BaseCommand

from accounting.balances import rebuild_balances


class Command(BaseCommand):
    help = "Rebuild Account.balance from the entry log"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would change without making changes",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        drift = rebuild_balances(dry_run=dry_run)

        if not drift:
            self.stdout.write(self.style.SUCCESS("All account balances match their entries."))
            return

        for item in drift:
            self.stdout.write(
                f"  {item.code}: stored {item.stored}, computed {item.computed} "
                f"(difference {item.difference})"
            )

        if dry_run:
            self.stdout.write(self.style.WARNING(f"\n[DRY RUN] {len(drift)} account(s) would be rebuilt."))
        else:
            self.stdout.write(self.style.SUCCESS(f"\nRebuilt {len(drift)} account balance(s)."))
