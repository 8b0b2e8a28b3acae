# accounting/management/commands/seed_chart_of_accounts.py

from django.core.management.base import BaseCommand

from accounting.chart import seed_default_chart


class Command(BaseCommand):
    help = "Seed the default chart of accounts into an empty registry"

    def add_arguments(self, parser):
        parser.add_argument(
            "--force",
            action="store_true",
            help="Add missing default accounts even if the registry is not empty",
        )

    def handle(self, *args, **options):
        created = seed_default_chart(force=options["force"])
        if created:
            self.stdout.write(self.style.SUCCESS(f"Done! Created {created} accounts."))
        else:
            self.stdout.write(self.style.WARNING("Chart of accounts already present; nothing created."))
