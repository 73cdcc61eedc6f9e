from django.core.management.base import BaseCommand

from ledger_core.services import (reconcile_account_balances,
                                  reconcile_inventory_valuations,
                                  reconcile_party_balances)


class Command(BaseCommand):
    help = "Replays ledger and stock logs and reports drift in cached balances."

    def add_arguments(self, parser):
        parser.add_argument(
            "--fix",  # Define flag
            action="store_true",
            help="Rewrite the cached balances from the logs",
        )

    def handle(self, *args, **options):
        fix = options["fix"]
        checks = [
            ("Accounts", reconcile_account_balances),
            ("Inventory", reconcile_inventory_valuations),
            ("Parties", reconcile_party_balances),
        ]
        total = 0
        for label, check in checks:
            found = check(fix=fix)
            total += len(found)
            for row in found:
                self.stdout.write(self.style.WARNING(f"{label}: {row}"))

        if total == 0:
            self.stdout.write(self.style.SUCCESS("All cached balances match the logs."))
        elif fix:
            self.stdout.write(self.style.SUCCESS(f"Fixed {total} cached balances."))
        else:
            self.stdout.write(
                self.style.ERROR(f"{total} discrepancies found. Re-run with --fix to repair.")
            )
