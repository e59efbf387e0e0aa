"""Replace the whole inventory with the contents of an export document.

This deletes every existing item and transaction first.
"""

import json

from django.core.management.base import BaseCommand, CommandError
from inventory.services import InventoryValidationError
from inventory.transfer import import_payload


class Command(BaseCommand):
    help = "Import inventory items and stock transactions from a JSON export (destructive replace)"

    def add_arguments(self, parser):
        parser.add_argument("path", help="Path to an export document")
        parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    def handle(self, *args, **options):
        path = options["path"]
        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
        except OSError as exc:
            raise CommandError(f"Cannot read {path}: {exc}")
        except json.JSONDecodeError as exc:
            raise CommandError(f"{path} is not valid JSON: {exc}")

        if not options["yes"]:
            answer = input("This replaces ALL inventory data. Continue? [y/N] ")
            if answer.strip().lower() not in ("y", "yes"):
                self.stdout.write("Aborted.")
                return

        try:
            items, transactions = import_payload(data)
        except InventoryValidationError as exc:
            raise CommandError(f"Invalid import document: {json.dumps(exc.errors, default=str)}")
        self.stdout.write(self.style.SUCCESS(f"Imported {items} items and {transactions} transactions."))
