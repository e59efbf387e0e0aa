"""Write the whole inventory (items and transactions) as a JSON document."""

import json

from django.core.management.base import BaseCommand
from django.core.serializers.json import DjangoJSONEncoder
from inventory.transfer import export_payload


class Command(BaseCommand):
    help = "Export all inventory items and stock transactions as JSON"

    def add_arguments(self, parser):
        parser.add_argument("path", nargs="?", help="File to write; defaults to stdout")
        parser.add_argument("--indent", type=int, default=2)

    def handle(self, *args, **options):
        payload = export_payload()
        text = json.dumps(payload, cls=DjangoJSONEncoder, indent=options["indent"])
        path = options.get("path")
        if not path:
            self.stdout.write(text)
            return
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(text)
        self.stdout.write(
            self.style.SUCCESS(
                f"Exported {len(payload['inventory'])} items and "
                f"{len(payload['transactions'])} transactions to {path}"
            )
        )
