from django.core.management.base import BaseCommand, CommandError
from inventory.services import find_divergent_products


class Command(BaseCommand):
    help = "Replay the inventory ledger and report products whose stock disagrees with it."

    def add_arguments(self, parser):
        parser.add_argument("--product", type=int, action="append", dest="products", help="Limit to product id(s)")
        parser.add_argument("--fail", action="store_true", help="Exit non-zero when divergence is found")

    def handle(self, *args, **options):
        divergent = find_divergent_products(product_ids=options.get("products"))
        for row in divergent:
            self.stdout.write(
                self.style.WARNING(
                    f"product={row['product_id']} stock={row['stock']} ledger={row['ledger']} "
                    f"diff={row['stock'] - row['ledger']}"
                )
            )
        if divergent and options.get("fail"):
            raise CommandError(f"{len(divergent)} product(s) diverge from the ledger.")
        self.stdout.write(self.style.SUCCESS(f"Divergent products: {len(divergent)}"))
