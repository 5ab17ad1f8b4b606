from django.core.management.base import BaseCommand, CommandError

from accounts.models import BLOOD_TYPES
from donations.models import Inventory
from donations.services import InventoryService


class Command(BaseCommand):
    help = "Create the default inventory record for every blood type that has none."

    def add_arguments(self, parser):
        parser.add_argument("--units", type=int, default=0,
                            help="Starting units for newly created records (default: 0)")

    def handle(self, *args, **opts):
        units = opts["units"]
        if units < 0:
            raise CommandError("--units must be zero or more")

        created = InventoryService.seed(units=units)
        for inventory in Inventory.objects.filter(blood_type__in=BLOOD_TYPES):
            self.stdout.write(f"{inventory.blood_type}: {inventory.units_available} units")

        if created:
            self.stdout.write(self.style.SUCCESS(f"Done. Created {created} record(s)."))
        else:
            self.stdout.write("All blood types already have inventory records, nothing to do.")
