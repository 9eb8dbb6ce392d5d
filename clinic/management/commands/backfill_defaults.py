"""
Backfill legacy rows that predate the cigarette allowance and patient types.

Rows with an empty cigarette type get ``none`` (cost 0) and patients
without a type get ``detox``.  Values are explicit defaults, never guessed.
"""
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.db.models import Q

from clinic.models import Graduate, Patient, Staff


class Command(BaseCommand):
    help = "Fill missing cigarette types ('none') and patient types ('detox')."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="only report how many rows would change")

    def handle(self, *args, **opts):
        missing_type = Q(daily_cigarette_type__isnull=True) | Q(daily_cigarette_type='')
        plan = [
            (Patient, missing_type, {'daily_cigarette_type': 'none', 'daily_cigarette_cost': Decimal('0')}),
            (Staff, missing_type, {'daily_cigarette_type': 'none', 'daily_cigarette_cost': Decimal('0')}),
            (Graduate, missing_type, {'daily_cigarette_type': 'none', 'daily_cigarette_cost': Decimal('0')}),
            (Patient, Q(patient_type__isnull=True) | Q(patient_type=''), {'patient_type': 'detox'}),
        ]
        with transaction.atomic():
            for model, condition, values in plan:
                qs = model.objects.filter(condition)
                count = qs.count() if opts["dry_run"] else qs.update(**values)
                label = ", ".join(f"{k}={v}" for k, v in values.items())
                self.stdout.write(f"{model.__name__}: {count} row(s) {'to set' if opts['dry_run'] else 'set'} {label}")
        self.stdout.write(self.style.SUCCESS("Backfill finished."))
