from django.core.management.base import BaseCommand

from clinic.models import Patient
from clinic.services.payments import recalculate_total_paid


class Command(BaseCommand):
    help = "Recompute every patient's total_paid from the payment records."

    def add_arguments(self, parser):
        parser.add_argument("patient_ids", nargs="*", type=int, help="limit to these patients")

    def handle(self, *args, **opts):
        ids = opts["patient_ids"] or list(Patient.objects.order_by("id").values_list("id", flat=True))
        changed = 0
        for pid in ids:
            before = Patient.objects.filter(pk=pid).values_list("total_paid", flat=True).first()
            total = recalculate_total_paid(pid)
            if before != total:
                changed += 1
                self.stdout.write(f"patient {pid}: {before} -> {total}")
        self.stdout.write(self.style.SUCCESS(f"Checked {len(ids)} patient(s), corrected {changed}."))
