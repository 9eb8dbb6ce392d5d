"""Collects records from the repositories and feeds the finance aggregator."""
from __future__ import annotations

from collections import defaultdict
from datetime import date

from django.conf import settings

from clinic.repositories import Repositories, default_repositories
from clinic.services.finance import dashboard_stats, report_summary


def build_dashboard(*, repos: Repositories | None = None, today: date | None = None) -> dict:
    repos = repos or default_repositories()
    today = today or date.today()
    active = repos.patients.list_active_patients()
    by_patient = defaultdict(list)
    for payment in repos.payments.list(patient_id__in=[p.id for p in active]):
        by_patient[payment.patient_id].append(payment)
    stats = dashboard_stats(
        active,
        by_patient,
        active_staff_count=len(repos.staff.list_active_staff()),
        today_payments=repos.payments.list_by_date(today),
        today_expenses=repos.expenses.list_by_date(today),
        today=today,
        bed_capacity=getattr(settings, 'BED_CAPACITY', 100),
        collection_due_days=getattr(settings, 'COLLECTION_DUE_DAYS', 7),
    )
    stats['date'] = today
    return stats


def build_report(start: date | None, end: date | None, *, repos: Repositories | None = None) -> dict:
    repos = repos or default_repositories()
    filters = {}
    if start:
        filters['payment_date__gte'] = start
    if end:
        filters['payment_date__lte'] = end
    payments = repos.payments.list(**filters)
    expense_filters = {k.replace('payment_date', 'date'): v for k, v in filters.items()}
    return report_summary(payments, repos.expenses.list(**expense_filters), repos.patients.list(), start, end)
