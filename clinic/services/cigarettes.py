"""Daily cigarette allowance: cost derivation, statistics and payments."""
from __future__ import annotations

from django.conf import settings

from clinic.exceptions import ValidationError
from clinic.repositories import Repositories, default_repositories
from clinic.services.finance import (
    DEFAULT_PACK_PRICES,
    cigarette_payment_totals,
    grouped_cigarette_stats,
    resolve_cigarette_cost,
    to_decimal,
)


def pack_prices() -> dict:
    return getattr(settings, 'CIGARETTE_PACK_PRICES', None) or DEFAULT_PACK_PRICES


def apply_cigarette_cost(fields: dict, instance=None) -> dict:
    """Fill ``daily_cigarette_cost`` from the type unless the caller set it.

    On update the cost is only re-derived when the type changes.
    """
    fields = dict(fields)
    explicit = fields.get('daily_cigarette_cost')
    cleared = 'daily_cigarette_cost' in fields and explicit is None
    if 'daily_cigarette_type' in fields or instance is None or cleared:
        kind = fields.get('daily_cigarette_type') or getattr(instance, 'daily_cigarette_type', None) or 'none'
        fields['daily_cigarette_type'] = kind
        fields['daily_cigarette_cost'] = resolve_cigarette_cost(kind, explicit, pack_prices())
    return fields


def cigarette_overview(*, repos: Repositories | None = None) -> dict:
    repos = repos or default_repositories()
    active = repos.patients.list_active_patients()
    return grouped_cigarette_stats(
        [p for p in active if p.patient_type == 'detox'],
        [p for p in active if p.patient_type == 'recovery'],
        repos.graduates.list_active_graduates(),
        repos.staff.list_active_staff(),
        pack_prices(),
    )


PERSON_REPOS = {
    'patient': 'patients',
    'graduate': 'graduates',
    'staff': 'staff',
}


def record_cigarette_payment(fields: dict, *, repos: Repositories | None = None, user=None):
    repos = repos or default_repositories()
    fields = dict(fields)
    person_type = fields.get('person_type')
    if person_type not in PERSON_REPOS:
        raise ValidationError({'personType': [f'Must be one of {", ".join(PERSON_REPOS)}.']})
    if to_decimal(fields.get('amount')) <= 0:
        raise ValidationError({'amount': ['Amount must be greater than zero.']})
    person = getattr(repos, PERSON_REPOS[person_type]).get(fields.get('person_id'))
    if not fields.get('person_name'):
        fields['person_name'] = person.name
    if user is not None and not fields.get('created_by'):
        fields['created_by'] = getattr(user, 'username', '') or ''
    return repos.cigarette_payments.create(fields)


def cigarette_payment_summary(*, repos: Repositories | None = None) -> dict:
    repos = repos or default_repositories()
    return cigarette_payment_totals(repos.cigarette_payments.list())
