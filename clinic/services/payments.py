"""
Payment posting.

A payment write and the matching change to the patient's running
``total_paid`` happen together.  The running total is only ever moved by
``increment_total_paid`` (a single atomic UPDATE clamped at zero), never by
reading, adding and saving.  If the referenced patient is missing, the
payment is still stored and an integrity warning is logged and audited.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from clinic.exceptions import ConflictOrIntegrityWarning, ValidationError
from clinic.repositories import Repositories, default_repositories
from clinic.services.audit import log_action, report_integrity_warning
from clinic.services.finance import ZERO, patient_account, to_decimal

logger = logging.getLogger(__name__)


def _post(repos: Repositories, patient_id, delta: Decimal, *, user, warn, payment_id=None) -> bool:
    if not delta:
        return True
    if repos.patients.increment_total_paid(patient_id, delta):
        logger.debug("patient %s total_paid %+s", patient_id, delta)
        return True
    warn(ConflictOrIntegrityWarning(
        'payment references a missing patient; balance not updated',
        object_type='patient', object_id=patient_id,
        detail={'paymentId': payment_id, 'delta': str(delta)},
    ), user=user)
    return False


def _check_amount(amount) -> Decimal:
    amount = to_decimal(amount)
    if amount <= 0:
        raise ValidationError({'amount': ['Amount must be greater than zero.']})
    return amount


def create_payment(fields: dict, *, repos: Repositories | None = None, user=None,
                   warn=report_integrity_warning):
    repos = repos or default_repositories()
    fields = dict(fields)
    if not fields.get('patient_id'):
        raise ValidationError({'patientId': ['This field is required.']})
    fields['amount'] = _check_amount(fields.get('amount'))
    if user is not None and not fields.get('created_by'):
        fields['created_by'] = getattr(user, 'username', '') or ''
    with repos.atomic:
        payment = repos.payments.create(fields)
        _post(repos, payment.patient_id, payment.amount, user=user, warn=warn, payment_id=payment.id)
    return payment


def update_payment(payment_id, fields: dict, *, repos: Repositories | None = None, user=None,
                   warn=report_integrity_warning):
    """Apply a partial update and move the difference onto the patient(s).

    Moving a payment to another patient takes the old amount off the old
    patient and posts the new amount to the new one.
    """
    repos = repos or default_repositories()
    fields = dict(fields)
    if 'amount' in fields:
        fields['amount'] = _check_amount(fields['amount'])
    with repos.atomic:
        current = repos.payments.get(payment_id)
        old_amount, old_patient = to_decimal(current.amount), current.patient_id
        payment = repos.payments.update(payment_id, fields)
        new_amount, new_patient = to_decimal(payment.amount), payment.patient_id
        if str(new_patient) != str(old_patient):
            _post(repos, old_patient, -old_amount, user=user, warn=warn, payment_id=payment.id)
            _post(repos, new_patient, new_amount, user=user, warn=warn, payment_id=payment.id)
        elif new_amount != old_amount:
            _post(repos, new_patient, new_amount - old_amount, user=user, warn=warn, payment_id=payment.id)
    return payment


def delete_payment(payment_id, *, repos: Repositories | None = None, user=None,
                   warn=report_integrity_warning):
    repos = repos or default_repositories()
    with repos.atomic:
        payment = repos.payments.delete(payment_id)
        _post(repos, payment.patient_id, -to_decimal(payment.amount), user=user, warn=warn, payment_id=payment_id)
    return payment


def recalculate_total_paid(patient_id, *, repos: Repositories | None = None, user=None) -> Decimal:
    """Recompute ``total_paid`` from the payment list and store it."""
    repos = repos or default_repositories()
    patient = repos.patients.get(patient_id)
    total = sum((to_decimal(p.amount) for p in repos.payments.list_payments_by_patient(patient_id)), ZERO)
    previous = to_decimal(patient.total_paid)
    if total != previous:
        logger.info("patient %s total_paid drift %s -> %s", patient_id, previous, total)
        repos.patients.set_total_paid(patient_id, total)
        if user is not None:
            log_action(user=user, action='recalculate_balance', object_type='patient', object_id=patient.id,
                       detail={'previous': str(previous), 'total': str(total)})
    return total


def account_for(patient_id, *, repos: Repositories | None = None, as_of=None) -> dict:
    repos = repos or default_repositories()
    patient = repos.patients.get(patient_id)
    payments = repos.payments.list_payments_by_patient(patient_id)
    account = patient_account(patient, payments, as_of=as_of)
    return {'patientId': patient.id, 'name': patient.name, **account.as_dict(), 'payments': payments}
