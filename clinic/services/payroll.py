"""
Payroll ledger operations.

``net_salary`` is recomputed from its four components on every create and
update, so it never drifts from ``base + bonuses - advances - deductions``.
Monthly generation is idempotent: staff who already have a payroll for the
month are left untouched.
"""
from __future__ import annotations

import logging
from datetime import date

from django.conf import settings
from django.utils import timezone

from clinic.exceptions import ValidationError
from clinic.repositories import Repositories, default_repositories
from clinic.services.finance import (
    DEFAULT_QUANTUM,
    ZERO,
    month_bounds,
    monthly_deduction,
    net_salary,
    to_decimal,
)

logger = logging.getLogger(__name__)

NET_COMPONENTS = ('base_salary', 'bonuses', 'advances', 'deductions')


def currency_quantum():
    return getattr(settings, 'CURRENCY_QUANTUM', DEFAULT_QUANTUM)


def _in_month(value, first: date, last: date) -> bool:
    return value is not None and first <= value <= last


def _reserved_shares(staff_id, *, repos: Repositories, exclude=None) -> dict:
    """Advance amounts already deducted by payrolls that have not been repaid yet."""
    reserved = {}
    for row in repos.payrolls.list_by_staff(staff_id):
        if row.id == exclude or row.repaid_at is not None or row.status == 'cancelled':
            continue
        for advance_id, share in (row.advance_shares or {}).items():
            reserved[str(advance_id)] = reserved.get(str(advance_id), ZERO) + to_decimal(share)
    return reserved


def allocate_advances(staff_id, total=None, *, repos: Repositories, exclude=None) -> dict:
    """Map each outstanding approved advance to the amount one payroll deducts for it.

    An installment never exceeds what is still owed once other unrepaid
    payrolls are counted.  With ``total`` given (a hand-entered ``advances``
    figure) the amount is spread over the advances oldest first and any
    excess stays unattributed.
    """
    reserved = _reserved_shares(staff_id, repos=repos, exclude=exclude)
    left = None if total is None else to_decimal(total)
    shares = {}
    for advance in sorted(repos.advances.list_by_staff(staff_id), key=lambda a: a.id):
        if advance.status != 'approved':
            continue
        owed = to_decimal(advance.remaining_amount) - reserved.get(str(advance.id), ZERO)
        share = min(to_decimal(advance.monthly_deduction), owed)
        if left is not None:
            share = min(share, left)
            left -= max(share, ZERO)
        if share > 0:
            shares[str(advance.id)] = str(share)
    return shares


def month_components(staff, month: str, *, repos: Repositories) -> dict:
    """Bonuses, advance installments and deductions owed to ``staff`` for ``month``."""
    first, last = month_bounds(month)
    bonuses = sum((to_decimal(b.amount) for b in repos.bonuses.list_by_staff(staff.id)
                   if _in_month(b.date, first, last)), ZERO)
    deductions = sum((to_decimal(d.amount) for d in repos.deductions.list_by_staff(staff.id)
                      if _in_month(d.date, first, last)), ZERO)
    shares = allocate_advances(staff.id, repos=repos)
    return {
        'base_salary': to_decimal(staff.monthly_salary),
        'bonuses': bonuses,
        'advances': sum((to_decimal(s) for s in shares.values()), ZERO),
        'deductions': deductions,
        'advance_shares': shares,
    }


def generate_monthly_payroll(month: str, *, repos: Repositories | None = None, user=None) -> tuple[list, list]:
    """Create a pending payroll for every active staff member lacking one.

    Returns ``(created, existing)``.
    """
    repos = repos or default_repositories()
    month_bounds(month)
    created, existing = [], []
    with repos.atomic:
        for staff in repos.staff.list_active_staff():
            payroll = repos.payrolls.find_for(staff.id, month)
            if payroll is not None:
                existing.append(payroll)
                continue
            parts = month_components(staff, month, repos=repos)
            shares = parts.pop('advance_shares')
            created.append(repos.payrolls.create({
                'staff_id': staff.id,
                'month': month,
                **parts,
                'net_salary': net_salary(**parts),
                'advance_shares': shares,
                'status': 'pending',
                'created_by': getattr(user, 'username', '') or '',
            }))
    logger.info("payroll %s: %d created, %d already present", month, len(created), len(existing))
    return created, existing


def create_payroll(fields: dict, *, repos: Repositories | None = None, user=None):
    repos = repos or default_repositories()
    fields = dict(fields)
    month_bounds(fields.get('month') or '')
    if repos.payrolls.find_for(fields.get('staff_id'), fields['month']) is not None:
        raise ValidationError({'month': ['A payroll for this staff member and month already exists.']})
    repos.staff.get(fields.get('staff_id'))
    for name in NET_COMPONENTS:
        fields[name] = to_decimal(fields.get(name))
    fields['net_salary'] = net_salary(*(fields[n] for n in NET_COMPONENTS))
    if user is not None and not fields.get('created_by'):
        fields['created_by'] = getattr(user, 'username', '') or ''
    if fields.get('status') == 'paid' and not fields.get('paid_date'):
        fields['paid_date'] = date.today()
    with repos.atomic:
        fields['advance_shares'] = allocate_advances(fields['staff_id'], fields['advances'], repos=repos)
        fields['repaid_at'] = None
        payroll = repos.payrolls.create(fields)
        if payroll.status == 'paid':
            apply_advance_repayments(payroll, repos=repos)
    return payroll


def update_payroll(payroll_id, fields: dict, *, repos: Repositories | None = None):
    """Partial update; the net is recomputed from the merged components.

    A transition to ``paid`` stamps ``paid_date``.  Once paid, the payroll
    repays the advances it deducted for, a single time.
    """
    repos = repos or default_repositories()
    fields = dict(fields)
    with repos.atomic:
        current = repos.payrolls.get(payroll_id)
        key = (fields.get('staff_id', current.staff_id), fields.get('month', current.month))
        if key != (current.staff_id, current.month) and repos.payrolls.find_for(*key) is not None:
            raise ValidationError({'month': ['A payroll for this staff member and month already exists.']})
        was_paid = current.status == 'paid'
        merged = {n: to_decimal(fields[n] if n in fields else getattr(current, n)) for n in NET_COMPONENTS}
        fields.update({n: merged[n] for n in NET_COMPONENTS if n in fields})
        fields['net_salary'] = net_salary(*(merged[n] for n in NET_COMPONENTS))
        if current.repaid_at is None and ('advances' in fields or key[0] != current.staff_id):
            fields['advance_shares'] = allocate_advances(key[0], merged['advances'], repos=repos,
                                                         exclude=current.id)
        if fields.get('status') == 'paid' and not was_paid and not fields.get('paid_date'):
            fields['paid_date'] = date.today()
        payroll = repos.payrolls.update(payroll_id, fields)
        if payroll.status == 'paid':
            apply_advance_repayments(payroll, repos=repos)
    return payroll


def apply_advance_repayments(payroll, *, repos: Repositories) -> list:
    """Take what ``payroll`` deducted off the advances it deducted it for.

    Stamps ``repaid_at``; a payroll that already carries the stamp is a no-op.
    """
    if payroll.repaid_at is not None:
        return []
    touched = []
    for advance_id, share in (payroll.advance_shares or {}).items():
        advance = repos.advances.find(advance_id)
        if advance is None:
            logger.warning("payroll %s: advance %s no longer exists", payroll.id, advance_id)
            continue
        left = max(ZERO, to_decimal(advance.remaining_amount) - to_decimal(share))
        touched.append(repos.advances.update(advance.id, {'remaining_amount': left}))
    payroll.repaid_at = timezone.now()
    repos.payrolls.update(payroll.id, {'repaid_at': payroll.repaid_at})
    return touched


def create_advance(fields: dict, *, repos: Repositories | None = None):
    repos = repos or default_repositories()
    fields = dict(fields)
    repos.staff.get(fields.get('staff_id'))
    fields['monthly_deduction'] = monthly_deduction(fields.get('amount'), fields.get('repayment_months'),
                                                    currency_quantum())
    fields['amount'] = to_decimal(fields['amount'])
    fields['remaining_amount'] = fields['amount']
    fields.setdefault('status', 'pending')
    fields.setdefault('request_date', date.today())
    return repos.advances.create(fields)


def update_advance(advance_id, fields: dict, *, repos: Repositories | None = None):
    repos = repos or default_repositories()
    fields = dict(fields)
    current = repos.advances.get(advance_id)
    if 'amount' in fields or 'repayment_months' in fields:
        amount = fields.get('amount', current.amount)
        months = fields.get('repayment_months', current.repayment_months)
        fields['monthly_deduction'] = monthly_deduction(amount, months, currency_quantum())
        if 'amount' in fields and 'remaining_amount' not in fields and current.status == 'pending':
            fields['remaining_amount'] = to_decimal(amount)
    return repos.advances.update(advance_id, fields)


def decide_advance(advance_id, approve: bool, *, repos: Repositories | None = None, user=None):
    repos = repos or default_repositories()
    advance = repos.advances.get(advance_id)
    if advance.status != 'pending':
        raise ValidationError({'status': [f'Advance is already {advance.status}.']})
    fields = {'status': 'approved' if approve else 'rejected'}
    if approve:
        fields['approved_by'] = getattr(user, 'username', '') or ''
    return repos.advances.update(advance_id, fields)
