"""
Financial aggregation for patients, payroll and the cigarette allowance.

Everything here is a pure function over values handed in by the caller:
no ORM access, no settings lookups, no clock reads unless ``as_of`` is
omitted.  Records are read by attribute (``patient.daily_cost``), so Django
model instances and plain namespaces work alike.  All money is
``Decimal``; floats are converted through ``str`` to avoid binary noise.
"""
from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping

from clinic.exceptions import ValidationError

ZERO = Decimal('0')
DEFAULT_QUANTUM = Decimal('0.01')
MIN_REPAYMENT_MONTHS = 1
MAX_REPAYMENT_MONTHS = 24
DAYS_PER_MONTH = 30

DEFAULT_PACK_PRICES: dict[str, Decimal] = {
    'none': Decimal('0'),
    'half_pack': Decimal('25'),
    'full_pack': Decimal('50'),
}

STATE_OWING = 'owing'
STATE_SETTLED = 'settled'
STATE_OVERPAID = 'overpaid'


def to_decimal(value) -> Decimal:
    if value is None or value == '':
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _amount(item) -> Decimal:
    return to_decimal(getattr(item, 'amount', item))


def _as_datetime(value, tzinfo=None) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day, tzinfo=tzinfo)


def days_between(start, end) -> int:
    """Whole days from ``start`` to ``end``, rounded up, never negative.

    Accepts dates or datetimes; a partial day counts as a full one.
    """
    if start is None or end is None:
        return 0
    if isinstance(start, datetime) or isinstance(end, datetime):
        tz = getattr(start, 'tzinfo', None) or getattr(end, 'tzinfo', None)
        start_dt, end_dt = _as_datetime(start, tz), _as_datetime(end, tz)
        if (start_dt.tzinfo is None) != (end_dt.tzinfo is None):
            start_dt = start_dt.replace(tzinfo=tz)
            end_dt = end_dt.replace(tzinfo=tz)
        seconds = (end_dt - start_dt).total_seconds()
        return max(0, math.ceil(seconds / 86400))
    return max(0, (end - start).days)


def balance_state(balance: Decimal) -> str:
    if balance > 0:
        return STATE_OWING
    if balance < 0:
        return STATE_OVERPAID
    return STATE_SETTLED


@dataclass(frozen=True)
class PatientAccount:
    days: int
    daily_cost: Decimal
    daily_cigarette_cost: Decimal
    total_treatment_cost: Decimal
    total_cigarette_cost: Decimal
    grand_total: Decimal
    total_paid: Decimal
    balance: Decimal
    state: str

    def as_dict(self) -> dict:
        return {
            'days': self.days,
            'dailyCost': self.daily_cost,
            'dailyCigaretteCost': self.daily_cigarette_cost,
            'totalTreatmentCost': self.total_treatment_cost,
            'totalCigaretteCost': self.total_cigarette_cost,
            'grandTotal': self.grand_total,
            'totalPaid': self.total_paid,
            'balance': self.balance,
            'state': self.state,
        }


def patient_account(patient, payments: Iterable, as_of: date | None = None) -> PatientAccount:
    """Account statement of a patient, always recomputed from ``payments``.

    The stay ends at the discharge date when one is set, otherwise at
    ``as_of`` (today by default).  ``balance > 0`` means the patient owes,
    ``balance < 0`` means they overpaid.
    """
    end = getattr(patient, 'discharge_date', None) or as_of or date.today()
    days = days_between(patient.admission_date, end)
    daily_cost = to_decimal(patient.daily_cost)
    daily_cig = to_decimal(getattr(patient, 'daily_cigarette_cost', None))
    treatment = daily_cost * days
    cigarettes = daily_cig * days
    grand_total = treatment + cigarettes
    total_paid = sum((_amount(p) for p in payments), ZERO)
    balance = grand_total - total_paid
    return PatientAccount(
        days=days,
        daily_cost=daily_cost,
        daily_cigarette_cost=daily_cig,
        total_treatment_cost=treatment,
        total_cigarette_cost=cigarettes,
        grand_total=grand_total,
        total_paid=total_paid,
        balance=balance,
        state=balance_state(balance),
    )


def net_salary(base_salary, bonuses, advances, deductions) -> Decimal:
    """``base + bonuses - advances - deductions``; may go negative."""
    return to_decimal(base_salary) + to_decimal(bonuses) - to_decimal(advances) - to_decimal(deductions)


def monthly_deduction(amount, repayment_months, quantum: Decimal = DEFAULT_QUANTUM) -> Decimal:
    """Installment of an advance, rounded half-up to ``quantum``."""
    errors = {}
    amount = to_decimal(amount)
    if amount <= 0:
        errors['amount'] = ['Amount must be greater than zero.']
    try:
        months = int(repayment_months)
    except (TypeError, ValueError):
        months = 0
    if not MIN_REPAYMENT_MONTHS <= months <= MAX_REPAYMENT_MONTHS:
        errors['repaymentMonths'] = [
            f'Repayment months must be between {MIN_REPAYMENT_MONTHS} and {MAX_REPAYMENT_MONTHS}.'
        ]
    if errors:
        raise ValidationError(errors)
    return (amount / Decimal(months)).quantize(quantum, rounding=ROUND_HALF_UP)


def cigarette_cost(cigarette_type: str | None, prices: Mapping[str, Decimal] | None = None) -> Decimal:
    prices = prices or DEFAULT_PACK_PRICES
    return to_decimal(prices.get(cigarette_type or 'none', ZERO))


def resolve_cigarette_cost(cigarette_type: str | None, explicit=None,
                           prices: Mapping[str, Decimal] | None = None) -> Decimal:
    """Stored daily cost: the explicit override if given, else the pack price."""
    if explicit is not None and explicit != '':
        return to_decimal(explicit)
    return cigarette_cost(cigarette_type, prices)


def _effective_cost(person, prices) -> Decimal:
    stored = to_decimal(getattr(person, 'daily_cigarette_cost', None))
    if stored:
        return stored
    return cigarette_cost(getattr(person, 'daily_cigarette_type', None), prices)


def cigarette_stats(people: Iterable, prices: Mapping[str, Decimal] | None = None) -> dict:
    total = ZERO
    full = half = active = inactive = count = 0
    for person in people:
        count += 1
        kind = getattr(person, 'daily_cigarette_type', None) or 'none'
        total += _effective_cost(person, prices)
        if kind == 'full_pack':
            full += 1
        elif kind == 'half_pack':
            half += 1
        if kind == 'none':
            inactive += 1
        else:
            active += 1
    return {
        'count': count,
        'totalDailyCost': total,
        'fullPackCount': full,
        'halfPackCount': half,
        'totalPacksRequested': Decimal(full) + Decimal('0.5') * half,
        'activeCount': active,
        'inactiveCount': inactive,
    }


def grouped_cigarette_stats(detox_patients: Iterable, recovery_patients: Iterable, graduates: Iterable,
                            staff: Iterable, prices: Mapping[str, Decimal] | None = None) -> dict:
    """Per-group statistics plus grand totals that equal the sum of the groups."""
    groups = {
        'detoxPatients': cigarette_stats(detox_patients, prices),
        'recoveryPatients': cigarette_stats(recovery_patients, prices),
        'graduates': cigarette_stats(graduates, prices),
        'staff': cigarette_stats(staff, prices),
    }
    totals = {key: sum(g[key] for g in groups.values()) for key in groups['staff']}
    totals['monthlyProjection'] = totals['totalDailyCost'] * DAYS_PER_MONTH
    return {'groups': groups, 'totals': totals}


def cigarette_payment_totals(payments: Iterable) -> dict:
    """Σ amount per person type, split by cash and in-kind payments."""
    out: dict = defaultdict(lambda: {'cash': ZERO, 'cigarettes': ZERO, 'total': ZERO})
    for p in payments:
        row = out[p.person_type]
        amount = _amount(p)
        row[p.payment_type if p.payment_type in ('cash', 'cigarettes') else 'cash'] += amount
        row['total'] += amount
    return dict(out)


def dashboard_stats(active_patients: Iterable, payments_by_patient: Mapping, *, active_staff_count: int,
                    today_payments: Iterable, today_expenses: Iterable, today: date,
                    bed_capacity: int = 100, collection_due_days: int = 7) -> dict:
    """Front-page figures.

    ``payments_by_patient`` maps a patient id to that patient's payments;
    ``today_payments`` and ``today_expenses`` are the records dated ``today``.
    """
    patients = list(active_patients)
    today_payments = list(today_payments)
    income = sum((_amount(p) for p in today_payments), ZERO)
    expenses = sum((_amount(e) for e in today_expenses), ZERO)
    paid_today = {p.patient_id for p in today_payments}

    pending = ZERO
    due = []
    for patient in patients:
        account = patient_account(patient, payments_by_patient.get(patient.id, ()), as_of=today)
        owed = max(ZERO, account.balance)
        pending += owed
        if account.days >= collection_due_days and patient.id not in paid_today:
            due.append({
                'patientId': patient.id,
                'name': patient.name,
                'roomNumber': getattr(patient, 'room_number', ''),
                'days': account.days,
                'balance': account.balance,
                'expected': owed,
            })

    if bed_capacity > 0:
        occupancy = min(Decimal(100), Decimal(len(patients)) / Decimal(bed_capacity) * 100)
    else:
        occupancy = Decimal(100) if patients else ZERO
    return {
        'activePatients': len(patients),
        'activeStaff': active_staff_count,
        'todayIncome': income,
        'todayExpenses': expenses,
        'netProfit': income - expenses,
        'occupancyRate': occupancy.quantize(DEFAULT_QUANTUM, rounding=ROUND_HALF_UP),
        'pendingPayments': pending,
        'collectionDue': due,
        'expectedCollection': sum((d['expected'] for d in due), ZERO),
    }


def _in_range(value, start: date | None, end: date | None) -> bool:
    if value is None:
        return False
    if isinstance(value, datetime):
        value = value.date()
    return (start is None or value >= start) and (end is None or value <= end)


def report_summary(payments: Iterable, expenses: Iterable, patients: Iterable,
                   start: date | None = None, end: date | None = None) -> dict:
    """Income/expense totals over ``[start, end]`` (inclusive, open when None)."""
    payments = [p for p in payments if _in_range(p.payment_date, start, end)]
    expenses = [e for e in expenses if _in_range(e.date, start, end)]
    by_method: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for p in payments:
        by_method[p.payment_method] += _amount(p)
    by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for e in expenses:
        by_category[e.category] += _amount(e)
    patients = list(patients)
    total_payments = sum(by_method.values(), ZERO)
    total_expenses = sum(by_category.values(), ZERO)
    return {
        'from': start,
        'to': end,
        'totalPayments': total_payments,
        'totalExpenses': total_expenses,
        'net': total_payments - total_expenses,
        'paymentCount': len(payments),
        'expenseCount': len(expenses),
        'paymentsByMethod': dict(by_method),
        'expensesByCategory': dict(by_category),
        'admissions': sum(1 for p in patients if _in_range(p.admission_date, start, end)),
        'discharges': sum(1 for p in patients if _in_range(getattr(p, 'discharge_date', None), start, end)),
    }


def month_bounds(month: str) -> tuple[date, date]:
    """First and last day of a ``YYYY-MM`` month."""
    try:
        year, mon = (int(part) for part in month.split('-'))
        first = date(year, mon, 1)
    except (AttributeError, ValueError):
        raise ValidationError({'month': ['Month must be formatted as YYYY-MM.']})
    following = date(year + (mon == 12), mon % 12 + 1, 1)
    return first, following - timedelta(days=1)
