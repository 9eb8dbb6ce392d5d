from datetime import date
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command

from clinic.models import Patient, Payment, Staff, User
from clinic.permissions import default_permissions

pytestmark = pytest.mark.django_db


def test_ensure_default_users_is_idempotent():
    call_command('ensure_default_users', '--password', 'Xy!90-long', stdout=StringIO())
    call_command('ensure_default_users', '--password', 'Xy!90-long', stdout=StringIO())
    assert User.objects.count() == 5
    nurse = User.objects.get(username='nurse1')
    assert nurse.role == 'nurse'
    assert nurse.check_password('Xy!90-long')
    assert nurse.permissions == default_permissions('nurse')


def test_ensure_default_users_keeps_custom_permissions_unless_reset():
    call_command('ensure_default_users', stdout=StringIO())
    User.objects.filter(username='nurse1').update(permissions=['view_patients'])
    call_command('ensure_default_users', stdout=StringIO())
    assert User.objects.get(username='nurse1').permissions == ['view_patients']
    call_command('ensure_default_users', '--reset-permissions', stdout=StringIO())
    assert User.objects.get(username='nurse1').permissions == default_permissions('nurse')


def test_recalculate_balances():
    p = Patient.objects.create(name='Karim', national_id='1', admission_date=date(2024, 1, 1),
                               daily_cost=Decimal('100'), total_paid=Decimal('5'))
    Payment.objects.create(patient_id=p.id, amount=Decimal('40'), payment_date=date(2024, 1, 2))
    out = StringIO()
    call_command('recalculate_balances', stdout=out)
    p.refresh_from_db()
    assert p.total_paid == Decimal('40')
    assert 'corrected 1' in out.getvalue()


def test_backfill_defaults():
    s = Staff.objects.create(name='Ali', role='cook', department='kitchen', monthly_salary=Decimal('1'),
                             hire_date=date(2020, 1, 1))
    Staff.objects.filter(pk=s.pk).update(daily_cigarette_type='', daily_cigarette_cost=Decimal('9'))
    call_command('backfill_defaults', '--dry-run', stdout=StringIO())
    assert Staff.objects.get(pk=s.pk).daily_cigarette_type == ''
    call_command('backfill_defaults', stdout=StringIO())
    s.refresh_from_db()
    assert (s.daily_cigarette_type, s.daily_cigarette_cost) == ('none', Decimal('0'))
