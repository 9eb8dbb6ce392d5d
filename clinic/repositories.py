"""
Entity repositories backed by the Django ORM.

Each repository offers the same small CRUD surface (``list``, ``get``,
``find``, ``create``, ``update``, ``delete``) plus the filtered variants the
services need.  Services receive a :class:`Repositories` bundle instead of
touching managers directly, which lets tests swap in an in-memory store
with the same contract.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import DecimalField, F, Value
from django.db.models.functions import Greatest

from .exceptions import NotFound
from .models import (
    Advance,
    Bonus,
    CigarettePayment,
    Deduction,
    Expense,
    Graduate,
    Patient,
    Payment,
    Payroll,
    Settings,
    Staff,
    User,
)
from .permissions import default_permissions

logger = logging.getLogger(__name__)


class ModelRepository:
    model = None
    ordering: tuple[str, ...] = ('id',)

    def __init__(self, model=None):
        if model is not None:
            self.model = model
        self.label = self.model._meta.verbose_name

    def queryset(self):
        return self.model.objects.all().order_by(*self.ordering)

    def list(self, **filters) -> list:
        return list(self.queryset().filter(**filters))

    def find(self, pk):
        if pk in (None, ''):
            return None
        return self.model.objects.filter(pk=pk).first()

    def get(self, pk):
        obj = self.find(pk)
        if obj is None:
            raise NotFound(f'{self.label} {pk} not found')
        return obj

    def create(self, fields: dict):
        return self.model.objects.create(**fields)

    def update(self, pk, fields: dict):
        obj = self.get(pk)
        for name, value in fields.items():
            setattr(obj, name, value)
        if fields:
            obj.save(update_fields=list(fields))
        return obj

    def delete(self, pk):
        obj = self.get(pk)
        obj.delete()
        # keep the id on the returned record for callers that report it
        obj.id = obj.pk = int(pk)
        return obj


class PatientRepository(ModelRepository):
    model = Patient

    def list_active_patients(self) -> list:
        return self.list(status='active')

    def increment_total_paid(self, patient_id, delta) -> bool:
        """Atomically add ``delta`` to ``total_paid``, clamping at zero.

        Runs as one ``UPDATE`` so concurrent postings never lose an
        increment.  Returns False when the patient does not exist.
        """
        money = DecimalField(max_digits=12, decimal_places=2)
        with transaction.atomic():
            updated = Patient.objects.filter(pk=patient_id).update(
                total_paid=Greatest(
                    F('total_paid') + Value(Decimal(delta), output_field=money),
                    Value(Decimal('0'), output_field=money),
                    output_field=money,
                )
            )
        return updated > 0

    def set_total_paid(self, patient_id, value) -> bool:
        return Patient.objects.filter(pk=patient_id).update(total_paid=value) > 0


class StaffRepository(ModelRepository):
    model = Staff

    def list_active_staff(self) -> list:
        return self.list(is_active=True)


class PaymentRepository(ModelRepository):
    model = Payment
    ordering = ('-payment_date', '-id')

    def list_payments_by_patient(self, patient_id) -> list:
        return self.list(patient_id=patient_id)

    def list_by_date(self, day) -> list:
        return self.list(payment_date=day)


class StaffLedgerRepository(ModelRepository):
    """Payrolls, bonuses, advances and deductions all hang off a staff id."""

    ordering = ('-id',)

    def list_by_staff(self, staff_id) -> list:
        return self.list(staff_id=staff_id)


class PayrollRepository(StaffLedgerRepository):
    model = Payroll

    def list_by_month(self, month: str) -> list:
        return self.list(month=month)

    def find_for(self, staff_id, month: str):
        return Payroll.objects.filter(staff_id=staff_id, month=month).first()


class GraduateRepository(ModelRepository):
    model = Graduate

    def list_active_graduates(self) -> list:
        return self.list(is_active=True)


class ExpenseRepository(ModelRepository):
    model = Expense
    ordering = ('-date', '-id')

    def list_by_date(self, day) -> list:
        return self.list(date=day)


class UserRepository(ModelRepository):
    model = User
    ordering = ('username',)

    def list_active(self) -> list:
        return self.list(is_active=True)

    def create(self, fields: dict):
        fields = dict(fields)
        password = fields.pop('password', None)
        if not fields.get('permissions'):
            fields['permissions'] = default_permissions(fields.get('role', ''))
        return User.objects.create_user(password=password, **fields)

    def update(self, pk, fields: dict):
        fields = dict(fields)
        password = fields.pop('password', None)
        if 'role' in fields and 'permissions' not in fields:
            fields['permissions'] = default_permissions(fields['role'])
        user = super().update(pk, fields)
        if password:
            user.set_password(password)
            user.save(update_fields=['password'])
        return user


class SettingsRepository(ModelRepository):
    model = Settings

    def load(self):
        obj, _ = Settings.objects.get_or_create(pk=1)
        return obj

    def update(self, pk, fields: dict):
        self.load()
        return super().update(1, fields)


class Repositories:
    """The set of repositories a service works against."""

    def __init__(self, **repos):
        self.patients = repos.get('patients') or PatientRepository()
        self.payments = repos.get('payments') or PaymentRepository()
        self.staff = repos.get('staff') or StaffRepository()
        self.payrolls = repos.get('payrolls') or PayrollRepository()
        self.bonuses = repos.get('bonuses') or StaffLedgerRepository(Bonus)
        self.advances = repos.get('advances') or StaffLedgerRepository(Advance)
        self.deductions = repos.get('deductions') or StaffLedgerRepository(Deduction)
        self.graduates = repos.get('graduates') or GraduateRepository()
        self.expenses = repos.get('expenses') or ExpenseRepository()
        self.cigarette_payments = repos.get('cigarette_payments') or ModelRepository(CigarettePayment)
        self.users = repos.get('users') or UserRepository()
        self.settings = repos.get('settings') or SettingsRepository()

    @property
    def atomic(self):
        """Context manager wrapping a multi-record write."""
        return transaction.atomic()


def default_repositories() -> Repositories:
    return Repositories()
