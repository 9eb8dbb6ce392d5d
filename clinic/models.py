"""
Database models for the rehab center backend.

These models capture the administrative records of the center: patients
and their payments, staff with the payroll ledger (payrolls, bonuses,
advances, deductions), graduates on the cigarette allowance, expenses,
system users and the settings singleton.  Field names mirror the JSON
exposed by the front-end so that serialization stays a thin mapping.
"""
from __future__ import annotations

from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

MONEY = dict(max_digits=12, decimal_places=2)

CIGARETTE_TYPE_CHOICES = [
    ('none', 'None'),
    ('half_pack', 'Half pack'),
    ('full_pack', 'Full pack'),
]


class User(AbstractUser):
    """System account with a role and an explicit permission list.

    ``permissions`` is seeded from the role table when the account is
    created; the ``admin`` role passes every check regardless of it.
    """
    ROLE_CHOICES = [
        ('admin', 'Administrator'),
        ('doctor', 'Doctor'),
        ('nurse', 'Nurse'),
        ('receptionist', 'Receptionist'),
        ('accountant', 'Accountant'),
    ]
    full_name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='receptionist', db_index=True)
    permissions = models.JSONField(default=list, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Patient(models.Model):
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('discharged', 'Discharged'),
    ]
    INSURANCE_CHOICES = [
        ('none', 'None'),
        ('government', 'Government'),
        ('private', 'Private'),
        ('company', 'Company'),
    ]
    TYPE_CHOICES = [
        ('detox', 'Detox'),
        ('recovery', 'Recovery'),
    ]
    name = models.CharField(max_length=255)
    national_id = models.CharField(max_length=32, unique=True)
    admission_date = models.DateField()
    discharge_date = models.DateField(null=True, blank=True)
    room_number = models.CharField(max_length=20, blank=True)
    insurance = models.CharField(max_length=20, choices=INSURANCE_CHOICES, default='none')
    patient_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='detox', db_index=True)
    daily_cost = models.DecimalField(**MONEY, validators=[MinValueValidator(Decimal('0'))])
    daily_cigarette_type = models.CharField(max_length=20, choices=CIGARETTE_TYPE_CHOICES, default='none')
    daily_cigarette_cost = models.DecimalField(**MONEY, default=Decimal('0'))
    # list views filter on status constantly
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active', db_index=True)
    # Running sum of payment amounts, only ever changed through an atomic UPDATE.
    total_paid = models.DecimalField(**MONEY, default=Decimal('0'))
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.national_id})"


class Payment(models.Model):
    METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('card', 'Card'),
        ('transfer', 'Transfer'),
        ('check', 'Check'),
    ]
    # Not a foreign key: a payment survives even if its patient is gone.
    patient_id = models.BigIntegerField(db_index=True)
    amount = models.DecimalField(**MONEY)
    payment_date = models.DateField(db_index=True)
    payment_method = models.CharField(max_length=20, choices=METHOD_CHOICES, default='cash')
    notes = models.TextField(blank=True)
    created_by = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['patient_id', 'payment_date'], name='payment_patient_date_idx'),
        ]

    def __str__(self) -> str:
        return f"Payment {self.amount} for patient {self.patient_id}"


class Staff(models.Model):
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=100)
    department = models.CharField(max_length=100)
    monthly_salary = models.DecimalField(**MONEY, validators=[MinValueValidator(Decimal('0'))])
    hire_date = models.DateField()
    phone_number = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    daily_cigarette_type = models.CharField(max_length=20, choices=CIGARETTE_TYPE_CHOICES, default='none')
    daily_cigarette_cost = models.DecimalField(**MONEY, default=Decimal('0'))
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        verbose_name_plural = 'staff'

    def __str__(self) -> str:
        return f"{self.name} ({self.role})"


class Payroll(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('cancelled', 'Cancelled'),
    ]
    staff_id = models.BigIntegerField(db_index=True)
    month = models.CharField(max_length=7, help_text="YYYY-MM")
    base_salary = models.DecimalField(**MONEY, default=Decimal('0'))
    bonuses = models.DecimalField(**MONEY, default=Decimal('0'))
    advances = models.DecimalField(**MONEY, default=Decimal('0'))
    deductions = models.DecimalField(**MONEY, default=Decimal('0'))
    net_salary = models.DecimalField(**MONEY, default=Decimal('0'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    paid_date = models.DateField(null=True, blank=True)
    advance_shares = models.JSONField(default=dict, blank=True, help_text="advance id -> amount deducted")
    repaid_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_by = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('staff_id', 'month')]

    def __str__(self) -> str:
        return f"Payroll {self.month} staff={self.staff_id} net={self.net_salary}"


class Bonus(models.Model):
    TYPE_CHOICES = [
        ('performance', 'Performance'),
        ('holiday', 'Holiday'),
        ('overtime', 'Overtime'),
        ('special', 'Special'),
        ('other', 'Other'),
    ]
    staff_id = models.BigIntegerField(db_index=True)
    amount = models.DecimalField(**MONEY)
    reason = models.CharField(max_length=255, blank=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='performance')
    date = models.DateField()
    notes = models.TextField(blank=True)

    class Meta:
        verbose_name_plural = 'bonuses'

    def __str__(self) -> str:
        return f"Bonus {self.amount} staff={self.staff_id}"


class Advance(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]
    staff_id = models.BigIntegerField(db_index=True)
    amount = models.DecimalField(**MONEY)
    reason = models.CharField(max_length=255, blank=True)
    repayment_months = models.PositiveSmallIntegerField(
        default=1, validators=[MinValueValidator(1), MaxValueValidator(24)]
    )
    monthly_deduction = models.DecimalField(**MONEY, default=Decimal('0'))
    remaining_amount = models.DecimalField(**MONEY, default=Decimal('0'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    request_date = models.DateField()
    approved_by = models.CharField(max_length=150, blank=True)
    notes = models.TextField(blank=True)

    def __str__(self) -> str:
        return f"Advance {self.amount}/{self.repayment_months}m staff={self.staff_id}"


class Deduction(models.Model):
    TYPE_CHOICES = [
        ('absence', 'Absence'),
        ('late', 'Late'),
        ('penalty', 'Penalty'),
        ('insurance', 'Insurance'),
        ('tax', 'Tax'),
        ('loan_repayment', 'Loan repayment'),
        ('other', 'Other'),
    ]
    staff_id = models.BigIntegerField(db_index=True)
    amount = models.DecimalField(**MONEY)
    reason = models.CharField(max_length=255, blank=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='penalty')
    date = models.DateField()
    notes = models.TextField(blank=True)

    def __str__(self) -> str:
        return f"Deduction {self.amount} staff={self.staff_id}"


class Graduate(models.Model):
    """A former patient who still receives the daily cigarette allowance."""
    name = models.CharField(max_length=255)
    daily_cigarette_type = models.CharField(max_length=20, choices=CIGARETTE_TYPE_CHOICES, default='none')
    daily_cigarette_cost = models.DecimalField(**MONEY, default=Decimal('0'))
    is_active = models.BooleanField(default=True, db_index=True)
    notes = models.TextField(blank=True)

    def __str__(self) -> str:
        return self.name


class Expense(models.Model):
    description = models.CharField(max_length=255)
    amount = models.DecimalField(**MONEY)
    category = models.CharField(max_length=100, db_index=True)
    date = models.DateField(db_index=True)
    created_by = models.CharField(max_length=150, blank=True)

    def __str__(self) -> str:
        return f"{self.description} ({self.amount})"


class CigarettePayment(models.Model):
    PERSON_TYPE_CHOICES = [
        ('patient', 'Patient'),
        ('graduate', 'Graduate'),
        ('staff', 'Staff'),
    ]
    PAYMENT_TYPE_CHOICES = [
        ('cash', 'Cash'),
        ('cigarettes', 'Cigarettes'),
    ]
    person_type = models.CharField(max_length=20, choices=PERSON_TYPE_CHOICES)
    person_id = models.BigIntegerField()
    person_name = models.CharField(max_length=255, blank=True)
    payment_type = models.CharField(max_length=20, choices=PAYMENT_TYPE_CHOICES, default='cash')
    amount = models.DecimalField(**MONEY)
    date = models.DateField(db_index=True)
    notes = models.TextField(blank=True)
    created_by = models.CharField(max_length=150, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['person_type', 'person_id'], name='cigpay_person_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.person_type}:{self.person_id} {self.amount}"


class Settings(models.Model):
    """Center-wide settings; a single row with pk=1."""
    hospital_name = models.CharField(max_length=255, default='Dar Al Hayat Rehab Center')
    default_currency = models.CharField(max_length=16, default='EGP')
    username = models.CharField(max_length=150, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    patient_alerts = models.BooleanField(default=True)
    payment_alerts = models.BooleanField(default=True)
    staff_alerts = models.BooleanField(default=True)
    financial_alerts = models.BooleanField(default=True)
    auto_backup = models.BooleanField(default=True)
    data_compression = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'settings'

    def __str__(self) -> str:
        return self.hospital_name


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.BigIntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.object_type}:{self.object_id}"
