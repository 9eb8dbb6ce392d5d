"""
Django admin registrations for the clinic models.

Superusers can inspect and correct records through ``/admin/``.  Patient
``total_paid`` is read-only here: it must only move through payment
posting (or the ``recalculate_balances`` command).
"""

from django.contrib import admin

from .models import (
    Advance,
    AuditEvent,
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


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'full_name', 'role', 'is_active', 'last_login')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'full_name', 'email')
    exclude = ('password',)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('name', 'national_id', 'patient_type', 'status', 'admission_date', 'daily_cost', 'total_paid')
    list_filter = ('status', 'patient_type', 'insurance', 'daily_cigarette_type')
    search_fields = ('name', 'national_id', 'room_number')
    readonly_fields = ('total_paid',)


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient_id', 'amount', 'payment_date', 'payment_method', 'created_by')
    list_filter = ('payment_method',)
    search_fields = ('patient_id', 'created_by')
    date_hierarchy = 'payment_date'


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ('name', 'role', 'department', 'monthly_salary', 'is_active')
    list_filter = ('department', 'is_active')
    search_fields = ('name', 'phone_number', 'email')


@admin.register(Payroll)
class PayrollAdmin(admin.ModelAdmin):
    list_display = ('staff_id', 'month', 'base_salary', 'bonuses', 'advances', 'deductions', 'net_salary', 'status')
    list_filter = ('status', 'month')
    readonly_fields = ('net_salary', 'advance_shares', 'repaid_at')


@admin.register(Advance)
class AdvanceAdmin(admin.ModelAdmin):
    list_display = ('staff_id', 'amount', 'repayment_months', 'monthly_deduction', 'remaining_amount', 'status')
    list_filter = ('status',)


@admin.register(Bonus)
class BonusAdmin(admin.ModelAdmin):
    list_display = ('staff_id', 'amount', 'type', 'date')
    list_filter = ('type',)


@admin.register(Deduction)
class DeductionAdmin(admin.ModelAdmin):
    list_display = ('staff_id', 'amount', 'type', 'date')
    list_filter = ('type',)


@admin.register(Graduate)
class GraduateAdmin(admin.ModelAdmin):
    list_display = ('name', 'daily_cigarette_type', 'daily_cigarette_cost', 'is_active')
    list_filter = ('is_active', 'daily_cigarette_type')
    search_fields = ('name',)


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ('description', 'amount', 'category', 'date', 'created_by')
    list_filter = ('category',)
    date_hierarchy = 'date'


@admin.register(CigarettePayment)
class CigarettePaymentAdmin(admin.ModelAdmin):
    list_display = ('person_type', 'person_name', 'payment_type', 'amount', 'date')
    list_filter = ('person_type', 'payment_type')


admin.site.register(Settings)


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'object_type', 'object_id', 'user', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('action', 'user__username')
