from datetime import date

from rest_framework import serializers

from clinic.models import Advance, Bonus, Deduction, Payroll
from clinic.services.finance import MAX_REPAYMENT_MONTHS, MIN_REPAYMENT_MONTHS
from .common import CigaretteAllowanceSerializer, CleanCharField, amount_field, money

MONTH_PATTERN = r'^\d{4}-(0[1-9]|1[0-2])$'


class StaffSerializer(CigaretteAllowanceSerializer):
    id = serializers.IntegerField(read_only=True)
    name = CleanCharField(max_length=255)
    role = CleanCharField(max_length=100)
    department = CleanCharField(max_length=100)
    monthlySalary = money('monthly_salary', min_value=0)
    hireDate = serializers.DateField(source='hire_date', default=date.today)
    phoneNumber = CleanCharField(source='phone_number', max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    isActive = serializers.BooleanField(source='is_active', required=False)


class PayrollSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    staffId = serializers.IntegerField(source='staff_id', min_value=1)
    month = serializers.RegexField(MONTH_PATTERN)
    baseSalary = money('base_salary', min_value=0, required=False)
    bonuses = money(min_value=0, required=False)
    advances = money(min_value=0, required=False)
    deductions = money(min_value=0, required=False)
    netSalary = money('net_salary', read_only=True)
    status = serializers.ChoiceField(choices=Payroll.STATUS_CHOICES, required=False)
    paidDate = serializers.DateField(source='paid_date', required=False, allow_null=True)
    advanceShares = serializers.DictField(source='advance_shares', child=serializers.CharField(), read_only=True)
    repaidAt = serializers.DateTimeField(source='repaid_at', read_only=True)
    notes = CleanCharField(required=False, allow_blank=True)
    createdBy = serializers.CharField(source='created_by', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)


class PayrollGenerateSerializer(serializers.Serializer):
    month = serializers.RegexField(MONTH_PATTERN)


class BonusSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    staffId = serializers.IntegerField(source='staff_id', min_value=1)
    amount = amount_field()
    reason = CleanCharField(max_length=255, required=False, allow_blank=True)
    type = serializers.ChoiceField(choices=Bonus.TYPE_CHOICES, default='performance')
    date = serializers.DateField(default=date.today)
    notes = CleanCharField(required=False, allow_blank=True)


class DeductionSerializer(BonusSerializer):
    type = serializers.ChoiceField(choices=Deduction.TYPE_CHOICES, default='penalty')


class AdvanceSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    staffId = serializers.IntegerField(source='staff_id', min_value=1)
    amount = amount_field()
    reason = CleanCharField(max_length=255, required=False, allow_blank=True)
    repaymentMonths = serializers.IntegerField(
        source='repayment_months', min_value=MIN_REPAYMENT_MONTHS, max_value=MAX_REPAYMENT_MONTHS)
    monthlyDeduction = money('monthly_deduction', read_only=True)
    remainingAmount = money('remaining_amount', read_only=True)
    status = serializers.ChoiceField(choices=Advance.STATUS_CHOICES, read_only=True)
    requestDate = serializers.DateField(source='request_date', default=date.today)
    approvedBy = serializers.CharField(source='approved_by', read_only=True)
    notes = CleanCharField(required=False, allow_blank=True)
