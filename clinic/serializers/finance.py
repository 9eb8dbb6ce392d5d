from datetime import date

from rest_framework import serializers

from clinic.models import CigarettePayment, Payment
from .common import CleanCharField, amount_field


class PaymentSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    patientId = serializers.IntegerField(source='patient_id', min_value=1)
    amount = amount_field()
    paymentDate = serializers.DateField(source='payment_date', default=date.today)
    paymentMethod = serializers.ChoiceField(source='payment_method', choices=Payment.METHOD_CHOICES, default='cash')
    notes = CleanCharField(required=False, allow_blank=True)
    createdBy = serializers.CharField(source='created_by', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)


class ExpenseSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    description = CleanCharField(max_length=255)
    amount = amount_field()
    category = CleanCharField(max_length=100)
    date = serializers.DateField(default=date.today)
    createdBy = serializers.CharField(source='created_by', read_only=True)


class CigarettePaymentSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    personType = serializers.ChoiceField(source='person_type', choices=CigarettePayment.PERSON_TYPE_CHOICES)
    personId = serializers.IntegerField(source='person_id', min_value=1)
    personName = CleanCharField(source='person_name', max_length=255, required=False, allow_blank=True)
    paymentType = serializers.ChoiceField(source='payment_type', choices=CigarettePayment.PAYMENT_TYPE_CHOICES,
                                          default='cash')
    amount = amount_field()
    date = serializers.DateField(default=date.today)
    notes = CleanCharField(required=False, allow_blank=True)
    createdBy = serializers.CharField(source='created_by', read_only=True)


class ReportQuerySerializer(serializers.Serializer):
    # `from` is a keyword, so the range bounds are declared in __init__
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['from'] = serializers.DateField(required=False)
        self.fields['to'] = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get('from'), attrs.get('to')
        if start and end and end < start:
            raise serializers.ValidationError({'to': ['End date is before start date.']})
        return attrs
