from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from clinic.models import User
from clinic.permissions import ALL_PERMISSIONS
from .common import CleanCharField


class UserSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    username = serializers.RegexField(r'^[\w.@+-]+$', max_length=150)
    fullName = CleanCharField(source='full_name', max_length=255, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)
    permissions = serializers.ListField(child=serializers.ChoiceField(choices=ALL_PERMISSIONS), required=False)
    isActive = serializers.BooleanField(source='is_active', required=False)
    lastLogin = serializers.DateTimeField(source='last_login', read_only=True)
    password = serializers.CharField(write_only=True, required=False, style={'input_type': 'password'})

    def validate_username(self, v):
        qs = User.objects.filter(username__iexact=v)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError('This username is taken.')
        return v

    def validate_password(self, v):
        try:
            validate_password(v, user=self.instance)
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.messages)
        return v

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': ['This field is required.']})
        return attrs


class SettingsSerializer(serializers.Serializer):
    hospitalName = CleanCharField(source='hospital_name', max_length=255, required=False)
    defaultCurrency = CleanCharField(source='default_currency', max_length=16, required=False)
    username = CleanCharField(max_length=150, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = CleanCharField(max_length=32, required=False, allow_blank=True)
    patientAlerts = serializers.BooleanField(source='patient_alerts', required=False)
    paymentAlerts = serializers.BooleanField(source='payment_alerts', required=False)
    staffAlerts = serializers.BooleanField(source='staff_alerts', required=False)
    financialAlerts = serializers.BooleanField(source='financial_alerts', required=False)
    autoBackup = serializers.BooleanField(source='auto_backup', required=False)
    dataCompression = serializers.BooleanField(source='data_compression', required=False)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
