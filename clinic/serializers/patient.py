from rest_framework import serializers

from clinic.models import Patient
from .common import CigaretteAllowanceSerializer, CleanCharField, money


class PatientSerializer(CigaretteAllowanceSerializer):
    id = serializers.IntegerField(read_only=True)
    name = CleanCharField(max_length=255)
    nationalId = CleanCharField(source='national_id', max_length=32)
    admissionDate = serializers.DateField(source='admission_date')
    dischargeDate = serializers.DateField(source='discharge_date', required=False, allow_null=True)
    roomNumber = CleanCharField(source='room_number', max_length=20, required=False, allow_blank=True)
    insurance = serializers.ChoiceField(choices=Patient.INSURANCE_CHOICES, required=False)
    patientType = serializers.ChoiceField(source='patient_type', choices=Patient.TYPE_CHOICES, required=False)
    dailyCost = money('daily_cost', min_value=0)
    status = serializers.ChoiceField(choices=Patient.STATUS_CHOICES, required=False)
    totalPaid = money('total_paid', read_only=True)
    notes = CleanCharField(required=False, allow_blank=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    def validate_name(self, v):
        v = v.strip()
        if len(v) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters.')
        return v

    def validate_nationalId(self, v):
        v = v.strip()
        qs = Patient.objects.filter(national_id=v)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError('A patient with this national id already exists.')
        return v

    def validate(self, attrs):
        admitted = attrs.get('admission_date', getattr(self.instance, 'admission_date', None))
        discharged = attrs.get('discharge_date', getattr(self.instance, 'discharge_date', None))
        if admitted and discharged and discharged < admitted:
            raise serializers.ValidationError({'dischargeDate': ['Discharge date is before admission.']})
        return attrs


class DischargeSerializer(serializers.Serializer):
    dischargeDate = serializers.DateField(source='discharge_date', required=False)


class GraduateSerializer(CigaretteAllowanceSerializer):
    id = serializers.IntegerField(read_only=True)
    name = CleanCharField(max_length=255)
    isActive = serializers.BooleanField(source='is_active', required=False)
    notes = CleanCharField(required=False, allow_blank=True)
