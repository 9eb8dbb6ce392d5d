"""
Patient management views.

Listing and reading patients needs ``view_patients``; admission, edits,
discharge and deletion need ``manage_patients``.  The account statement
is open to callers with either ``view_finance`` or ``view_patients``.
"""
from __future__ import annotations

from datetime import date

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from clinic.exceptions import ValidationError
from clinic.permissions import (
    MANAGE_FINANCE,
    MANAGE_PATIENTS,
    VIEW_FINANCE,
    VIEW_PATIENTS,
    read_write,
    require_any,
    require_permission,
)
from clinic.realtime.events import broadcast_refresh
from clinic.repositories import default_repositories
from clinic.serializers.finance import PaymentSerializer
from clinic.serializers.patient import DischargeSerializer, PatientSerializer
from clinic.services.audit import log_action
from clinic.services.cigarettes import apply_cigarette_cost
from clinic.services.payments import account_for, recalculate_total_paid
from .common import list_or_create, retrieve_update_destroy, validated


@api_view(['GET', 'POST'])
@permission_classes([read_write(VIEW_PATIENTS, MANAGE_PATIENTS)])
def patients_list(request):
    repos = default_repositories()
    records = None
    status_filter = request.query_params.get('status')
    patient_type = request.query_params.get('patientType')
    if request.method == 'GET' and (status_filter or patient_type):
        filters = {}
        if status_filter:
            filters['status'] = status_filter
        if patient_type:
            filters['patient_type'] = patient_type
        records = repos.patients.list(**filters)
    return list_or_create(
        request, repos.patients, PatientSerializer,
        create=lambda fields: repos.patients.create(apply_cigarette_cost(fields)),
        records=records, refresh='patients',
    )


@api_view(['GET'])
@permission_classes([require_permission(VIEW_PATIENTS)])
def patients_active(request):
    repos = default_repositories()
    return Response(PatientSerializer(repos.patients.list_active_patients(), many=True).data)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([read_write(VIEW_PATIENTS, MANAGE_PATIENTS)])
def patient_detail(request, pk: int):
    repos = default_repositories()
    return retrieve_update_destroy(
        request, pk, repos.patients, PatientSerializer,
        update=lambda pk, fields, obj: repos.patients.update(pk, apply_cigarette_cost(fields, obj)),
        refresh='patients', audit='patient',
    )


@api_view(['POST'])
@permission_classes([require_permission(MANAGE_PATIENTS)])
def patient_discharge(request, pk: int):
    """Mark the patient discharged; the stay ends at ``dischargeDate`` (default today)."""
    repos = default_repositories()
    patient = repos.patients.get(pk)
    fields = validated(DischargeSerializer, request)
    discharged_on = fields.get('discharge_date') or date.today()
    if discharged_on < patient.admission_date:
        raise ValidationError({'dischargeDate': ['Discharge date is before admission.']})
    patient = repos.patients.update(pk, {'status': 'discharged', 'discharge_date': discharged_on})
    log_action(user=request.user, action='patient_discharge', object_type='patient', object_id=patient.id,
               detail={'dischargeDate': discharged_on.isoformat()})
    broadcast_refresh('patients')
    return Response(PatientSerializer(patient).data)


@api_view(['GET'])
@permission_classes([require_any(VIEW_FINANCE, VIEW_PATIENTS)])
def patient_account(request, pk: int):
    """Account statement, recomputed from the payment list on every call."""
    account = account_for(pk)
    account['payments'] = PaymentSerializer(account['payments'], many=True).data
    return Response(account)


@api_view(['POST'])
@permission_classes([require_permission(MANAGE_FINANCE)])
def patient_recalculate(request, pk: int):
    total = recalculate_total_paid(pk, user=request.user)
    broadcast_refresh('patients')
    return Response({'ok': True, 'patientId': int(pk), 'totalPaid': total})
