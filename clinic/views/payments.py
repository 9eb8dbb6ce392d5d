"""
Payment endpoints.

Every write goes through :mod:`clinic.services.payments` so the patient's
running ``totalPaid`` moves together with the payment record.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from clinic.permissions import MANAGE_FINANCE, VIEW_FINANCE, read_write, require_permission
from clinic.realtime.events import broadcast_refresh
from clinic.repositories import default_repositories
from clinic.serializers.finance import PaymentSerializer
from clinic.services import payments as posting
from clinic.services.audit import log_action
from .common import validated


@api_view(['GET', 'POST'])
@permission_classes([read_write(VIEW_FINANCE, MANAGE_FINANCE)])
def payments_list(request):
    repos = default_repositories()
    if request.method == 'GET':
        filters = {}
        if request.query_params.get('date'):
            filters['payment_date'] = request.query_params['date']
        return Response(PaymentSerializer(repos.payments.list(**filters), many=True).data)
    fields = validated(PaymentSerializer, request)
    payment = posting.create_payment(fields, repos=repos, user=request.user)
    log_action(user=request.user, action='payment_create', object_type='payment', object_id=payment.id,
               detail={'patientId': payment.patient_id, 'amount': payment.amount})
    broadcast_refresh('payments', 'patients')
    return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([require_permission(VIEW_FINANCE)])
def payments_by_patient(request, patient_id: int):
    repos = default_repositories()
    return Response(PaymentSerializer(repos.payments.list_payments_by_patient(patient_id), many=True).data)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([read_write(VIEW_FINANCE, MANAGE_FINANCE)])
def payment_detail(request, pk: int):
    repos = default_repositories()
    payment = repos.payments.get(pk)
    if request.method == 'GET':
        return Response(PaymentSerializer(payment).data)
    if request.method == 'DELETE':
        payment = posting.delete_payment(pk, repos=repos, user=request.user)
        log_action(user=request.user, action='payment_delete', object_type='payment', object_id=int(pk),
                   detail={'patientId': payment.patient_id, 'amount': payment.amount})
        broadcast_refresh('payments', 'patients')
        return Response(status=status.HTTP_204_NO_CONTENT)
    fields = validated(PaymentSerializer, request, instance=payment, partial=True)
    old_amount, old_patient = payment.amount, payment.patient_id
    payment = posting.update_payment(pk, fields, repos=repos, user=request.user)
    log_action(user=request.user, action='payment_update', object_type='payment', object_id=payment.id,
               detail={'from': {'patientId': old_patient, 'amount': old_amount},
                       'to': {'patientId': payment.patient_id, 'amount': payment.amount}})
    broadcast_refresh('payments', 'patients')
    return Response(PaymentSerializer(payment).data)
