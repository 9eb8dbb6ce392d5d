"""Cigarette allowance statistics and payments."""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from clinic.permissions import MANAGE_FINANCE, VIEW_FINANCE, VIEW_PATIENTS, read_write, require_permission
from clinic.repositories import default_repositories
from clinic.serializers.finance import CigarettePaymentSerializer
from clinic.services.cigarettes import cigarette_overview, cigarette_payment_summary, record_cigarette_payment
from .common import validated


@api_view(['GET'])
@permission_classes([require_permission(VIEW_PATIENTS)])
def cigarette_stats(request):
    """Daily allowance grouped by detox patients, recovery patients, graduates and staff."""
    return Response(cigarette_overview())


@api_view(['GET', 'POST'])
@permission_classes([read_write(VIEW_FINANCE, MANAGE_FINANCE)])
def cigarette_payments(request):
    repos = default_repositories()
    if request.method == 'GET':
        filters = {}
        if request.query_params.get('personType'):
            filters['person_type'] = request.query_params['personType']
        return Response({
            'payments': CigarettePaymentSerializer(repos.cigarette_payments.list(**filters), many=True).data,
            'totals': cigarette_payment_summary(repos=repos),
        })
    fields = validated(CigarettePaymentSerializer, request)
    payment = record_cigarette_payment(fields, repos=repos, user=request.user)
    return Response(CigarettePaymentSerializer(payment).data, status=status.HTTP_201_CREATED)
