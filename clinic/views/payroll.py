"""
Payroll ledger views: payrolls, bonuses, advances and deductions.

All of them are readable with ``view_payroll`` and writable with
``manage_payroll``.  Net salaries and advance installments are always
computed server side; the corresponding fields are read-only.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from clinic.permissions import MANAGE_PAYROLL, VIEW_PAYROLL, read_write, require_permission
from clinic.realtime.events import broadcast_refresh
from clinic.repositories import default_repositories
from clinic.serializers.staff import (
    AdvanceSerializer,
    BonusSerializer,
    DeductionSerializer,
    PayrollGenerateSerializer,
    PayrollSerializer,
)
from clinic.services import payroll as ledger
from clinic.services.audit import log_action
from .common import list_or_create, retrieve_update_destroy, validated

payroll_guard = read_write(VIEW_PAYROLL, MANAGE_PAYROLL)


# ---------------------------------------------------------------------
# Payrolls
# ---------------------------------------------------------------------
@api_view(['GET', 'POST'])
@permission_classes([payroll_guard])
def payrolls_list(request):
    repos = default_repositories()

    def create(fields):
        payroll = ledger.create_payroll(fields, repos=repos, user=request.user)
        log_action(user=request.user, action='payroll_create', object_type='payroll', object_id=payroll.id,
                   detail={'staffId': payroll.staff_id, 'month': payroll.month, 'net': payroll.net_salary})
        return payroll

    return list_or_create(request, repos.payrolls, PayrollSerializer, create=create, refresh='payrolls')


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([payroll_guard])
def payroll_detail(request, pk: int):
    repos = default_repositories()
    return retrieve_update_destroy(
        request, pk, repos.payrolls, PayrollSerializer,
        update=lambda pk, fields, obj: ledger.update_payroll(pk, fields, repos=repos),
        refresh='payrolls', audit='payroll',
    )


@api_view(['GET'])
@permission_classes([require_permission(VIEW_PAYROLL)])
def payrolls_by_staff(request, staff_id: int):
    repos = default_repositories()
    return Response(PayrollSerializer(repos.payrolls.list_by_staff(staff_id), many=True).data)


@api_view(['GET'])
@permission_classes([require_permission(VIEW_PAYROLL)])
def payrolls_by_month(request, month: str):
    repos = default_repositories()
    return Response(PayrollSerializer(repos.payrolls.list_by_month(month), many=True).data)


@api_view(['POST'])
@permission_classes([require_permission(MANAGE_PAYROLL)])
def payrolls_generate(request):
    """Create pending payrolls for every active staff member for ``month``."""
    month = validated(PayrollGenerateSerializer, request)['month']
    created, existing = ledger.generate_monthly_payroll(month, user=request.user)
    log_action(user=request.user, action='payroll_generate', object_type='payroll', object_id=None,
               detail={'month': month, 'created': len(created), 'existing': len(existing)})
    if created:
        broadcast_refresh('payrolls')
    return Response({
        'ok': True,
        'month': month,
        'created': PayrollSerializer(created, many=True).data,
        'existing': PayrollSerializer(existing, many=True).data,
    }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


# ---------------------------------------------------------------------
# Bonuses / deductions
# ---------------------------------------------------------------------
def _staff_entry(repo, repos):
    def create(fields):
        repos.staff.get(fields['staff_id'])
        return repo.create(fields)
    return create


@api_view(['GET', 'POST'])
@permission_classes([payroll_guard])
def bonuses_list(request):
    repos = default_repositories()
    return list_or_create(request, repos.bonuses, BonusSerializer, create=_staff_entry(repos.bonuses, repos))


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([payroll_guard])
def bonus_detail(request, pk: int):
    repos = default_repositories()
    return retrieve_update_destroy(request, pk, repos.bonuses, BonusSerializer, audit='bonus')


@api_view(['GET'])
@permission_classes([require_permission(VIEW_PAYROLL)])
def bonuses_by_staff(request, staff_id: int):
    repos = default_repositories()
    return Response(BonusSerializer(repos.bonuses.list_by_staff(staff_id), many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([payroll_guard])
def deductions_list(request):
    repos = default_repositories()
    return list_or_create(request, repos.deductions, DeductionSerializer,
                          create=_staff_entry(repos.deductions, repos))


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([payroll_guard])
def deduction_detail(request, pk: int):
    repos = default_repositories()
    return retrieve_update_destroy(request, pk, repos.deductions, DeductionSerializer, audit='deduction')


@api_view(['GET'])
@permission_classes([require_permission(VIEW_PAYROLL)])
def deductions_by_staff(request, staff_id: int):
    repos = default_repositories()
    return Response(DeductionSerializer(repos.deductions.list_by_staff(staff_id), many=True).data)


# ---------------------------------------------------------------------
# Advances
# ---------------------------------------------------------------------
@api_view(['GET', 'POST'])
@permission_classes([payroll_guard])
def advances_list(request):
    repos = default_repositories()
    return list_or_create(request, repos.advances, AdvanceSerializer,
                          create=lambda fields: ledger.create_advance(fields, repos=repos))


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([payroll_guard])
def advance_detail(request, pk: int):
    repos = default_repositories()
    return retrieve_update_destroy(
        request, pk, repos.advances, AdvanceSerializer,
        update=lambda pk, fields, obj: ledger.update_advance(pk, fields, repos=repos),
        audit='advance',
    )


@api_view(['GET'])
@permission_classes([require_permission(VIEW_PAYROLL)])
def advances_by_staff(request, staff_id: int):
    repos = default_repositories()
    return Response(AdvanceSerializer(repos.advances.list_by_staff(staff_id), many=True).data)


def _decide(request, pk, approve: bool):
    advance = ledger.decide_advance(pk, approve, user=request.user)
    log_action(user=request.user, action='advance_approve' if approve else 'advance_reject',
               object_type='advance', object_id=advance.id, detail={'amount': advance.amount})
    return Response(AdvanceSerializer(advance).data)


@api_view(['POST'])
@permission_classes([require_permission(MANAGE_PAYROLL)])
def advance_approve(request, pk: int):
    return _decide(request, pk, True)


@api_view(['POST'])
@permission_classes([require_permission(MANAGE_PAYROLL)])
def advance_reject(request, pk: int):
    return _decide(request, pk, False)
