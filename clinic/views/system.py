"""
Center settings and database maintenance.

Reading settings only needs an active account.  Changing them needs
``manage_settings``; backup, import and reset need ``manage_database``
and are rate limited.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.response import Response

from clinic.exceptions import ValidationError
from clinic.permissions import MANAGE_DATABASE, MANAGE_SETTINGS, PermissionGuard, require_permission
from clinic.realtime.events import broadcast_refresh
from clinic.repositories import default_repositories
from clinic.serializers.users import SettingsSerializer
from clinic.services import backup
from clinic.services.audit import log_action
from clinic.throttling import DatabaseRateThrottle
from .common import validated


class SettingsPermission(PermissionGuard):
    def required_for(self, request):
        return () if request.method in ('GET', 'HEAD', 'OPTIONS') else (MANAGE_SETTINGS,)


@api_view(['GET', 'PATCH'])
@permission_classes([SettingsPermission])
def settings_view(request):
    repos = default_repositories()
    if request.method == 'GET':
        return Response(SettingsSerializer(repos.settings.load()).data)
    fields = validated(SettingsSerializer, request, instance=repos.settings.load(), partial=True)
    obj = repos.settings.update(1, fields)
    log_action(user=request.user, action='settings_update', object_type='settings', object_id=1,
               detail={'fields': sorted(fields)})
    return Response(SettingsSerializer(obj).data)


@api_view(['POST'])
@permission_classes([require_permission(MANAGE_DATABASE)])
@throttle_classes([DatabaseRateThrottle])
def database_backup(request):
    payload = backup.build_backup()
    log_action(user=request.user, action='database_backup', object_type='database', detail=payload['counts'])
    return Response(payload)


@api_view(['POST'])
@permission_classes([require_permission(MANAGE_DATABASE)])
@throttle_classes([DatabaseRateThrottle])
def database_import(request):
    """Replace all domain data with an uploaded backup (same shape as the backup endpoint)."""
    data = request.data
    payload = data.get('backup', data) if isinstance(data, dict) else data
    if not isinstance(payload, dict):
        raise ValidationError({'backup': ['Expected a backup object.']})
    counts = backup.import_backup(dict(payload))
    log_action(user=request.user, action='database_import', object_type='database', detail=counts)
    broadcast_refresh('patients', 'payments', 'staff', 'payrolls', 'graduates', 'expenses')
    return Response({'ok': True, 'imported': counts})


@api_view(['POST'])
@permission_classes([require_permission(MANAGE_DATABASE)])
@throttle_classes([DatabaseRateThrottle])
def database_reset(request):
    if request.data.get('confirm') is not True:
        raise ValidationError({'confirm': ['Send {"confirm": true} to erase all data.']})
    counts = backup.reset_database()
    log_action(user=request.user, action='database_reset', object_type='database', detail=counts)
    broadcast_refresh('patients', 'payments', 'staff', 'payrolls', 'graduates', 'expenses')
    return Response({'ok': True, 'deleted': counts})
