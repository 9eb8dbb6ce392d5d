"""
Dashboard and report endpoints.

The dashboard is cached for ``DASHBOARD_CACHE_SECONDS``; any write that
broadcasts a refresh also drops the cached copy.
"""
from __future__ import annotations

from django.conf import settings
from django.core.cache import cache
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from clinic.permissions import VIEW_FINANCE, VIEW_REPORTS, require_any, require_permission
from clinic.realtime.events import DASHBOARD_CACHE_KEY
from clinic.serializers.finance import ReportQuerySerializer
from clinic.services.reports import build_dashboard, build_report


@api_view(['GET'])
@permission_classes([require_any(VIEW_REPORTS, VIEW_FINANCE)])
def dashboard_stats(request):
    ttl = getattr(settings, 'DASHBOARD_CACHE_SECONDS', 60)
    cached = cache.get(DASHBOARD_CACHE_KEY) if ttl else None
    if cached:
        return Response(cached)
    payload = {'ok': True, 'data': build_dashboard()}
    if ttl:
        cache.set(DASHBOARD_CACHE_KEY, payload, ttl)
    return Response(payload)


@api_view(['GET'])
@permission_classes([require_permission(VIEW_REPORTS)])
def reports_summary(request):
    q = ReportQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': build_report(q.validated_data.get('from'), q.validated_data.get('to'))})
