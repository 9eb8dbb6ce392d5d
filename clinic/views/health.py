import logging

from django.conf import settings
from django.db import DatabaseError, connections
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def healthz(request):
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        return JsonResponse({'ok': True, 'db': bool(row and row[0] == 1), 'service': settings.CENTER_NAME})
    except DatabaseError as e:
        logger.error("health check failed: %s", e)
        return JsonResponse({'ok': False, 'error': str(e)}, status=500)
