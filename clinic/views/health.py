import logging

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def healthz(request):
    """Database ping plus a cache round trip (presence and the dashboard live there)."""
    status = {'db': False, 'cache': False}
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            status['db'] = cursor.fetchone() == (1,)
    except DatabaseError as e:
        logger.error('healthz: database unreachable: %s', e)
        return JsonResponse({'ok': False, 'error': str(e), **status}, status=500)

    cache.set('healthz:ping', 1, 5)
    status['cache'] = cache.get('healthz:ping') == 1
    return JsonResponse({'ok': status['db'], **status}, status=200 if status['db'] else 500)
