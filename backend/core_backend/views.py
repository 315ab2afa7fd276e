from django.db import connection, DatabaseError
from django.http import JsonResponse
import logging

logger = logging.getLogger(__name__)


def health_check(request):
    """Health check endpoint that doesn't require authentication"""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as e:
        logger.error(f"Health check database query failed: {e}")
        return JsonResponse({"status": "degraded", "database": "unavailable"}, status=503)
    return JsonResponse({"status": "ok", "database": "ok"})
