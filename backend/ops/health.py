"""
Health check endpoints for operations monitoring.

Endpoints:
- /_health/live    - liveness probe (is the process running?)
- /_health/ready   - readiness probe (can we reach the ledger store?)
"""
import logging
import time
from typing import Dict, Any

from django.conf import settings
from django.db import DatabaseError, connections
from django.http import JsonResponse
from django.views import View

logger = logging.getLogger(__name__)


def check_database(alias: str = "default") -> Dict[str, Any]:
    """Run a trivial query against one database alias."""
    start = time.time()
    try:
        conn = connections[alias]
        conn.ensure_connection()
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as e:
        logger.warning("Database health check failed", extra={"alias": alias, "error": str(e)})
        return {
            "status": "unhealthy",
            "alias": alias,
            "error": str(e),
            "duration_ms": round((time.time() - start) * 1000, 2),
        }
    return {
        "status": "healthy",
        "alias": alias,
        "duration_ms": round((time.time() - start) * 1000, 2),
    }


class LivenessView(View):
    """Returns 200 while the process is up. No external checks."""

    def get(self, request):
        return JsonResponse({"status": "alive", "version": getattr(settings, "VERSION", "unknown")})


class ReadinessView(View):
    """
    Readiness probe.

    Returns 200 when the default database answers, 503 otherwise.
    """

    def get(self, request):
        db_check = check_database("default")

        if db_check["status"] == "healthy":
            return JsonResponse({
                "status": "ready",
                "database": db_check,
            })
        return JsonResponse({
            "status": "not_ready",
            "database": db_check,
        }, status=503)
