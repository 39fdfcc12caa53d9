import logging

from django.db import DatabaseError, connection
from django.utils import timezone
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework import status

logger = logging.getLogger(__name__)


class HealthAPIView(APIView):
    """
    GET /api/health/

    Returns a liveness payload including a database round-trip check:
    - status: "ok" or "degraded"
    - database: "connected" or "unavailable"
    - timestamp: ISO-8601 server time

    Authentication: none
    Permissions: AllowAny
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        """
        Run a trivial query against the default database. A failing database
        yields 503 with the same payload shape.
        """
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
            database = "connected"
        except DatabaseError:
            logger.exception("Health check could not reach the database")
            database = "unavailable"

        healthy = database == "connected"
        data = {
            "status": "ok" if healthy else "degraded",
            "database": database,
            "timestamp": timezone.now().isoformat(),
        }
        code = status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE
        return Response(data, status=code)
