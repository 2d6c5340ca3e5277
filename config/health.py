from common.responses import envelope
from django.db import connection
from drf_spectacular.utils import extend_schema
from rest_framework.decorators import api_view, authentication_classes


@extend_schema(tags=["Health Endpoint"], summary="Health check")
@api_view(["GET"])
@authentication_classes([])
def health(request):
    # Touch the user store; failures surface as a 500 envelope
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
    return envelope("ok", {"status": "ok", "database": "ok"})
