from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from authentication.permissions import IsManagerOrOwner, IsOwner
from . import services

DATE_PARAMETER = OpenApiParameter(
    'date', OpenApiTypes.DATE, required=False,
    description='Report date (YYYY-MM-DD), today when omitted',
)


# =============== REPORTS ===============

@extend_schema(
    summary="Daily Report",
    parameters=[DATE_PARAMETER],
    responses={200: {'type': 'object'}, 403: {'description': 'Restaurant not accessible'}},
)
@api_view(['GET'])
@permission_classes([IsManagerOrOwner])
def daily_report(request, restaurant_id):
    return Response(services.daily_report(request.user, restaurant_id, request.query_params.get('date')))


@extend_schema(
    summary="Consolidated Report",
    parameters=[DATE_PARAMETER],
    responses={200: {'type': 'object'}, 403: {'description': 'Owner access required'}},
)
@api_view(['GET'])
@permission_classes([IsOwner])
def consolidated_report(request):
    return Response(services.consolidated_report(request.user, request.query_params.get('date')))
