from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from logistics_core.exceptions import LedgerError, ValidationError, error_response
from logistics_core.permissions import IsAdminCaller
from .filters import DispatchFilter
from .models import Dispatch
from .serializers import (
    DispatchNumberSerializer, DispatchStatsSerializer, DispatchSerializer, DispatchCreateSerializer,
)
from .services.dispatch_service import create_dispatch, dispatches_visible_to
from .services.numbering import next_dispatch_number, peek_next_dispatch_number, dispatch_stats

year_param = openapi.Parameter('year', openapi.IN_QUERY, type=openapi.TYPE_INTEGER, required=False)


def _year_from(request):
    raw = request.query_params.get('year')
    if not raw:
        return None
    try:
        year = int(raw)
    except ValueError:
        raise ValidationError(f"year must be an integer, got {raw!r}")
    if not 1 <= year <= 9999:
        raise ValidationError(f"year out of range: {year}")
    return year


class DispatchNumberViewSet(viewsets.ViewSet):
    """
    Dispatch (guide) numbers, unique and increasing per year.
    """

    def get_permissions(self):
        if self.action == 'create':
            return [IsAuthenticated(), IsAdminCaller()]
        return [IsAuthenticated()]

    @swagger_auto_schema(
        request_body=openapi.Schema(type=openapi.TYPE_OBJECT, properties={}),
        responses={201: DispatchNumberSerializer, 503: "resource_contention"},
    )
    def create(self, request):
        try:
            number = next_dispatch_number()
        except LedgerError as exc:
            return error_response(exc)
        return Response(DispatchNumberSerializer(number.as_dict()).data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(manual_parameters=[year_param], responses={200: DispatchNumberSerializer})
    @action(detail=False, methods=['get'])
    def preview(self, request):
        try:
            number = peek_next_dispatch_number(_year_from(request))
        except LedgerError as exc:
            return error_response(exc)
        return Response(DispatchNumberSerializer(number.as_dict()).data)

    @swagger_auto_schema(manual_parameters=[year_param], responses={200: DispatchStatsSerializer})
    @action(detail=False, methods=['get'])
    def stats(self, request):
        try:
            data = dispatch_stats(_year_from(request))
        except LedgerError as exc:
            return error_response(exc)
        return Response(DispatchStatsSerializer(data).data)


class DispatchViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Scheduled deliveries. Creating one reserves its dispatch number.

    Operators only see the dispatches they drive.
    """
    serializer_class = DispatchSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = DispatchFilter
    ordering_fields = ['created_at', 'scheduled_date', 'sequence']

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Dispatch.objects.none()
        return dispatches_visible_to(self.request.user)

    def get_permissions(self):
        if self.action == 'create':
            return [IsAuthenticated(), IsAdminCaller()]
        return super().get_permissions()

    @swagger_auto_schema(
        request_body=DispatchCreateSerializer,
        responses={201: DispatchSerializer, 400: "validation_error", 404: "not_found",
                   409: "invalid_state", 503: "resource_contention"},
        operation_description="Schedule a delivery; the truck is marked as assigned.",
    )
    def create(self, request):
        serializer = DispatchCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            dispatch = create_dispatch(**serializer.validated_data)
        except LedgerError as exc:
            return error_response(exc)
        return Response(DispatchSerializer(dispatch).data, status=status.HTTP_201_CREATED)
