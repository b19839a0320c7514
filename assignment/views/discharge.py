from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, filters, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from assignment.filters import DischargeFilter
from assignment.models import Discharge
from assignment.serializers import DischargeSerializer, DischargeCreateSerializer, DischargeUpdateSerializer
from assignment.services.common import get_or_not_found
from assignment.services.fuel_ledger import create_discharge, update_discharge
from logistics_core.exceptions import LedgerError, error_response
from logistics_core.permissions import IsAdminCaller
from .assignment import LEDGER_ERROR_RESPONSES


class DischargeViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Deliveries of an assignment's fuel to customers.

    Setting ``status`` to ``finalized`` applies the actual quantity to the
    assignment's remaining fuel.
    """
    serializer_class = DischargeSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = DischargeFilter
    ordering_fields = ['created_at', 'end_time', 'status']
    ordering = ['-created_at', '-id']

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Discharge.objects.none()
        queryset = Discharge.objects.select_related('customer', 'assignment')
        if not getattr(self.request.user, 'is_admin', False):
            queryset = queryset.filter(assignment__driver_id=self.request.user.id)
        return queryset

    def get_permissions(self):
        if self.action == 'create':
            return [IsAuthenticated(), IsAdminCaller()]
        return super().get_permissions()

    @swagger_auto_schema(
        request_body=DischargeCreateSerializer,
        responses={201: DischargeSerializer, **LEDGER_ERROR_RESPONSES},
    )
    def create(self, request):
        serializer = DischargeCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            discharge = create_discharge(**serializer.validated_data)
        except LedgerError as exc:
            return error_response(exc)
        return Response(DischargeSerializer(discharge).data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        request_body=DischargeUpdateSerializer,
        responses={200: DischargeSerializer, **LEDGER_ERROR_RESPONSES},
        operation_description="Record meter readings, or finalize the discharge with status 'finalized'.",
    )
    def update(self, request, pk=None):
        serializer = DischargeUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            get_or_not_found(self.get_queryset(), pk, 'Discharge')
            discharge = update_discharge(pk, **serializer.validated_data)
        except LedgerError as exc:
            return error_response(exc)
        return Response(DischargeSerializer(discharge).data)

    @swagger_auto_schema(
        request_body=DischargeUpdateSerializer,
        responses={200: DischargeSerializer, **LEDGER_ERROR_RESPONSES},
    )
    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)
