import logging

from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from assignment.filters import AssignmentFilter
from assignment.models import Assignment
from assignment.serializers import (
    AssignmentSerializer, AssignmentDetailSerializer, AssignmentCreateSerializer,
)
from assignment.services.assignment_service import assignments_visible_to, create_assignment, get_assignment
from assignment.services import trip_lifecycle
from logistics_core.exceptions import LedgerError, error_response
from logistics_core.permissions import IsAdminCaller

logger = logging.getLogger(__name__)

LEDGER_ERROR_RESPONSES = {
    400: "validation_error",
    404: "not_found",
    409: "invalid_state",
}


class AssignmentViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Fuel assignments: a loaded truck handed to a driver.

    Operators only see the assignments they drive.
    """
    serializer_class = AssignmentSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = AssignmentFilter
    ordering_fields = ['created_at', 'total_remaining', 'status']
    ordering = ['-id']

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Assignment.objects.none()
        return assignments_visible_to(self.request.user)

    def get_permissions(self):
        if self.action in ('create', 'complete'):
            return [IsAuthenticated(), IsAdminCaller()]
        return super().get_permissions()

    @swagger_auto_schema(responses={200: AssignmentDetailSerializer, 404: "not_found"})
    def retrieve(self, request, pk=None):
        try:
            assignment = get_assignment(pk, caller=request.user)
        except LedgerError as exc:
            return error_response(exc)
        return Response(AssignmentDetailSerializer(assignment).data)

    @swagger_auto_schema(
        request_body=AssignmentCreateSerializer,
        responses={201: AssignmentSerializer, **LEDGER_ERROR_RESPONSES},
        operation_description="Load a truck and assign it to a driver. Fuel left on the truck is carried over.",
    )
    def create(self, request):
        serializer = AssignmentCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            assignment = create_assignment(**serializer.validated_data)
        except LedgerError as exc:
            return error_response(exc)
        return Response(AssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        request_body=openapi.Schema(type=openapi.TYPE_OBJECT, properties={}),
        responses={200: AssignmentSerializer, **LEDGER_ERROR_RESPONSES},
        operation_description="Start the trip. Only the assigned driver can do this.",
    )
    @action(detail=True, methods=['post'], url_path='start-trip')
    def start_trip(self, request, pk=None):
        try:
            assignment = trip_lifecycle.start_trip(pk, driver_id=request.user.id)
        except LedgerError as exc:
            return error_response(exc)
        return Response(AssignmentSerializer(assignment).data)

    @swagger_auto_schema(
        request_body=openapi.Schema(type=openapi.TYPE_OBJECT, properties={}),
        responses={200: AssignmentSerializer, **LEDGER_ERROR_RESPONSES},
    )
    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        try:
            assignment = trip_lifecycle.complete_assignment(pk)
        except LedgerError as exc:
            return error_response(exc)
        return Response(AssignmentSerializer(assignment).data)
