from rest_framework import viewsets, filters
from rest_framework.permissions import IsAuthenticated, SAFE_METHODS
from django_filters.rest_framework import DjangoFilterBackend

from fleet.models import Driver
from fleet.serializers import DriverSerializer
from logistics_core.permissions import IsAdminCaller


class DriverViewSet(viewsets.ModelViewSet):
    """
    API endpoint for managing drivers.
    """
    queryset = Driver.objects.all()
    serializer_class = DriverSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['state']
    search_fields = ['dni', 'name', 'lastname']
    ordering = ['lastname', 'name']

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsAdminCaller()]
