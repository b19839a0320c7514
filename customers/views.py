from rest_framework import viewsets, filters
from rest_framework.permissions import IsAuthenticated, SAFE_METHODS

from logistics_core.permissions import IsAdminCaller
from .models import Customer
from .serializers import CustomerSerializer


class CustomerViewSet(viewsets.ModelViewSet):
    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['company_name', 'ruc', 'address']
    ordering_fields = ['company_name', 'created_at']

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsAdminCaller()]
