from decimal import Decimal, InvalidOperation

from django.db.models import Sum, Count
from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated, SAFE_METHODS
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from fleet.models import Truck, TruckState
from fleet.serializers import TruckSerializer
from fleet.services.status_services import update_truck_state
from logistics_core.permissions import IsAdminCaller


# States an operator may set by hand; the rest belong to the assignment lifecycle
MANUAL_STATES = (TruckState.ACTIVE, TruckState.INACTIVE, TruckState.MAINTENANCE)


class TruckViewSet(viewsets.ModelViewSet):
    """
    API endpoint for managing trucks.
    """
    queryset = Truck.objects.all()
    serializer_class = TruckSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['state', 'fuel_type']
    search_fields = ['plate', 'name']
    ordering_fields = ['plate', 'capacity', 'state', 'last_remaining', 'created_at']
    ordering = ['plate']

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsAdminCaller()]

    def get_queryset(self):
        queryset = super().get_queryset()
        params = self.request.query_params

        if min_cap := params.get('min_capacity'):
            try:
                queryset = queryset.filter(capacity__gte=Decimal(min_cap))
            except InvalidOperation:
                pass
        if params.get('available') == 'true':
            queryset = queryset.filter(state=TruckState.ACTIVE)
        return queryset

    @action(detail=True, methods=['post'])
    def change_status(self, request, pk=None):
        truck = self.get_object()
        new_state = request.data.get('state')

        if new_state not in MANUAL_STATES:
            return Response(
                {'error': f'Invalid state. Must be one of {list(MANUAL_STATES)}'},
                status=400
            )
        if truck.assignments.filter(is_completed=False).exists():
            return Response(
                {'error': f'Truck {truck.plate} has an assignment in progress'},
                status=409
            )

        update_truck_state(truck, new_state)
        return Response({'id': truck.id, 'plate': truck.plate, 'state': new_state})

    @action(detail=False, methods=['get'])
    def stats(self, request):
        state_counts = dict(
            Truck.objects.values('state').annotate(count=Count('id')).values_list('state', 'count')
        )
        for s in TruckState.values:
            state_counts.setdefault(s, 0)

        totals = Truck.objects.aggregate(
            total_capacity=Sum('capacity'),
            fuel_on_board=Sum('last_remaining')
        )
        total_trucks = Truck.objects.count()

        utilization_rate = 0
        if total_trucks:
            busy = sum(state_counts[s] for s in (TruckState.ASSIGNED, TruckState.IN_TRANSIT, TruckState.DISCHARGING))
            utilization_rate = (busy / total_trucks) * 100

        return Response({
            'total_trucks': total_trucks,
            'state_counts': state_counts,
            'total_capacity': totals['total_capacity'] or 0,
            'fuel_on_board': totals['fuel_on_board'] or 0,
            'utilization_rate': utilization_rate
        })
