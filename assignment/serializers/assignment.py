from decimal import Decimal

from rest_framework import serializers

from assignment.models import Assignment
from fleet.models import FuelType
from fleet.serializers import TruckSerializer, DriverSerializer
from .discharge import DischargeSerializer


class AssignmentSerializer(serializers.ModelSerializer):
    truck_plate = serializers.CharField(source='truck.plate', read_only=True)
    driver_name = serializers.CharField(source='driver.full_name', read_only=True)
    dispensed = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Assignment
        fields = [
            'id', 'truck', 'truck_plate', 'driver', 'driver_name', 'fuel_type',
            'total_loaded', 'total_remaining', 'dispensed', 'status', 'is_completed',
            'trip_started_at', 'completed_at', 'notes', 'audit', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class AssignmentDetailSerializer(AssignmentSerializer):
    truck = TruckSerializer(read_only=True)
    driver = DriverSerializer(read_only=True)
    discharges = DischargeSerializer(many=True, read_only=True)

    class Meta(AssignmentSerializer.Meta):
        fields = AssignmentSerializer.Meta.fields + ['discharges']
        read_only_fields = fields


class AssignmentCreateSerializer(serializers.Serializer):
    truck_id = serializers.IntegerField()
    driver_id = serializers.IntegerField()
    loaded_quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    fuel_type = serializers.ChoiceField(choices=FuelType.choices, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
