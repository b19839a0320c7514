from decimal import Decimal

from rest_framework import serializers

from dispatches.models import Dispatch
from fleet.models import FuelType


class DispatchNumberSerializer(serializers.Serializer):
    number = serializers.CharField()
    year = serializers.IntegerField()
    sequence = serializers.IntegerField()


class DispatchStatsSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    total_dispatches = serializers.IntegerField()
    last_dispatch_number = serializers.CharField(allow_null=True)
    average_per_month = serializers.FloatField()


class DispatchSerializer(serializers.ModelSerializer):
    truck_plate = serializers.CharField(source='truck.plate', read_only=True)
    driver_name = serializers.CharField(source='driver.full_name', read_only=True)
    customer_name = serializers.CharField(source='customer.company_name', read_only=True)

    class Meta:
        model = Dispatch
        fields = [
            'id', 'number', 'year', 'sequence', 'status',
            'truck', 'truck_plate', 'driver', 'driver_name', 'customer', 'customer_name',
            'fuel_type', 'total_quantity', 'remaining_quantity', 'price_per_gallon',
            'scheduled_date', 'notes', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class DispatchCreateSerializer(serializers.Serializer):
    truck_id = serializers.IntegerField()
    driver_id = serializers.IntegerField()
    customer_id = serializers.IntegerField()
    total_quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    fuel_type = serializers.ChoiceField(choices=FuelType.choices, required=False)
    price_per_gallon = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False
    )
    scheduled_date = serializers.DateTimeField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
