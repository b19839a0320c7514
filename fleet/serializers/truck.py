from rest_framework import serializers
from fleet.models import Truck


class TruckSerializer(serializers.ModelSerializer):
    is_available = serializers.BooleanField(read_only=True)
    free_capacity = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Truck
        fields = [
            'id',
            'plate',
            'name',
            'fuel_type',
            'capacity',
            'last_remaining',
            'free_capacity',
            'state',
            'is_available',
            'created_at',
            'updated_at',
        ]
        # last_remaining is owned by the fuel ledger
        read_only_fields = ['last_remaining', 'created_at', 'updated_at']

    def validate_capacity(self, value):
        if self.instance is not None and value < self.instance.last_remaining:
            raise serializers.ValidationError(
                f"Capacity cannot be lower than the fuel currently carried over ({self.instance.last_remaining} gal)."
            )
        return value
