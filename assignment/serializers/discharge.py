from decimal import Decimal

from rest_framework import serializers

from assignment.models import Discharge, DischargeStatus


class DischargeSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.company_name', read_only=True)
    customer_ruc = serializers.CharField(source='customer.ruc', read_only=True)

    class Meta:
        model = Discharge
        fields = [
            'id', 'assignment', 'customer', 'customer_name', 'customer_ruc', 'total_discharged',
            'status', 'marcador_inicial', 'marcador_final', 'cantidad_real', 'overrun_quantity',
            'end_time', 'notes', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class DischargeCreateSerializer(serializers.Serializer):
    assignment_id = serializers.IntegerField()
    customer_id = serializers.IntegerField()
    total_discharged = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    notes = serializers.CharField(required=False, allow_blank=True)


class DischargeUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=DischargeStatus.choices)
    marcador_inicial = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    marcador_final = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    cantidad_real = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True
    )

    def validate(self, attrs):
        inicial = attrs.get('marcador_inicial')
        final = attrs.get('marcador_final')
        if inicial is not None and final is not None and final < inicial:
            raise serializers.ValidationError({'marcador_final': 'Must not be below marcador_inicial.'})
        return attrs
