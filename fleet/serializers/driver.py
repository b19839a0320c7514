from rest_framework import serializers
from fleet.models import Driver


class DriverSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Driver
        fields = ['id', 'dni', 'name', 'lastname', 'full_name', 'email', 'state', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
