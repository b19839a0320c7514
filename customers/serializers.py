from rest_framework import serializers
from .models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ['id', 'company_name', 'ruc', 'address', 'contact_phone', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
