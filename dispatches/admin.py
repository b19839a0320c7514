from django.contrib import admin

from .models import Dispatch, DispatchSequence


@admin.register(DispatchSequence)
class DispatchSequenceAdmin(admin.ModelAdmin):
    list_display = ['year', 'last_number', 'updated_at']
    readonly_fields = ['year', 'last_number', 'updated_at']


@admin.register(Dispatch)
class DispatchAdmin(admin.ModelAdmin):
    list_display = ['number', 'status', 'truck', 'driver', 'customer', 'total_quantity', 'scheduled_date']
    list_filter = ['status', 'year', 'fuel_type']
    search_fields = ['number', 'truck__plate', 'customer__ruc', 'customer__company_name']
    readonly_fields = ['number', 'year', 'sequence', 'created_at', 'updated_at']
