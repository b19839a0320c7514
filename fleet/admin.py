from django.contrib import admin
from .models import Truck, Driver


@admin.register(Truck)
class TruckAdmin(admin.ModelAdmin):
    list_display = ('plate', 'name', 'fuel_type', 'capacity', 'last_remaining', 'state', 'updated_at')
    list_filter = ('state', 'fuel_type')
    search_fields = ('plate', 'name')
    # last_remaining is written by the fuel ledger only
    readonly_fields = ('last_remaining', 'created_at', 'updated_at')

    fieldsets = (
        ('Basic Information', {
            'fields': ('plate', 'name', 'state')
        }),
        ('Tank', {
            'fields': ('fuel_type', 'capacity', 'last_remaining')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ('dni', 'name', 'lastname', 'email', 'state')
    list_filter = ('state',)
    search_fields = ('dni', 'name', 'lastname', 'email')
    readonly_fields = ('created_at', 'updated_at')
