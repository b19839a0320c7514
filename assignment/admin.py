from django.contrib import admin

from .models import Assignment, Discharge, Trip


class DischargeInline(admin.TabularInline):
    model = Discharge
    extra = 0
    fields = ['customer', 'total_discharged', 'status', 'cantidad_real', 'overrun_quantity', 'end_time']
    readonly_fields = ['status', 'cantidad_real', 'overrun_quantity', 'end_time']


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ['id', 'truck', 'driver', 'total_loaded', 'total_remaining', 'status', 'is_completed', 'created_at']
    list_filter = ['status', 'is_completed', 'fuel_type']
    search_fields = ['truck__plate', 'driver__dni', 'driver__lastname']
    # balances only move through the fuel ledger
    readonly_fields = ['total_loaded', 'total_remaining', 'status', 'is_completed', 'trip_started_at',
                       'completed_at', 'audit', 'created_at', 'updated_at']
    inlines = [DischargeInline]


@admin.register(Discharge)
class DischargeAdmin(admin.ModelAdmin):
    list_display = ['id', 'assignment', 'customer', 'total_discharged', 'cantidad_real', 'status', 'end_time']
    list_filter = ['status']
    search_fields = ['customer__company_name', 'customer__ruc']
    readonly_fields = ['status', 'cantidad_real', 'overrun_quantity', 'end_time', 'created_at', 'updated_at']


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    list_display = ['id', 'assignment', 'driver', 'start_time', 'end_time', 'status']
    list_filter = ['status']
