import django_filters

from assignment.models import Assignment, AssignmentStatus, Discharge, DischargeStatus


class AssignmentFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=AssignmentStatus.choices)
    created_after = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='gte')
    created_before = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='lte')

    class Meta:
        model = Assignment
        fields = ['truck', 'driver', 'is_completed', 'status']


class DischargeFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=DischargeStatus.choices)
    created_after = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='gte')
    created_before = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='lte')

    class Meta:
        model = Discharge
        fields = ['assignment', 'customer', 'status']
