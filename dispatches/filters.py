import django_filters

from dispatches.models import Dispatch, DispatchStatus


class DispatchFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=DispatchStatus.choices)
    scheduled_after = django_filters.IsoDateTimeFilter(field_name='scheduled_date', lookup_expr='gte')
    scheduled_before = django_filters.IsoDateTimeFilter(field_name='scheduled_date', lookup_expr='lte')

    class Meta:
        model = Dispatch
        fields = ['truck', 'driver', 'customer', 'year', 'status']
