import django_filters

from .models import Report


class ReportFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(field_name='report_type', choices=Report.REPORT_TYPE_CHOICES)
    start_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    end_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = Report
        fields = ['status', 'requested_by']
