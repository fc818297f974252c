import django_filters

from .models import Donation, Expense, FinanceReport


class DonationFilter(django_filters.FilterSet):
    source = django_filters.CharFilter(field_name='source', lookup_expr='icontains')
    program = django_filters.CharFilter(field_name='program', lookup_expr='icontains')
    start_date = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    end_date = django_filters.DateFilter(field_name='date', lookup_expr='lte')

    class Meta:
        model = Donation
        fields = ['donation_type']


class ExpenseFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(field_name='category', lookup_expr='icontains')
    start_date = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    end_date = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    min_amount = django_filters.NumberFilter(field_name='amount', lookup_expr='gte')
    max_amount = django_filters.NumberFilter(field_name='amount', lookup_expr='lte')

    class Meta:
        model = Expense
        fields = []


class FinanceReportFilter(django_filters.FilterSet):
    class Meta:
        model = FinanceReport
        fields = ['project']
