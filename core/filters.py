import django_filters

from .models import User, Milestone


class UserFilter(django_filters.FilterSet):
    community = django_filters.CharFilter(method='filter_community')
    name = django_filters.CharFilter(field_name='name', lookup_expr='icontains')

    class Meta:
        model = User
        fields = ['occupation_status', 'age_category', 'domicile']

    def filter_community(self, queryset, name, value):
        return queryset.in_community(value)


class MilestoneFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(field_name='milestone_type', choices=Milestone.TYPE_CHOICES)
    start_date = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    end_date = django_filters.DateFilter(field_name='date', lookup_expr='lte')

    class Meta:
        model = Milestone
        fields = ['user']
