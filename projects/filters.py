import django_filters

from .models import Project, Media


class ProjectFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    start_date = django_filters.DateFilter(field_name='start_date', lookup_expr='gte')
    end_date = django_filters.DateFilter(field_name='start_date', lookup_expr='lte')

    class Meta:
        model = Project
        fields = ['status', 'created_by']


class MediaFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(field_name='media_type', choices=Media.TYPE_CHOICES)

    class Meta:
        model = Media
        fields = ['project', 'uploaded_by']
