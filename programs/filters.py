import django_filters

from .models import Event, Attendance


class EventFilter(django_filters.FilterSet):
    start_date = django_filters.DateFilter(field_name='date', lookup_expr='date__gte')
    end_date = django_filters.DateFilter(field_name='date', lookup_expr='date__lte')
    name = django_filters.CharFilter(field_name='name', lookup_expr='icontains')

    class Meta:
        model = Event
        fields = ['community', 'tutor_type']


class AttendanceFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(field_name='attendee_type', choices=Attendance.ATTENDEE_TYPE_CHOICES)
    user = django_filters.NumberFilter(field_name='attendee_user')

    class Meta:
        model = Attendance
        fields = ['event']
