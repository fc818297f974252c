from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiExample

from core.permissions import IsAdmin, IsAdminOrReadOnly
from .models import Event, Attendance
from .serializers import EventSerializer, AttendanceSerializer
from .filters import EventFilter, AttendanceFilter


class EventViewSet(viewsets.ModelViewSet):
    """
    Programs run by the foundation. Listing and detail are public.
    """
    queryset = Event.objects.select_related('tutor_user')
    serializer_class = EventSerializer
    permission_classes = [IsAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = EventFilter
    search_fields = ['name', 'description', 'location']
    ordering_fields = ['date', 'name', 'created_at']

    @extend_schema(
        examples=[
            OpenApiExample('Internal tutor', value={
                "name": "Digital Literacy Class", "community": "Kampung Baru", "date": "2025-01-15T09:00:00Z",
                "tutor": {"type": "Internal", "user": 3}, "location": "Balai Warga"
            }, request_only=True),
            OpenApiExample('External tutor', value={
                "name": "Financial Planning 101", "community": "Kampung Baru", "date": "2025-02-10T13:00:00Z",
                "tutor": {"type": "External", "name": "Rina Wijaya"}
            }, request_only=True),
        ]
    )
    def create(self, request, *args, **kwargs):
        return super().create(request, *args, **kwargs)


class AttendanceViewSet(viewsets.ModelViewSet):
    queryset = Attendance.objects.select_related('event', 'attendee_user')
    serializer_class = AttendanceSerializer
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = AttendanceFilter
    ordering_fields = ['created_at']

    @extend_schema(
        examples=[
            OpenApiExample('Member', value={"event": 1, "attendee": {"type": "Member", "user": 5}}, request_only=True),
            OpenApiExample('Guest', value={"event": 1, "attendee": {"type": "Guest", "name": "Budi"}}, request_only=True),
        ]
    )
    def create(self, request, *args, **kwargs):
        return super().create(request, *args, **kwargs)
