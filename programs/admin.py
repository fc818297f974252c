from django.contrib import admin
from .models import Event, Attendance


class AttendanceInline(admin.TabularInline):
    model = Attendance
    extra = 0
    raw_id_fields = ('attendee_user',)


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ('name', 'community', 'date', 'tutor_type', 'tutor_name')
    list_filter = ('community', 'tutor_type', 'date')
    search_fields = ('name', 'description', 'location')
    raw_id_fields = ('tutor_user',)
    inlines = [AttendanceInline]


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ('event', 'attendee_type', 'display_name', 'created_at')
    list_filter = ('attendee_type',)
    raw_id_fields = ('event', 'attendee_user')
