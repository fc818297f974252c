from django.contrib import admin
from .models import Report


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ('id', 'report_type', 'status', 'requested_by', 'created_at', 'completed_at')
    list_filter = ('status', 'report_type', 'created_at')
    search_fields = ('job_id', 'error_message')
    readonly_fields = (
        'status', 'filters', 'output_location', 'output_key', 'error_message', 'job_id',
        'created_at', 'updated_at', 'completed_at'
    )

    def has_change_permission(self, request, obj=None):
        # Status only moves through the API lifecycle
        return False
