from django.db import models
from django.conf import settings


class Report(models.Model):
    FINANCIAL_SUMMARY = 'financial_summary'
    COMMUNITY_ACTIVITY = 'community_activity'
    PARTICIPANT_DEMOGRAPHICS = 'participant_demographics'
    PROGRAM_IMPACT = 'program_impact'

    REPORT_TYPE_CHOICES = [
        (FINANCIAL_SUMMARY, 'Financial Summary'),
        (COMMUNITY_ACTIVITY, 'Community Activity'),
        (PARTICIPANT_DEMOGRAPHICS, 'Participant Demographics'),
        (PROGRAM_IMPACT, 'Program Impact'),
    ]

    PENDING = 'pending'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    FAILED = 'failed'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (PROCESSING, 'Processing'),
        (COMPLETED, 'Completed'),
        (FAILED, 'Failed'),
    ]

    # Filter keys each report type must be given, and the optional ones it accepts.
    REQUIRED_FILTERS = {
        FINANCIAL_SUMMARY: ('start_date', 'end_date'),
        COMMUNITY_ACTIVITY: ('community_name', 'start_date', 'end_date'),
        PARTICIPANT_DEMOGRAPHICS: ('community_name',),
        PROGRAM_IMPACT: ('community_name',),
    }
    OPTIONAL_FILTERS = {
        FINANCIAL_SUMMARY: (),
        COMMUNITY_ACTIVITY: (),
        PARTICIPANT_DEMOGRAPHICS: ('start_date', 'end_date'),
        PROGRAM_IMPACT: ('start_date', 'end_date'),
    }

    report_type = models.CharField(max_length=50, choices=REPORT_TYPE_CHOICES)
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reports'
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING, db_index=True)
    filters = models.JSONField(default=dict, blank=True, help_text="Filters used for the report, e.g. dates and community")

    output_location = models.CharField(max_length=500, blank=True, default='', help_text="Where the generated file can be downloaded")
    output_key = models.CharField(max_length=255, blank=True, default='', help_text="Storage key of the generated file")
    error_message = models.TextField(blank=True, null=True)
    job_id = models.CharField(max_length=255, blank=True, null=True, help_text="RQ Job ID")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_report_type_display()} #{self.pk} ({self.status})"

    @classmethod
    def allowed_filters(cls, report_type):
        return cls.REQUIRED_FILTERS[report_type] + cls.OPTIONAL_FILTERS[report_type]

    @classmethod
    def missing_filters(cls, report_type, filters):
        """Required filter keys absent (or blank) in `filters`."""
        return [
            key for key in cls.REQUIRED_FILTERS.get(report_type, ())
            if filters.get(key) in (None, '')
        ]
