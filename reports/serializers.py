from rest_framework import serializers
from .models import Report
from . import lifecycle


class ReportSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source='report_type', read_only=True)
    type_display = serializers.CharField(source='get_report_type_display', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    requested_by_name = serializers.CharField(source='requested_by.name', read_only=True, default=None)

    class Meta:
        model = Report
        fields = [
            'id', 'type', 'type_display', 'filters', 'status', 'status_display',
            'output_location', 'output_key', 'error_message', 'job_id',
            'requested_by', 'requested_by_name', 'created_at', 'updated_at', 'completed_at'
        ]
        read_only_fields = fields


class ReportCreateSerializer(serializers.Serializer):
    """
    `type` plus a `filters` object. Filter rules depend on the type:

    - financial_summary: start_date, end_date
    - community_activity: community_name, start_date, end_date
    - participant_demographics / program_impact: community_name, optional dates
    """
    type = serializers.ChoiceField(choices=Report.REPORT_TYPE_CHOICES)
    filters = serializers.DictField(required=False, default=dict)

    def validate(self, attrs):
        attrs['filters'] = lifecycle.normalize_filters(attrs['type'], attrs.get('filters') or {})
        return attrs


class ReportStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Report.STATUS_CHOICES, required=False)
    output_location = serializers.CharField(max_length=500, required=False, allow_blank=True)
    output_key = serializers.CharField(max_length=255, required=False, allow_blank=True)
    error_message = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError(
                "At least one of status, output_location, output_key or error_message must be provided",
                code='empty_update'
            )
        return attrs


class ReportStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    by_status = serializers.DictField(child=serializers.IntegerField())
    by_type = serializers.DictField(child=serializers.IntegerField())
    queue_length = serializers.IntegerField(allow_null=True)
