import logging

from django.db.models import Count
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiExample
from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response

from core.permissions import IsAdmin
from . import gateway, lifecycle
from .filters import ReportFilter
from .models import Report
from .serializers import (
    ReportSerializer, ReportCreateSerializer, ReportStatusUpdateSerializer, ReportStatsSerializer
)

logger = logging.getLogger(__name__)

REPORT_REQUEST_EXAMPLES = [
    OpenApiExample('Financial summary', value={
        "type": "financial_summary", "filters": {"start_date": "2025-01-01", "end_date": "2025-03-31"}
    }, request_only=True),
    OpenApiExample('Community activity', value={
        "type": "community_activity",
        "filters": {"community_name": "Kampung Baru", "start_date": "2025-01-01", "end_date": "2025-06-30"}
    }, request_only=True),
    OpenApiExample('Participant demographics', value={
        "type": "participant_demographics", "filters": {"community_name": "Kampung Baru"}
    }, request_only=True),
]


class ReportViewSet(viewsets.ModelViewSet):
    """
    Report jobs. Creating a report only records it as pending; generation
    happens in an RQ worker once the report is enqueued. Poll the detail
    endpoint until `status` is `completed` (see `output_location`) or
    `failed` (see `error_message`).
    """
    queryset = Report.objects.select_related('requested_by')
    serializer_class = ReportSerializer
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = ReportFilter
    ordering_fields = ['created_at', 'updated_at', 'completed_at']
    ordering = ['-created_at']

    @extend_schema(
        summary="Create a report job (pending)",
        request=ReportCreateSerializer,
        responses={201: ReportSerializer},
        examples=REPORT_REQUEST_EXAMPLES,
    )
    def create(self, request, *args, **kwargs):
        serializer = ReportCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = lifecycle.create_report(
            serializer.validated_data['type'],
            serializer.validated_data['filters'],
            requested_by=request.user,
        )
        return Response(ReportSerializer(report).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Worker status update",
        description="Moves the report along its lifecycle. Completing requires `output_location`, failing requires `error_message`.",
        request=ReportStatusUpdateSerializer,
        responses={200: ReportSerializer},
        examples=[
            OpenApiExample('Completed', value={
                "status": "completed", "output_location": "/media/reports/financial_summary_1.xlsx"
            }, request_only=True),
            OpenApiExample('Failed', value={"status": "failed", "error_message": "No data for period"}, request_only=True),
        ]
    )
    def update(self, request, *args, **kwargs):
        report = self.get_object()
        serializer = ReportStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = lifecycle.apply_worker_update(report, serializer.validated_data)
        return Response(ReportSerializer(report).data)

    @extend_schema(
        summary="Worker status update (partial)",
        request=ReportStatusUpdateSerializer,
        responses={200: ReportSerializer},
    )
    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        lifecycle.delete_report(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Enqueue or retry a report",
        description="Publishes a generation job. A failed report is reset to pending first. Returns 409 for processing or completed reports and 503 when the queue is unreachable.",
        request=None,
        responses={202: ReportSerializer},
    )
    @action(detail=True, methods=['post'])
    def enqueue(self, request, pk=None):
        report = self.get_object()
        report = gateway.enqueue_report(report.pk)
        return Response(ReportSerializer(report).data, status=status.HTTP_202_ACCEPTED)

    @extend_schema(
        summary="Create a report and enqueue it",
        request=ReportCreateSerializer,
        responses={201: ReportSerializer},
        examples=REPORT_REQUEST_EXAMPLES,
    )
    @action(detail=False, methods=['post'], url_path='create-and-enqueue', url_name='create-and-enqueue')
    def create_and_enqueue(self, request):
        serializer = ReportCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = gateway.create_and_enqueue(
            serializer.validated_data['type'],
            serializer.validated_data['filters'],
            requested_by=request.user,
        )
        return Response(ReportSerializer(report).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Report counts and queue length", responses={200: ReportStatsSerializer})
    @action(detail=False, methods=['get'])
    def stats(self, request):
        by_status = {value: 0 for value, _ in Report.STATUS_CHOICES}
        for row in Report.objects.order_by().values('status').annotate(total=Count('id')):
            by_status[row['status']] = row['total']

        by_type = {value: 0 for value, _ in Report.REPORT_TYPE_CHOICES}
        for row in Report.objects.order_by().values('report_type').annotate(total=Count('id')):
            by_type[row['report_type']] = row['total']

        data = {
            'total': sum(by_status.values()),
            'by_status': by_status,
            'by_type': by_type,
            'queue_length': gateway.queue_length(),
        }
        return Response(ReportStatsSerializer(data).data)
