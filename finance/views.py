import logging
from datetime import date

from rest_framework import viewsets, filters
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from core.permissions import IsAdmin, IsAdminOrReadOnly
from projects.models import Project
from .models import Donation, Expense, FinanceReport
from .serializers import (
    DonationSerializer, ExpenseSerializer, FinanceReportSerializer, FinanceSummarySerializer
)
from .filters import DonationFilter, ExpenseFilter, FinanceReportFilter
from .services import finance_totals

logger = logging.getLogger(__name__)


class DonationViewSet(viewsets.ModelViewSet):
    queryset = Donation.objects.all()
    serializer_class = DonationSerializer
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = DonationFilter
    ordering_fields = ['date', 'created_at']

    @extend_schema(
        examples=[
            OpenApiExample('Cash', value={
                "donation_type": "Cash", "source": "PT Maju Jaya", "program": "Beasiswa",
                "date": "2025-03-01", "cash_details": {"amount": "5000000.00"}
            }, request_only=True),
            OpenApiExample('In kind', value={
                "donation_type": "InKind", "source": "Toko Buku Sejahtera", "program": "Perpustakaan",
                "date": "2025-03-05",
                "in_kind_details": {"estimated_value": "1500000.00", "description": "120 buku cerita", "category": "Books"}
            }, request_only=True),
        ]
    )
    def create(self, request, *args, **kwargs):
        return super().create(request, *args, **kwargs)

    def perform_create(self, serializer):
        donation = serializer.save()
        logger.info(f"Recorded {donation.donation_type} donation {donation.id} from {donation.source}")


class ExpenseViewSet(viewsets.ModelViewSet):
    queryset = Expense.objects.all()
    serializer_class = ExpenseSerializer
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = ExpenseFilter
    ordering_fields = ['date', 'amount']


class FinanceReportViewSet(viewsets.ModelViewSet):
    """
    Per-project income and expenses. The balance is derived and read-only.
    """
    queryset = FinanceReport.objects.select_related('project')
    serializer_class = FinanceReportSerializer
    permission_classes = [IsAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend]
    filterset_class = FinanceReportFilter

    def get_queryset(self):
        queryset = super().get_queryset()
        if not self.request.user.is_authenticated:
            queryset = queryset.exclude(project__status=Project.STATUS_DRAFT)
        return queryset


class FinanceSummaryView(APIView):
    permission_classes = [IsAdmin]

    @staticmethod
    def _parse_date(request, name):
        raw = request.query_params.get(name)
        if not raw:
            return None
        try:
            return date.fromisoformat(raw)
        except ValueError:
            raise ValidationError({name: f"Invalid {name}. Use YYYY-MM-DD format."})

    @extend_schema(
        summary="Donation and expense totals",
        parameters=[
            OpenApiParameter(name='start_date', type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY),
            OpenApiParameter(name='end_date', type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY),
        ],
        responses={200: FinanceSummarySerializer},
    )
    def get(self, request):
        start_date = self._parse_date(request, 'start_date')
        end_date = self._parse_date(request, 'end_date')
        if start_date and end_date and start_date > end_date:
            raise ValidationError({'end_date': "end_date must not be before start_date"})

        totals = finance_totals(start_date, end_date)
        return Response(FinanceSummarySerializer(totals).data)
