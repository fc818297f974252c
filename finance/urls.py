from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import DonationViewSet, ExpenseViewSet, FinanceReportViewSet, FinanceSummaryView

router = DefaultRouter()
router.register(r'donations', DonationViewSet, basename='donation')
router.register(r'expenses', ExpenseViewSet, basename='expense')
router.register(r'finance-reports', FinanceReportViewSet, basename='finance-report')

urlpatterns = [
    path('finance/summary/', FinanceSummaryView.as_view(), name='finance-summary'),
    path('', include(router.urls)),
]
