from decimal import Decimal
from django.db.models import Sum, Count
from .models import Donation, Expense

ZERO = Decimal('0.00')


def _date_range(queryset, start_date=None, end_date=None):
    if start_date:
        queryset = queryset.filter(date__gte=start_date)
    if end_date:
        queryset = queryset.filter(date__lte=end_date)
    return queryset


def finance_totals(start_date=None, end_date=None):
    """
    Sum donations (by type) and expenses, optionally restricted to a date range.
    Shared by the summary endpoint and the financial summary report.
    """
    donations = _date_range(Donation.objects.all(), start_date, end_date)
    expenses = _date_range(Expense.objects.all(), start_date, end_date)

    cash = donations.filter(donation_type=Donation.CASH).aggregate(
        total=Sum('cash_amount'), count=Count('id'))
    in_kind = donations.filter(donation_type=Donation.IN_KIND).aggregate(
        total=Sum('in_kind_estimated_value'), count=Count('id'))
    spent = expenses.aggregate(total=Sum('amount'), count=Count('id'))

    cash_total = cash['total'] or ZERO
    in_kind_total = in_kind['total'] or ZERO
    expenses_total = spent['total'] or ZERO

    return {
        'cash_total': cash_total,
        'in_kind_total': in_kind_total,
        'donations_total': cash_total + in_kind_total,
        'expenses_total': expenses_total,
        'net': cash_total + in_kind_total - expenses_total,
        'donation_count': cash['count'] + in_kind['count'],
        'expense_count': spent['count'],
    }
