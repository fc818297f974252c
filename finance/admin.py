from django.contrib import admin
from .models import Donation, Expense, FinanceReport


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display = ('source', 'donation_type', 'program', 'date', 'cash_amount', 'in_kind_estimated_value')
    list_filter = ('donation_type', 'date')
    search_fields = ('source', 'program', 'in_kind_description')


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ('category', 'amount', 'date')
    list_filter = ('category', 'date')
    search_fields = ('category', 'description')


@admin.register(FinanceReport)
class FinanceReportAdmin(admin.ModelAdmin):
    list_display = ('project', 'income', 'expenses', 'balance', 'updated_at')
    readonly_fields = ('balance',)
