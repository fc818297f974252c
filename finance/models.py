from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import models
from projects.models import Project


class Donation(models.Model):
    CASH = 'Cash'
    IN_KIND = 'InKind'
    DONATION_TYPE_CHOICES = (
        (CASH, 'Cash'),
        (IN_KIND, 'In Kind'),
    )

    donation_type = models.CharField(max_length=10, choices=DONATION_TYPE_CHOICES)
    source = models.CharField(max_length=200)
    program = models.CharField(max_length=200)
    date = models.DateField()

    # Cash payload
    cash_amount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)

    # In-kind payload
    in_kind_estimated_value = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    in_kind_description = models.CharField(max_length=500, blank=True)
    in_kind_category = models.CharField(max_length=100, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date']

    def __str__(self):
        return f"{self.get_donation_type_display()} donation from {self.source}"

    @property
    def cash_details(self):
        if self.donation_type != self.CASH:
            return None
        return {'amount': self.cash_amount}

    @cash_details.setter
    def cash_details(self, value):
        self.cash_amount = value['amount'] if value else None

    @property
    def in_kind_details(self):
        if self.donation_type != self.IN_KIND:
            return None
        return {
            'estimated_value': self.in_kind_estimated_value,
            'description': self.in_kind_description,
            'category': self.in_kind_category,
        }

    @in_kind_details.setter
    def in_kind_details(self, value):
        value = value or {}
        self.in_kind_estimated_value = value.get('estimated_value')
        self.in_kind_description = value.get('description', '')
        self.in_kind_category = value.get('category', '')

    @property
    def value(self):
        """Monetary value of the donation regardless of its type."""
        if self.donation_type == self.CASH:
            return self.cash_amount or Decimal('0.00')
        return self.in_kind_estimated_value or Decimal('0.00')

    def clear_other_payload(self):
        if self.donation_type == self.CASH:
            self.in_kind_details = None
        elif self.donation_type == self.IN_KIND:
            self.cash_details = None


class Expense(models.Model):
    category = models.CharField(max_length=100)
    amount = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    description = models.TextField(blank=True, default='')
    date = models.DateField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date']

    def __str__(self):
        return f"{self.category}: {self.amount}"


class FinanceReport(models.Model):
    project = models.OneToOneField(Project, on_delete=models.CASCADE, related_name='finance')
    income = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    expenses = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'), editable=False)
    description = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-updated_at']

    def __str__(self):
        return f"Finance report for {self.project}"

    def save(self, *args, **kwargs):
        """Recompute the balance on every save"""
        self.balance = Decimal(self.income or 0) - Decimal(self.expenses or 0)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and ({'income', 'expenses'} & set(update_fields)):
            kwargs['update_fields'] = set(update_fields) | {'balance'}
        super().save(*args, **kwargs)
