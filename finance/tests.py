from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from projects.models import Project
from .models import Donation, Expense, FinanceReport
from .services import finance_totals

Admin = get_user_model()


def error_fields(response):
    return {error['field']: error['code'] for error in response.data['errors']}


class FinanceReportBalanceTests(APITestCase):

    def setUp(self):
        admin = Admin.objects.create_user(email='staff@foundation.org', name='Staff', password='rahasia1')
        self.project = Project.objects.create(
            title='Kebun Warga', description='Urban garden', category='Environment',
            start_date=date(2025, 1, 1), created_by=admin
        )

    def test_balance_is_income_minus_expenses_on_every_save(self):
        report = FinanceReport.objects.create(project=self.project, income=Decimal('5000.00'), expenses=Decimal('1200.50'))
        self.assertEqual(report.balance, Decimal('3799.50'))

        report.expenses = Decimal('6000.00')
        report.save()
        report.refresh_from_db()
        self.assertEqual(report.balance, Decimal('-1000.00'))

        report.income = Decimal('7000.00')
        report.save(update_fields=['income'])
        report.refresh_from_db()
        self.assertEqual(report.balance, Decimal('1000.00'))

    def test_balance_cannot_be_written_through_the_api(self):
        admin = Admin.objects.get()
        report = FinanceReport.objects.create(project=self.project, income=Decimal('100.00'))
        self.client.force_authenticate(user=admin)

        response = self.client.patch(
            reverse('finance-report-detail', args=[report.pk]),
            {'balance': '999999.00', 'expenses': '40.00'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['balance'], '60.00')

    def test_anonymous_visitors_do_not_see_draft_project_finances(self):
        admin = Admin.objects.get()
        published = Project.objects.create(
            title='Perpustakaan Desa', description='Village library', category='Education',
            start_date=date(2025, 1, 1), status=Project.STATUS_ACTIVE, created_by=admin
        )
        draft = Project.objects.create(
            title='Rencana Klinik', description='Clinic plan', category='Health',
            start_date=date(2025, 1, 1), status=Project.STATUS_DRAFT, created_by=admin
        )
        FinanceReport.objects.create(project=published, income=Decimal('500.00'))
        hidden = FinanceReport.objects.create(project=draft, income=Decimal('900.00'))

        listing = self.client.get(reverse('finance-report-list'))
        detail = self.client.get(reverse('finance-report-detail', args=[hidden.pk]))

        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual([r['project'] for r in listing.data], [published.pk])
        self.assertEqual(detail.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=admin)
        self.assertEqual(len(self.client.get(reverse('finance-report-list')).data), 2)


class DonationTests(APITestCase):

    def setUp(self):
        admin = Admin.objects.create_user(email='staff@foundation.org', name='Staff', password='rahasia1')
        self.client.force_authenticate(user=admin)

    def post(self, payload):
        base = {'source': 'PT Maju Jaya', 'program': 'Beasiswa', 'date': '2025-03-01'}
        base.update(payload)
        return self.client.post(reverse('donation-list'), base, format='json')

    def test_cash_donation(self):
        response = self.post({'donation_type': 'Cash', 'cash_details': {'amount': '5000000.00'}})

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['cash_details'], {'amount': '5000000.00'})
        self.assertIsNone(response.data['in_kind_details'])

    def test_cash_donation_rejects_in_kind_payload(self):
        response = self.post({
            'donation_type': 'Cash',
            'cash_details': {'amount': '100.00'},
            'in_kind_details': {'estimated_value': '50.00', 'description': 'Buku', 'category': 'Books'},
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(error_fields(response), {'in_kind_details': 'forbidden'})

    def test_in_kind_donation_rejects_cash_payload(self):
        response = self.post({
            'donation_type': 'InKind',
            'cash_details': {'amount': '100.00'},
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(error_fields(response), {'in_kind_details': 'required', 'cash_details': 'forbidden'})

    def test_field_and_payload_errors_are_reported_together(self):
        response = self.client.post(reverse('donation-list'), {
            'donation_type': 'Cash', 'program': 'Beasiswa', 'date': '2025-03-01',
            'cash_details': {'amount': '100.00'},
            'in_kind_details': {'estimated_value': '50.00', 'description': 'Buku', 'category': 'Books'},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(error_fields(response), {'source': 'required', 'in_kind_details': 'forbidden'})

    def test_payload_values_are_validated(self):
        response = self.post({
            'donation_type': 'InKind',
            'in_kind_details': {'estimated_value': '0', 'description': 'ab', 'category': 'Books'},
        })

        self.assertEqual(error_fields(response), {
            'in_kind_details.estimated_value': 'min_value',
            'in_kind_details.description': 'min_length',
        })

    def test_switching_type_clears_the_old_payload(self):
        donation = Donation.objects.create(
            donation_type=Donation.CASH, source='Warga', program='Beasiswa',
            date=date(2025, 3, 1), cash_amount=Decimal('100.00')
        )

        response = self.client.patch(reverse('donation-detail', args=[donation.pk]), {
            'donation_type': 'InKind',
            'in_kind_details': {'estimated_value': '75.00', 'description': 'Seragam sekolah', 'category': 'Clothing'},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        donation.refresh_from_db()
        self.assertIsNone(donation.cash_amount)
        self.assertEqual(donation.in_kind_estimated_value, Decimal('75.00'))

    def test_partial_update_keeps_type_and_guards_other_payload(self):
        donation = Donation.objects.create(
            donation_type=Donation.CASH, source='Warga', program='Beasiswa',
            date=date(2025, 3, 1), cash_amount=Decimal('100.00')
        )
        url = reverse('donation-detail', args=[donation.pk])

        ok = self.client.patch(url, {'source': 'Warga RT 05'}, format='json')
        self.assertEqual(ok.status_code, status.HTTP_200_OK)
        self.assertEqual(ok.data['cash_details'], {'amount': '100.00'})

        bad = self.client.patch(url, {
            'in_kind_details': {'estimated_value': '75.00', 'description': 'Seragam', 'category': 'Clothing'}
        }, format='json')
        self.assertEqual(error_fields(bad), {'in_kind_details': 'forbidden'})

    def test_filters(self):
        Donation.objects.create(donation_type=Donation.CASH, source='PT Maju Jaya', program='Beasiswa',
                                date=date(2025, 1, 5), cash_amount=Decimal('10.00'))
        Donation.objects.create(donation_type=Donation.IN_KIND, source='Toko Buku', program='Perpustakaan',
                                date=date(2025, 2, 5), in_kind_estimated_value=Decimal('20.00'),
                                in_kind_description='Buku cerita', in_kind_category='Books')

        by_type = self.client.get(reverse('donation-list'), {'donation_type': 'InKind'})
        by_source = self.client.get(reverse('donation-list'), {'source': 'maju'})
        by_date = self.client.get(reverse('donation-list'), {'start_date': '2025-02-01', 'end_date': '2025-02-28'})

        self.assertEqual([d['source'] for d in by_type.data], ['Toko Buku'])
        self.assertEqual([d['source'] for d in by_source.data], ['PT Maju Jaya'])
        self.assertEqual([d['source'] for d in by_date.data], ['Toko Buku'])


class ExpenseAndSummaryTests(APITestCase):

    def setUp(self):
        admin = Admin.objects.create_user(email='staff@foundation.org', name='Staff', password='rahasia1')
        self.client.force_authenticate(user=admin)
        Donation.objects.create(donation_type=Donation.CASH, source='Warga', program='Beasiswa',
                                date=date(2025, 1, 10), cash_amount=Decimal('1000.00'))
        Donation.objects.create(donation_type=Donation.IN_KIND, source='Toko', program='Perpustakaan',
                                date=date(2025, 1, 20), in_kind_estimated_value=Decimal('300.00'),
                                in_kind_description='Buku', in_kind_category='Books')
        Expense.objects.create(category='Transport', amount=Decimal('150.00'), date=date(2025, 1, 15))
        Expense.objects.create(category='Konsumsi', amount=Decimal('80.00'), date=date(2025, 2, 15))

    def test_expense_validation(self):
        response = self.client.post(reverse('expense-list'), {
            'category': 'A', 'amount': '0', 'date': '2025-01-01'
        }, format='json')

        self.assertEqual(error_fields(response), {'category': 'min_length', 'amount': 'min_value'})

    def test_expense_amount_range_filter(self):
        response = self.client.get(reverse('expense-list'), {'min_amount': '100', 'max_amount': '200'})
        self.assertEqual([e['category'] for e in response.data], ['Transport'])

    def test_totals_service(self):
        totals = finance_totals('2025-01-01', '2025-01-31')

        self.assertEqual(totals['cash_total'], Decimal('1000.00'))
        self.assertEqual(totals['in_kind_total'], Decimal('300.00'))
        self.assertEqual(totals['expenses_total'], Decimal('150.00'))
        self.assertEqual(totals['net'], Decimal('1150.00'))

    def test_summary_endpoint(self):
        response = self.client.get(reverse('finance-summary'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['donations_total'], '1300.00')
        self.assertEqual(response.data['expenses_total'], '230.00')
        self.assertEqual(response.data['net'], '1070.00')
        self.assertEqual(response.data['donation_count'], 2)

    def test_summary_rejects_inverted_range(self):
        response = self.client.get(reverse('finance-summary'), {'start_date': '2025-02-01', 'end_date': '2025-01-01'})
        self.assertEqual(error_fields(response), {'end_date': 'invalid'})
