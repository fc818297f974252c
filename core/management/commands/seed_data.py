from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from core.models import User, Milestone
from finance.models import Donation, Expense, FinanceReport
from programs.models import Event, Attendance
from projects.models import Project

Admin = get_user_model()

COMMUNITY = 'Kampung Baru'


class Command(BaseCommand):
    help = 'Seeds the database with demo data for the foundation'

    def add_arguments(self, parser):
        parser.add_argument('--admin-email', default='admin@foundation.org')
        parser.add_argument('--admin-password', default='Admin@123')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Starting to seed data...')

        admin = self.create_admin(options['admin_email'], options['admin_password'])
        members = self.create_members()
        self.create_programs(members)
        self.create_finance()
        self.create_projects(admin)

        self.stdout.write(self.style.SUCCESS('Successfully seeded all data!'))

    def create_admin(self, email, password):
        self.stdout.write('Creating super admin...')
        admin = Admin.objects.filter(email=email.lower()).first()
        if admin is None:
            admin = Admin.objects.create_superuser(email=email, name='Foundation Admin', password=password)
        return admin

    def create_members(self):
        self.stdout.write('Creating community members...')
        members_data = [
            ('Dewi Lestari', ['Tutor'], 'Pekerja', '26-35', 'Bogor'),
            ('Budi Santoso', ['Peserta'], 'Pelajar', '<18', 'Bogor'),
            ('Siti Aminah', ['Peserta'], 'Mahasiswa', '18-25', 'Depok'),
            ('Agus Salim', ['Peserta', 'Relawan'], 'Wirausaha', '36-45', 'Bogor'),
        ]
        members = []
        for name, roles, occupation, age, domicile in members_data:
            member, _ = User.objects.get_or_create(
                name=name,
                defaults={
                    'communities': [COMMUNITY],
                    'roles': roles,
                    'occupation_status': occupation,
                    'age_category': age,
                    'domicile': domicile,
                }
            )
            members.append(member)
        return members

    def create_programs(self, members):
        self.stdout.write('Creating programs and attendance...')
        tutor, *participants = members
        event, created = Event.objects.get_or_create(
            name='Digital Literacy Class',
            community=COMMUNITY,
            defaults={
                'date': datetime(2025, 1, 15, 2, 0, tzinfo=dt_timezone.utc),
                'tutor_type': Event.TUTOR_INTERNAL,
                'tutor_user': tutor,
                'tutor_name': tutor.name,
                'location': 'Balai Warga',
            }
        )
        if created:
            for member in participants:
                Attendance.objects.create(event=event, attendee_type=Attendance.MEMBER, attendee_user=member)
            Attendance.objects.create(event=event, attendee_type=Attendance.GUEST, attendee_name='Tamu Desa')

        Milestone.objects.get_or_create(
            user=participants[0],
            milestone_type=Milestone.LEVEL_UP,
            defaults={'detail': {'from': 'Beginner', 'to': 'Intermediate'}, 'date': date(2025, 2, 1)}
        )

    def create_finance(self):
        self.stdout.write('Creating donations and expenses...')
        Donation.objects.get_or_create(
            source='PT Maju Jaya', program='Beasiswa', date=date(2025, 1, 5),
            defaults={'donation_type': Donation.CASH, 'cash_amount': Decimal('5000000.00')}
        )
        Donation.objects.get_or_create(
            source='Toko Buku Sejahtera', program='Perpustakaan', date=date(2025, 1, 20),
            defaults={
                'donation_type': Donation.IN_KIND,
                'in_kind_estimated_value': Decimal('1500000.00'),
                'in_kind_description': '120 buku cerita anak',
                'in_kind_category': 'Books',
            }
        )
        Expense.objects.get_or_create(
            category='Transport', date=date(2025, 1, 15),
            defaults={'amount': Decimal('350000.00'), 'description': 'Sewa angkot untuk peserta'}
        )

    def create_projects(self, admin):
        self.stdout.write('Creating projects...')
        project, _ = Project.objects.get_or_create(
            title='Kebun Warga',
            defaults={
                'description': 'Urban garden run by the community',
                'category': 'Environment',
                'start_date': date(2025, 1, 1),
                'status': Project.STATUS_ACTIVE,
                'created_by': admin,
            }
        )
        FinanceReport.objects.get_or_create(
            project=project,
            defaults={'income': Decimal('2000000.00'), 'expenses': Decimal('750000.00')}
        )
