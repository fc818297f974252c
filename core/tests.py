from datetime import date
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from projects.models import Project
from .models import User, Milestone

Admin = get_user_model()


def error_fields(response):
    return {error['field']: error['code'] for error in response.data['errors']}


class AdminAccountTests(APITestCase):

    def test_first_admin_can_register_without_auth_and_becomes_super_admin(self):
        response = self.client.post(reverse('admin-list'), {
            'name': 'Siti Rahma', 'email': 'Siti@Foundation.org', 'password': 'rahasia1'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], Admin.ROLE_SUPER_ADMIN)
        self.assertEqual(response.data['email'], 'siti@foundation.org')
        self.assertNotIn('password', response.data)

    def test_anonymous_registration_closed_once_an_admin_exists(self):
        Admin.objects.create_superuser(email='root@foundation.org', name='Root', password='rahasia1')

        response = self.client.post(reverse('admin-list'), {
            'name': 'Intruder', 'email': 'x@foundation.org', 'password': 'rahasia1'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_only_super_admin_creates_admins(self):
        regular = Admin.objects.create_user(email='staff@foundation.org', name='Staff', password='rahasia1')
        self.client.force_authenticate(user=regular)

        response = self.client.post(reverse('admin-list'), {
            'name': 'New One', 'email': 'new@foundation.org', 'password': 'rahasia1'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_regular_admin_cannot_change_own_role(self):
        regular = Admin.objects.create_user(email='staff@foundation.org', name='Staff', password='rahasia1')
        self.client.force_authenticate(user=regular)

        response = self.client.patch(
            reverse('admin-detail', args=[regular.pk]), {'role': Admin.ROLE_SUPER_ADMIN}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        regular.refresh_from_db()
        self.assertEqual(regular.role, Admin.ROLE_ADMIN)

    def test_validation_errors_are_collected_with_codes(self):
        response = self.client.post(reverse('admin-list'), {
            'name': 'A', 'email': 'not-an-email', 'password': '123'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['detail'], 'Validation failed')
        self.assertIn('error_id', response.data)
        fields = error_fields(response)
        self.assertIn('name', fields)
        self.assertEqual(fields['email'], 'invalid')
        self.assertIn('password', fields)
        for error in response.data['errors']:
            self.assertTrue(error['message'])

    def test_login_returns_tokens_and_admin(self):
        Admin.objects.create_user(email='staff@foundation.org', name='Staff', password='rahasia1')

        response = self.client.post(reverse('jwt-create'), {
            'email': 'staff@foundation.org', 'password': 'rahasia1'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['admin']['name'], 'Staff')

        me = self.client.get(reverse('current-admin'), HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data['email'], 'staff@foundation.org')

    def test_deleting_admin_with_projects_is_a_conflict(self):
        owner = Admin.objects.create_superuser(email='root@foundation.org', name='Root', password='rahasia1')
        Project.objects.create(
            title='Kebun Warga', description='Urban garden', category='Environment',
            start_date=date(2025, 1, 1), created_by=owner
        )
        self.client.force_authenticate(user=owner)

        response = self.client.delete(reverse('admin-detail', args=[owner.pk]))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(Admin.objects.filter(pk=owner.pk).exists())


class CommunityUserTests(APITestCase):

    def setUp(self):
        self.admin = Admin.objects.create_user(email='staff@foundation.org', name='Staff', password='rahasia1')
        self.client.force_authenticate(user=self.admin)

    def test_users_require_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse('user-list'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_cleans_string_lists(self):
        response = self.client.post(reverse('user-list'), {
            'name': 'Budi', 'communities': [' Kampung Baru ', 'Kampung Baru', 'Sungai Kecil'],
            'roles': ['Peserta'], 'occupation_status': 'Pelajar', 'age_category': '<18', 'domicile': 'Bogor'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['communities'], ['Kampung Baru', 'Sungai Kecil'])
        self.assertEqual(response.data['milestone_count'], 0)

    def test_filter_by_community_matches_whole_name(self):
        User.objects.create(name='Budi', communities=['Kampung Baru'])
        User.objects.create(name='Ani', communities=['Kampung Baru Timur'])

        response = self.client.get(reverse('user-list'), {'community': 'Kampung Baru'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u['name'] for u in response.data], ['Budi'])

    def test_filter_by_community_with_non_ascii_name(self):
        User.objects.create(name='Élise', communities=['Désa Maju'])
        User.objects.create(name='Budi', communities=['Kampung Baru'])

        response = self.client.get(reverse('user-list'), {'community': 'Désa Maju'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u['name'] for u in response.data], ['Élise'])

    def test_empty_update_is_rejected(self):
        user = User.objects.create(name='Budi')

        response = self.client.patch(reverse('user-detail', args=[user.pk]), {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(error_fields(response), {'non_field_errors': 'empty_update'})


class MilestoneTests(APITestCase):

    def setUp(self):
        admin = Admin.objects.create_user(email='staff@foundation.org', name='Staff', password='rahasia1')
        self.client.force_authenticate(user=admin)
        self.member = User.objects.create(name='Budi', communities=['Kampung Baru'])

    def test_level_up_requires_from_and_to(self):
        response = self.client.post(reverse('milestone-list'), {
            'user': self.member.pk, 'type': 'level_up', 'detail': {'from': 'Beginner'}, 'date': '2025-02-01'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(error_fields(response), {'detail.to': 'required'})

    def test_unknown_user_and_incomplete_detail_reported_together(self):
        response = self.client.post(reverse('milestone-list'), {
            'user': 99999, 'type': 'level_up', 'detail': {'from': 'Beginner'}, 'date': '2025-02-01'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(error_fields(response), {'user': 'does_not_exist', 'detail.to': 'required'})

    def test_detail_is_trimmed_to_the_selected_type(self):
        response = self.client.post(reverse('milestone-list'), {
            'user': self.member.pk, 'type': 'job_placement',
            'detail': {'company': 'Acme', 'role': 'Designer', 'title': 'ignored'}, 'date': '2025-03-15'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        milestone = Milestone.objects.get(pk=response.data['id'])
        self.assertEqual(milestone.detail, {'company': 'Acme', 'role': 'Designer'})

    def test_changing_type_revalidates_stored_detail(self):
        milestone = Milestone.objects.create(
            user=self.member, milestone_type=Milestone.PROJECT_SUBMITTED,
            detail={'title': 'Website'}, date=date(2025, 1, 10)
        )

        response = self.client.patch(
            reverse('milestone-detail', args=[milestone.pk]), {'type': 'level_up'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(error_fields(response), {'detail.from': 'required', 'detail.to': 'required'})


class SeedDataCommandTests(APITestCase):

    def test_seed_is_idempotent(self):
        out = StringIO()
        call_command('seed_data', stdout=out)
        call_command('seed_data', stdout=out)

        self.assertIn('Successfully seeded all data!', out.getvalue())
        self.assertEqual(Admin.objects.filter(role=Admin.ROLE_SUPER_ADMIN).count(), 1)
        self.assertEqual(User.objects.count(), 4)
        self.assertEqual(Milestone.objects.count(), 1)
        project = Project.objects.get()
        self.assertEqual(project.finance.balance, project.finance.income - project.finance.expenses)
