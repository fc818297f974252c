from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from finance.models import FinanceReport
from .models import Project, Media

Admin = get_user_model()


def error_fields(response):
    return {error['field']: error['code'] for error in response.data['errors']}


class ProjectTests(APITestCase):

    def setUp(self):
        self.admin = Admin.objects.create_user(email='staff@foundation.org', name='Staff', password='rahasia1')
        self.client.force_authenticate(user=self.admin)

    def make_project(self, **kwargs):
        defaults = {
            'title': 'Kebun Warga', 'description': 'Urban garden for the neighbourhood',
            'category': 'Environment', 'start_date': date(2025, 1, 1),
            'status': Project.STATUS_ACTIVE, 'created_by': self.admin,
        }
        defaults.update(kwargs)
        return Project.objects.create(**defaults)

    def test_create_records_the_creating_admin(self):
        response = self.client.post(reverse('project-list'), {
            'title': 'Perpustakaan Desa', 'description': 'Village library', 'category': 'Education',
            'start_date': '2025-02-01', 'end_date': '2025-12-31'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_by'], self.admin.pk)
        self.assertEqual(response.data['status'], Project.STATUS_DRAFT)
        self.assertIsNone(response.data['finance'])
        self.assertEqual(response.data['gallery'], [])

    def test_end_date_before_start_date(self):
        response = self.client.post(reverse('project-list'), {
            'title': 'Backwards', 'description': 'x', 'category': 'Education',
            'start_date': '2025-02-01', 'end_date': '2025-01-01'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('end_date', error_fields(response))

    def test_anonymous_visitors_do_not_see_drafts(self):
        self.make_project(title='Published')
        self.make_project(title='Draft', status=Project.STATUS_DRAFT)
        self.client.force_authenticate(user=None)

        response = self.client.get(reverse('project-list'))

        self.assertEqual([p['title'] for p in response.data], ['Published'])

    def test_update_records_the_updating_admin(self):
        project = self.make_project()
        other = Admin.objects.create_user(email='other@foundation.org', name='Other', password='rahasia1')
        self.client.force_authenticate(user=other)

        response = self.client.patch(reverse('project-detail', args=[project.pk]), {'status': 'completed'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['updated_by'], other.pk)

    def test_detail_includes_gallery_and_finance(self):
        project = self.make_project()
        Media.objects.create(project=project, media_type=Media.TYPE_IMAGE, url='https://cdn.example.org/a.jpg', uploaded_by=self.admin)
        FinanceReport.objects.create(project=project, income=Decimal('1000.00'), expenses=Decimal('250.00'))

        response = self.client.get(reverse('project-detail', args=[project.pk]))

        self.assertEqual(len(response.data['gallery']), 1)
        self.assertEqual(response.data['gallery'][0]['type'], 'image')
        self.assertEqual(response.data['finance']['balance'], '750.00')


class MediaTests(APITestCase):

    def setUp(self):
        self.admin = Admin.objects.create_user(email='staff@foundation.org', name='Staff', password='rahasia1')
        self.client.force_authenticate(user=self.admin)
        self.project = Project.objects.create(
            title='Kebun Warga', description='Urban garden', category='Environment',
            start_date=date(2025, 1, 1), status=Project.STATUS_ACTIVE, created_by=self.admin
        )

    def test_upload_sets_uploader(self):
        response = self.client.post(reverse('media-list'), {
            'project': self.project.pk, 'type': 'video', 'url': 'https://cdn.example.org/v.mp4', 'caption': 'Panen'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['uploaded_by'], self.admin.pk)

    def test_invalid_type_and_url(self):
        response = self.client.post(reverse('media-list'), {
            'project': self.project.pk, 'type': 'audio', 'url': 'not a url', 'caption': 'x' * 501
        }, format='json')

        self.assertEqual(error_fields(response), {'type': 'invalid_choice', 'url': 'invalid', 'caption': 'max_length'})

    def test_filter_by_project_and_type(self):
        other = Project.objects.create(
            title='Other', description='x', category='Health',
            start_date=date(2025, 1, 1), status=Project.STATUS_ACTIVE, created_by=self.admin
        )
        Media.objects.create(project=self.project, media_type=Media.TYPE_IMAGE, url='https://cdn.example.org/1.jpg', uploaded_by=self.admin)
        Media.objects.create(project=self.project, media_type=Media.TYPE_DOCUMENT, url='https://cdn.example.org/1.pdf', uploaded_by=self.admin)
        Media.objects.create(project=other, media_type=Media.TYPE_IMAGE, url='https://cdn.example.org/2.jpg', uploaded_by=self.admin)

        response = self.client.get(reverse('media-list'), {'project': self.project.pk, 'type': 'image'})

        self.assertEqual([m['url'] for m in response.data], ['https://cdn.example.org/1.jpg'])
