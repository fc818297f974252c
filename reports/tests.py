import shutil
import tempfile
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from io import BytesIO
from unittest import mock

import openpyxl
from django.contrib.auth import get_user_model
from django.core.files.storage import default_storage
from django.test import TestCase, override_settings
from django.urls import reverse
from redis.exceptions import ConnectionError as RedisConnectionError
from rest_framework import serializers, status
from rest_framework.exceptions import NotFound
from rest_framework.test import APITestCase
from rq.job import JobStatus

from core.models import User, Milestone
from finance.models import Donation, Expense
from programs.models import Event, Attendance
from . import gateway, lifecycle, tasks
from .exceptions import InvalidTransition, QueuePublishFailure
from .models import Report

Admin = get_user_model()

FINANCIAL_FILTERS = {'start_date': '2025-01-01', 'end_date': '2025-01-31'}


class FakeJob:
    def __init__(self, job_id, status=JobStatus.QUEUED):
        self.id = job_id
        self.status = status

    def get_status(self):
        return self.status


class FakeQueue:
    """Stands in for the django-rq queue; records what would be published."""
    name = 'default'

    def __init__(self, down=False):
        self.down = down
        self.jobs = {}
        self.published = []

    def enqueue(self, func, *args, **kwargs):
        if self.down:
            raise RedisConnectionError('Error 111 connecting to localhost:6379. Connection refused.')
        job = FakeJob(f'job-{len(self.published) + 1}')
        self.jobs[job.id] = job
        self.published.append((func, args, kwargs))
        return job

    def fetch_job(self, job_id):
        if self.down:
            raise RedisConnectionError('Connection refused.')
        return self.jobs.get(job_id)

    @property
    def count(self):
        if self.down:
            raise RedisConnectionError('Connection refused.')
        return sum(1 for job in self.jobs.values() if job.status == JobStatus.QUEUED)


def make_report(status=Report.PENDING, report_type=Report.FINANCIAL_SUMMARY, **kwargs):
    filters = kwargs.pop('filters', FINANCIAL_FILTERS)
    return Report.objects.create(report_type=report_type, filters=filters, status=status, **kwargs)


def error_fields(response):
    return {error['field']: error['code'] for error in response.data['errors']}


class QueuePatchMixin:

    def use_queue(self, queue):
        patcher = mock.patch('reports.gateway.get_report_queue', return_value=queue)
        patcher.start()
        self.addCleanup(patcher.stop)
        return queue


class TransitionTableTests(TestCase):

    def test_allowed_transitions(self):
        for current, requested in [
            (None, Report.PENDING),
            (Report.PENDING, Report.PROCESSING),
            (Report.PROCESSING, Report.COMPLETED),
            (Report.PROCESSING, Report.FAILED),
            (Report.FAILED, Report.PENDING),
            (Report.PENDING, lifecycle.DELETED),
            (Report.COMPLETED, lifecycle.DELETED),
            (Report.FAILED, lifecycle.DELETED),
        ]:
            lifecycle.check_transition(current, requested)

    def test_refused_transitions_name_both_statuses(self):
        for current, requested in [
            (None, Report.PROCESSING),
            (Report.PENDING, Report.COMPLETED),
            (Report.PROCESSING, Report.PENDING),
            (Report.PROCESSING, lifecycle.DELETED),
            (Report.COMPLETED, Report.PENDING),
            (Report.COMPLETED, Report.PROCESSING),
            (Report.FAILED, Report.COMPLETED),
        ]:
            with self.assertRaises(InvalidTransition) as ctx:
                lifecycle.check_transition(current, requested)
            self.assertIn(str(requested), str(ctx.exception.detail))
            self.assertIn(str(current), str(ctx.exception.detail))
            self.assertEqual(ctx.exception.status_code, status.HTTP_409_CONFLICT)


class CreateReportTests(TestCase):

    def test_community_activity_names_every_missing_filter(self):
        with self.assertRaises(serializers.ValidationError) as ctx:
            lifecycle.create_report(Report.COMMUNITY_ACTIVITY, {})

        missing = ctx.exception.detail['filters']
        self.assertEqual(set(missing), {'community_name', 'start_date', 'end_date'})
        self.assertEqual(missing['community_name'][0].code, 'required')
        self.assertFalse(Report.objects.exists())

    def test_community_activity_missing_only_dates(self):
        with self.assertRaises(serializers.ValidationError) as ctx:
            lifecycle.create_report(Report.COMMUNITY_ACTIVITY, {'community_name': 'Kampung Baru'})

        self.assertEqual(set(ctx.exception.detail['filters']), {'start_date', 'end_date'})

    def test_created_pending_with_iso_dates_and_unused_keys_dropped(self):
        report = lifecycle.create_report(Report.FINANCIAL_SUMMARY, {
            'start_date': date(2025, 1, 1), 'end_date': '2025-01-31', 'community_name': 'ignored'
        })

        self.assertEqual(report.status, Report.PENDING)
        self.assertEqual(report.filters, {'start_date': '2025-01-01', 'end_date': '2025-01-31'})
        self.assertIsNone(report.error_message)
        self.assertEqual(report.output_location, '')

    def test_optional_dates_for_demographics(self):
        report = lifecycle.create_report(Report.PARTICIPANT_DEMOGRAPHICS, {'community_name': ' Kampung Baru '})
        self.assertEqual(report.filters, {'community_name': 'Kampung Baru'})

    def test_inverted_range_and_bad_date(self):
        with self.assertRaises(serializers.ValidationError) as ctx:
            lifecycle.create_report(Report.FINANCIAL_SUMMARY, {'start_date': '2025-02-01', 'end_date': '2025-01-01'})
        self.assertEqual(ctx.exception.detail['filters']['end_date'][0].code, 'invalid_range')

        with self.assertRaises(serializers.ValidationError) as ctx:
            lifecycle.create_report(Report.FINANCIAL_SUMMARY, {'start_date': '01/02/2025', 'end_date': '2025-01-01'})
        self.assertEqual(ctx.exception.detail['filters']['start_date'][0].code, 'invalid')


class WorkerTransitionTests(TestCase):

    def test_claim_is_won_once(self):
        report = make_report()

        first = lifecycle.claim_report(report.pk)
        second = lifecycle.claim_report(report.pk)

        self.assertEqual(first.status, Report.PROCESSING)
        self.assertIsNone(second)

    def test_complete_requires_output_location(self):
        report = make_report(status=Report.PROCESSING)

        with self.assertRaises(serializers.ValidationError):
            lifecycle.complete_report(report.pk, '')

        report.refresh_from_db()
        self.assertEqual(report.status, Report.PROCESSING)

        done = lifecycle.complete_report(report.pk, '/media/reports/out.xlsx', 'reports/out.xlsx')
        self.assertEqual(done.status, Report.COMPLETED)
        self.assertEqual(done.output_location, '/media/reports/out.xlsx')
        self.assertIsNotNone(done.completed_at)

    def test_fail_requires_message(self):
        report = make_report(status=Report.PROCESSING)

        with self.assertRaises(serializers.ValidationError):
            lifecycle.fail_report(report.pk, '  ')

        failed = lifecycle.fail_report(report.pk, 'timeout')
        self.assertEqual(failed.status, Report.FAILED)
        self.assertEqual(failed.error_message, 'timeout')
        self.assertEqual(failed.output_location, '')

    def test_complete_from_pending_is_refused(self):
        report = make_report()

        with self.assertRaises(InvalidTransition):
            lifecycle.complete_report(report.pk, '/media/x.xlsx')

        report.refresh_from_db()
        self.assertEqual(report.status, Report.PENDING)

    def test_missing_report(self):
        with self.assertRaises(NotFound):
            lifecycle.fail_report(999, 'boom')

    def test_processing_report_cannot_be_deleted(self):
        report = make_report(status=Report.PROCESSING)

        with self.assertRaises(InvalidTransition):
            lifecycle.delete_report(report)

        self.assertTrue(Report.objects.filter(pk=report.pk).exists())

    def test_other_statuses_can_be_deleted(self):
        for status_value in (Report.PENDING, Report.COMPLETED, Report.FAILED):
            report = make_report(status=status_value)
            lifecycle.delete_report(report)
            self.assertFalse(Report.objects.filter(pk=report.pk).exists())


class EnqueueGatewayTests(QueuePatchMixin, TestCase):

    def setUp(self):
        self.queue = self.use_queue(FakeQueue())

    def test_pending_report_is_published_once(self):
        report = make_report()

        result = gateway.enqueue_report(report.pk)

        self.assertEqual(result.status, Report.PENDING)
        self.assertEqual(len(self.queue.published), 1)
        func, args, kwargs = self.queue.published[0]
        self.assertIs(func, tasks.generate_report)
        self.assertEqual(args, (report.pk,))
        self.assertIn('job_timeout', kwargs)
        report.refresh_from_db()
        self.assertEqual(report.job_id, 'job-1')

    def test_enqueue_twice_is_idempotent_while_job_waits(self):
        report = make_report()

        gateway.enqueue_report(report.pk)
        gateway.enqueue_report(report.pk)

        report.refresh_from_db()
        self.assertEqual(report.status, Report.PENDING)
        self.assertEqual(len(self.queue.published), 1)

    def test_pending_report_with_lost_job_is_published_again(self):
        report = make_report()
        gateway.enqueue_report(report.pk)
        self.queue.jobs['job-1'].status = JobStatus.FAILED

        gateway.enqueue_report(report.pk)

        report.refresh_from_db()
        self.assertEqual(len(self.queue.published), 2)
        self.assertEqual(report.job_id, 'job-2')

    def test_failed_report_is_reset_to_pending(self):
        report = make_report(
            status=Report.FAILED, error_message='timeout',
            output_location='/media/old.xlsx', output_key='old.xlsx'
        )

        gateway.enqueue_report(report.pk)

        report.refresh_from_db()
        self.assertEqual(report.status, Report.PENDING)
        self.assertIsNone(report.error_message)
        self.assertEqual(report.output_location, '')
        self.assertEqual(report.output_key, '')
        self.assertEqual(len(self.queue.published), 1)

    def test_processing_and_completed_are_refused(self):
        for status_value in (Report.PROCESSING, Report.COMPLETED):
            report = make_report(status=status_value)
            with self.assertRaises(InvalidTransition):
                gateway.enqueue_report(report.pk)
            report.refresh_from_db()
            self.assertEqual(report.status, status_value)
        self.assertEqual(self.queue.published, [])

    def test_unknown_report(self):
        with self.assertRaises(NotFound):
            gateway.enqueue_report(12345)

    def test_queue_outage_leaves_failed_report_untouched(self):
        self.queue.down = True
        report = make_report(status=Report.FAILED, error_message='timeout')

        with self.assertRaises(QueuePublishFailure):
            gateway.enqueue_report(report.pk)

        report.refresh_from_db()
        self.assertEqual(report.status, Report.FAILED)
        self.assertEqual(report.error_message, 'timeout')
        self.assertIsNone(report.job_id)

    def test_create_and_enqueue_keeps_report_when_queue_is_down(self):
        self.queue.down = True

        with self.assertRaises(QueuePublishFailure):
            gateway.create_and_enqueue(Report.FINANCIAL_SUMMARY, FINANCIAL_FILTERS)

        report = Report.objects.get()
        self.assertEqual(report.status, Report.PENDING)

    def test_queue_length(self):
        gateway.enqueue_report(make_report().pk)
        gateway.enqueue_report(make_report().pk)
        self.assertEqual(gateway.queue_length(), 2)

        self.queue.down = True
        self.assertIsNone(gateway.queue_length())


class ReportApiTests(QueuePatchMixin, APITestCase):

    def setUp(self):
        self.admin = Admin.objects.create_user(email='staff@foundation.org', name='Staff', password='rahasia1')
        self.client.force_authenticate(user=self.admin)
        self.queue = self.use_queue(FakeQueue())

    def test_reports_are_admin_only(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse('report-list'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_returns_pending_report(self):
        response = self.client.post(reverse('report-list'), {
            'type': 'community_activity',
            'filters': {'community_name': 'Kampung Baru', 'start_date': '2025-01-01', 'end_date': '2025-06-30'}
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['type'], 'community_activity')
        self.assertEqual(response.data['requested_by'], self.admin.pk)
        self.assertEqual(self.queue.published, [])

    def test_create_lists_missing_filters(self):
        response = self.client.post(reverse('report-list'), {'type': 'community_activity', 'filters': {}}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(error_fields(response), {
            'filters.community_name': 'required',
            'filters.start_date': 'required',
            'filters.end_date': 'required',
        })

    def test_create_rejects_unknown_type(self):
        response = self.client.post(reverse('report-list'), {'type': 'everything'}, format='json')
        self.assertEqual(error_fields(response), {'type': 'invalid_choice'})

    def test_enqueue_endpoint(self):
        report = make_report()

        response = self.client.post(reverse('report-enqueue', args=[report.pk]))

        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['job_id'], 'job-1')

    def test_enqueue_processing_is_conflict(self):
        report = make_report(status=Report.PROCESSING)

        response = self.client.post(reverse('report-enqueue', args=[report.pk]))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('processing', response.data['detail'])
        self.assertIn('error_id', response.data)

    def test_enqueue_with_queue_down_is_503_and_untouched(self):
        self.queue.down = True
        report = make_report(status=Report.FAILED, error_message='timeout')

        response = self.client.post(reverse('report-enqueue', args=[report.pk]))

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        report.refresh_from_db()
        self.assertEqual(report.status, Report.FAILED)
        self.assertEqual(report.error_message, 'timeout')

    def test_create_and_enqueue_endpoint(self):
        response = self.client.post(reverse('report-create-and-enqueue'), {
            'type': 'financial_summary', 'filters': FINANCIAL_FILTERS
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(len(self.queue.published), 1)

    def test_worker_update_requires_output_location(self):
        report = make_report(status=Report.PROCESSING)

        response = self.client.patch(reverse('report-detail', args=[report.pk]), {'status': 'completed'}, format='json')

        self.assertEqual(error_fields(response), {'output_location': 'required'})

    def test_worker_update_empty_body(self):
        report = make_report()
        response = self.client.patch(reverse('report-detail', args=[report.pk]), {}, format='json')
        self.assertEqual(error_fields(response), {'non_field_errors': 'empty_update'})

    def test_worker_update_skipping_processing_is_conflict(self):
        report = make_report()

        response = self.client.patch(reverse('report-detail', args=[report.pk]), {
            'status': 'completed', 'output_location': '/media/x.xlsx'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_worker_update_cannot_retry_a_failed_report(self):
        report = make_report(status=Report.FAILED, error_message='timeout')

        response = self.client.patch(reverse('report-detail', args=[report.pk]), {'status': 'pending'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn(reverse('report-enqueue', args=[report.pk]), str(response.data['detail']))
        report.refresh_from_db()
        self.assertEqual(report.status, Report.FAILED)
        self.assertEqual(report.error_message, 'timeout')
        self.assertEqual(self.queue.published, [])

    def test_delete(self):
        processing = make_report(status=Report.PROCESSING)
        completed = make_report(status=Report.COMPLETED, output_location='/media/x.xlsx')

        refused = self.client.delete(reverse('report-detail', args=[processing.pk]))
        deleted = self.client.delete(reverse('report-detail', args=[completed.pk]))

        self.assertEqual(refused.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(list(Report.objects.values_list('pk', flat=True)), [processing.pk])

    def test_list_filters(self):
        make_report(status=Report.FAILED, error_message='x')
        make_report(report_type=Report.PARTICIPANT_DEMOGRAPHICS, filters={'community_name': 'Kampung Baru'})

        failed = self.client.get(reverse('report-list'), {'status': 'failed'})
        demographics = self.client.get(reverse('report-list'), {'type': 'participant_demographics'})

        self.assertEqual(len(failed.data), 1)
        self.assertEqual([r['type'] for r in demographics.data], ['participant_demographics'])

    def test_stats(self):
        make_report()
        make_report(status=Report.FAILED, error_message='x')
        gateway.enqueue_report(make_report().pk)

        response = self.client.get(reverse('report-stats'))

        self.assertEqual(response.data['total'], 3)
        self.assertEqual(response.data['by_status']['pending'], 2)
        self.assertEqual(response.data['by_status']['failed'], 1)
        self.assertEqual(response.data['by_type']['financial_summary'], 3)
        self.assertEqual(response.data['queue_length'], 1)

    def test_end_to_end_success(self):
        created = self.client.post(reverse('report-list'), {
            'type': 'financial_summary', 'filters': {'start_date': '2025-01-01', 'end_date': '2025-01-31'}
        }, format='json')
        self.assertEqual(created.data['status'], 'pending')
        detail_url = reverse('report-detail', args=[created.data['id']])
        enqueue_url = reverse('report-enqueue', args=[created.data['id']])

        enqueued = self.client.post(enqueue_url)
        self.assertEqual(enqueued.data['status'], 'pending')
        self.assertEqual(len(self.queue.published), 1)

        claimed = self.client.patch(detail_url, {'status': 'processing'}, format='json')
        self.assertEqual(claimed.data['status'], 'processing')
        completed = self.client.patch(detail_url, {
            'status': 'completed', 'output_location': '/media/reports/financial_summary.xlsx'
        }, format='json')
        self.assertEqual(completed.status_code, status.HTTP_200_OK)

        fetched = self.client.get(detail_url)
        self.assertEqual(fetched.data['status'], 'completed')
        self.assertEqual(fetched.data['output_location'], '/media/reports/financial_summary.xlsx')

        retry = self.client.post(enqueue_url)
        self.assertEqual(retry.status_code, status.HTTP_409_CONFLICT)

    def test_end_to_end_failure_and_retry(self):
        report = make_report(status=Report.PROCESSING)
        detail_url = reverse('report-detail', args=[report.pk])

        failed = self.client.patch(detail_url, {'status': 'failed', 'error_message': 'timeout'}, format='json')
        self.assertEqual(failed.data['status'], 'failed')
        self.assertEqual(failed.data['error_message'], 'timeout')

        retried = self.client.post(reverse('report-enqueue', args=[report.pk]))
        self.assertEqual(retried.data['status'], 'pending')
        self.assertIsNone(retried.data['error_message'])

        fetched = self.client.get(detail_url)
        self.assertEqual(fetched.data['status'], 'pending')
        self.assertIsNone(fetched.data['error_message'])


class ReportGenerationTests(TestCase):

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)
        settings_override = override_settings(MEDIA_ROOT=self.media_root, MEDIA_URL='/media/')
        settings_override.enable()
        self.addCleanup(settings_override.disable)

        self.tutor = User.objects.create(name='Dewi', communities=['Kampung Baru'], occupation_status='Pekerja', age_category='26-35')
        self.member = User.objects.create(name='Budi', communities=['Kampung Baru'], occupation_status='Pelajar', age_category='<18')
        User.objects.create(name='Ani', communities=['Sungai Kecil'], occupation_status='Pelajar', age_category='<18')

        self.event = Event.objects.create(
            name='Digital Literacy Class', community='Kampung Baru',
            date=datetime(2025, 1, 15, 5, 0, tzinfo=dt_timezone.utc),
            tutor_type=Event.TUTOR_INTERNAL, tutor_user=self.tutor, tutor_name='Dewi'
        )
        Attendance.objects.create(event=self.event, attendee_type=Attendance.MEMBER, attendee_user=self.member)
        Attendance.objects.create(event=self.event, attendee_type=Attendance.GUEST, attendee_name='Tamu')
        Milestone.objects.create(user=self.member, milestone_type=Milestone.LEVEL_UP,
                                 detail={'from': 'Beginner', 'to': 'Intermediate'}, date=date(2025, 1, 20))

        Donation.objects.create(donation_type=Donation.CASH, source='Warga', program='Beasiswa',
                                date=date(2025, 1, 10), cash_amount=Decimal('1000.00'))
        Expense.objects.create(category='Transport', amount=Decimal('150.00'), date=date(2025, 1, 12))

    @staticmethod
    def metrics(sheet):
        return {row[0]: row[1] for row in sheet.iter_rows(values_only=True) if row and row[0]}

    def test_generate_report_stores_workbook_and_completes(self):
        report = make_report()

        tasks.generate_report(report.pk)

        report.refresh_from_db()
        self.assertEqual(report.status, Report.COMPLETED)
        self.assertTrue(report.output_key.startswith('reports/financial_summary_'))
        self.assertTrue(report.output_location.startswith('/media/reports/'))
        self.assertTrue(default_storage.exists(report.output_key))

        with default_storage.open(report.output_key, 'rb') as fh:
            workbook = openpyxl.load_workbook(BytesIO(fh.read()))
        self.assertEqual(workbook.sheetnames, ['Summary', 'Donations', 'Expenses'])
        summary = self.metrics(workbook['Summary'])
        self.assertEqual(Decimal(str(summary['Total Donations'])), Decimal('1000.00'))
        self.assertEqual(Decimal(str(summary['Net (Donations - Expenses)'])), Decimal('850.00'))

    def test_report_that_is_not_pending_is_left_alone(self):
        report = make_report(status=Report.COMPLETED, output_location='/media/done.xlsx')

        self.assertIsNone(tasks.generate_report(report.pk))

        report.refresh_from_db()
        self.assertEqual(report.status, Report.COMPLETED)
        self.assertEqual(report.output_location, '/media/done.xlsx')

    def test_builder_error_marks_report_failed(self):
        report = make_report()
        broken = mock.Mock(side_effect=RuntimeError('timeout'))

        with mock.patch.dict(tasks.REPORT_BUILDERS, {Report.FINANCIAL_SUMMARY: broken}):
            with self.assertRaises(RuntimeError):
                tasks.generate_report(report.pk)

        report.refresh_from_db()
        self.assertEqual(report.status, Report.FAILED)
        self.assertEqual(report.error_message, 'timeout')
        self.assertEqual(report.output_location, '')

    def test_long_error_text_is_truncated(self):
        report = make_report()
        broken = mock.Mock(side_effect=ValueError('x' * 5000))

        with mock.patch.dict(tasks.REPORT_BUILDERS, {Report.FINANCIAL_SUMMARY: broken}):
            with self.assertRaises(ValueError):
                tasks.generate_report(report.pk)

        report.refresh_from_db()
        self.assertEqual(report.status, Report.FAILED)
        self.assertEqual(len(report.error_message), tasks.MAX_ERROR_MESSAGE_LENGTH)

    def test_community_activity_counts_members_and_guests(self):
        workbook = tasks.build_community_activity({
            'community_name': 'Kampung Baru', 'start_date': '2025-01-01', 'end_date': '2025-01-31'
        })

        metrics = self.metrics(workbook.active)
        self.assertEqual(metrics['Events Held'], 1)
        self.assertEqual(metrics['Member Attendances'], 1)
        self.assertEqual(metrics['Guest Attendances'], 1)

    def test_participant_demographics_only_counts_the_community(self):
        workbook = tasks.build_participant_demographics({'community_name': 'Kampung Baru'})

        metrics = self.metrics(workbook['Demographics'])
        self.assertEqual(metrics['Total Participants'], 2)
        self.assertEqual(metrics['Pelajar'], 1)
        self.assertEqual(metrics['Pekerja'], 1)

    def test_program_impact_counts_participant_milestones(self):
        workbook = tasks.build_program_impact({'community_name': 'Kampung Baru'})

        metrics = self.metrics(workbook.active)
        self.assertEqual(metrics['Programs Held'], 1)
        self.assertEqual(metrics['Unique Member Participants'], 1)
        self.assertEqual(metrics['Milestones Reached'], 1)
        self.assertEqual(metrics['Level Up'], 1)

    def test_participant_demographics_matches_non_ascii_community(self):
        User.objects.create(name='Élise', communities=['Désa Maju'], occupation_status='Pekerja', age_category='26-35')
        User.objects.create(name='Rina', communities=['Désa Maju Timur'], occupation_status='Pelajar', age_category='<18')

        workbook = tasks.build_participant_demographics({'community_name': 'Désa Maju'})

        metrics = self.metrics(workbook['Demographics'])
        self.assertEqual(metrics['Total Participants'], 1)
        self.assertEqual(metrics['Pekerja'], 1)
