from datetime import datetime, timezone as dt_timezone

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from core.models import User
from .models import Event, Attendance

Admin = get_user_model()


def error_fields(response):
    return {error['field']: error['code'] for error in response.data['errors']}


class ProgramTestCase(APITestCase):

    def setUp(self):
        self.admin = Admin.objects.create_user(email='staff@foundation.org', name='Staff', password='rahasia1')
        self.client.force_authenticate(user=self.admin)
        self.tutor = User.objects.create(name='Dewi Lestari', communities=['Kampung Baru'])
        self.member = User.objects.create(name='Budi', communities=['Kampung Baru'])

    def make_event(self, **kwargs):
        defaults = {
            'name': 'Digital Literacy Class',
            'community': 'Kampung Baru',
            'date': datetime(2025, 1, 15, 5, 0, tzinfo=dt_timezone.utc),
            'tutor_type': Event.TUTOR_EXTERNAL,
            'tutor_name': 'Rina Wijaya',
        }
        defaults.update(kwargs)
        return Event.objects.create(**defaults)


class EventTests(ProgramTestCase):

    def test_internal_tutor_takes_name_from_user(self):
        response = self.client.post(reverse('event-list'), {
            'name': 'Digital Literacy Class', 'community': 'Kampung Baru', 'date': '2025-01-15T05:00:00Z',
            'tutor': {'type': 'Internal', 'user': self.tutor.pk}
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['tutor'], {'type': 'Internal', 'user': self.tutor.pk, 'name': 'Dewi Lestari'})
        self.assertEqual(response.data['attendance_count'], 0)

    def test_external_tutor_requires_name(self):
        response = self.client.post(reverse('event-list'), {
            'name': 'Financial Planning 101', 'community': 'Kampung Baru', 'date': '2025-02-10T06:00:00Z',
            'tutor': {'type': 'External'}
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(error_fields(response), {'tutor.name': 'required'})

    def test_field_errors_are_reported_together(self):
        response = self.client.post(reverse('event-list'), {
            'name': 'ab', 'date': 'not a date', 'tutor': {'type': 'Internal'}
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        fields = error_fields(response)
        self.assertEqual(fields['name'], 'min_length')
        self.assertEqual(fields['community'], 'required')
        self.assertEqual(fields['date'], 'invalid')
        self.assertEqual(fields['tutor.user'], 'required')

    def test_events_are_public_to_read_but_not_to_write(self):
        self.make_event()
        self.client.force_authenticate(user=None)

        listing = self.client.get(reverse('event-list'))
        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual(len(listing.data), 1)

        response = self.client.post(reverse('event-list'), {'name': 'Sneaky'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_filter_by_community_and_date_range(self):
        self.make_event(name='January Class')
        self.make_event(name='March Class', date=datetime(2025, 3, 1, 5, 0, tzinfo=dt_timezone.utc))
        self.make_event(name='Elsewhere', community='Sungai Kecil')

        response = self.client.get(reverse('event-list'), {
            'community': 'Kampung Baru', 'start_date': '2025-01-01', 'end_date': '2025-01-31'
        })

        self.assertEqual([e['name'] for e in response.data], ['January Class'])

    def test_switching_to_external_keeps_required_name(self):
        event = self.make_event(tutor_type=Event.TUTOR_INTERNAL, tutor_user=self.tutor, tutor_name='Dewi Lestari')

        response = self.client.patch(reverse('event-detail', args=[event.pk]), {
            'tutor': {'type': 'External', 'name': 'Guest Speaker'}
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        event.refresh_from_db()
        self.assertEqual(event.tutor_type, Event.TUTOR_EXTERNAL)
        self.assertIsNone(event.tutor_user)
        self.assertEqual(event.tutor_name, 'Guest Speaker')

    def test_empty_update_is_rejected(self):
        event = self.make_event()
        response = self.client.patch(reverse('event-detail', args=[event.pk]), {}, format='json')
        self.assertEqual(error_fields(response), {'non_field_errors': 'empty_update'})


class AttendanceTests(ProgramTestCase):

    def setUp(self):
        super().setUp()
        self.event = self.make_event()

    def test_member_requires_user_and_forbids_name(self):
        response = self.client.post(reverse('attendance-list'), {
            'event': self.event.pk, 'attendee': {'type': 'Member', 'name': 'Budi'}
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(error_fields(response), {'attendee.user': 'required', 'attendee.name': 'forbidden'})

    def test_guest_requires_name_and_forbids_user(self):
        response = self.client.post(reverse('attendance-list'), {
            'event': self.event.pk, 'attendee': {'type': 'Guest', 'user': self.member.pk}
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(error_fields(response), {'attendee.name': 'required', 'attendee.user': 'forbidden'})

    def test_unknown_member_and_forbidden_name_reported_together(self):
        response = self.client.post(reverse('attendance-list'), {
            'event': self.event.pk, 'attendee': {'type': 'Member', 'user': 99999, 'name': 'Budi'}
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(error_fields(response), {'attendee.user': 'does_not_exist', 'attendee.name': 'forbidden'})

    def test_unknown_attendee_type(self):
        response = self.client.post(reverse('attendance-list'), {
            'event': self.event.pk, 'attendee': {'type': 'Volunteer', 'name': 'Budi'}
        }, format='json')

        self.assertEqual(error_fields(response), {'attendee.type': 'invalid_choice'})

    def test_member_and_guest_attendance(self):
        member = self.client.post(reverse('attendance-list'), {
            'event': self.event.pk, 'attendee': {'type': 'Member', 'user': self.member.pk}
        }, format='json')
        guest = self.client.post(reverse('attendance-list'), {
            'event': self.event.pk, 'attendee': {'type': 'Guest', 'name': 'Tamu Desa'}
        }, format='json')

        self.assertEqual(member.status_code, status.HTTP_201_CREATED)
        self.assertEqual(guest.status_code, status.HTTP_201_CREATED)
        self.assertEqual(guest.data['attendee'], {'type': 'Guest', 'user': None, 'name': 'Tamu Desa'})
        self.assertEqual(self.event.attendances.count(), 2)

        detail = self.client.get(reverse('event-detail', args=[self.event.pk]))
        self.assertEqual(detail.data['attendance_count'], 2)

    def test_member_cannot_attend_twice(self):
        Attendance.objects.create(event=self.event, attendee_type=Attendance.MEMBER, attendee_user=self.member)

        response = self.client.post(reverse('attendance-list'), {
            'event': self.event.pk, 'attendee': {'type': 'Member', 'user': self.member.pk}
        }, format='json')

        self.assertEqual(error_fields(response), {'attendee': 'unique'})

    def test_filter_by_type(self):
        Attendance.objects.create(event=self.event, attendee_type=Attendance.MEMBER, attendee_user=self.member)
        Attendance.objects.create(event=self.event, attendee_type=Attendance.GUEST, attendee_name='Tamu')

        response = self.client.get(reverse('attendance-list'), {'type': 'Guest'})

        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['attendee']['name'], 'Tamu')
