from django.db import models
from core.models import User


class Event(models.Model):
    TUTOR_INTERNAL = 'Internal'
    TUTOR_EXTERNAL = 'External'
    TUTOR_TYPE_CHOICES = (
        (TUTOR_INTERNAL, 'Internal'),
        (TUTOR_EXTERNAL, 'External'),
    )

    name = models.CharField(max_length=200)
    community = models.CharField(max_length=150, db_index=True)
    date = models.DateTimeField()

    # Tutor variant: Internal references a community user, External is named only
    tutor_type = models.CharField(max_length=10, choices=TUTOR_TYPE_CHOICES)
    tutor_user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tutored_events'
    )
    tutor_name = models.CharField(max_length=150, blank=True)

    description = models.TextField(max_length=1000, blank=True)
    location = models.CharField(max_length=200, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date']

    def __str__(self):
        return f"{self.name} ({self.community})"

    @property
    def tutor(self):
        return {'type': self.tutor_type, 'user': self.tutor_user, 'name': self.tutor_name}

    @tutor.setter
    def tutor(self, value):
        self.tutor_type = value.get('type')
        self.tutor_user = value.get('user')
        self.tutor_name = value.get('name') or ''
        if not self.tutor_name and self.tutor_user is not None:
            self.tutor_name = self.tutor_user.name


class Attendance(models.Model):
    MEMBER = 'Member'
    GUEST = 'Guest'
    ATTENDEE_TYPE_CHOICES = (
        (MEMBER, 'Member'),
        (GUEST, 'Guest'),
    )

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name='attendances')

    # Attendee variant: Member -> user only, Guest -> name only
    attendee_type = models.CharField(max_length=10, choices=ATTENDEE_TYPE_CHOICES)
    attendee_user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='attendances'
    )
    attendee_name = models.CharField(max_length=150, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.display_name} @ {self.event}"

    @property
    def display_name(self):
        if self.attendee_user is not None:
            return self.attendee_user.name
        return self.attendee_name

    @property
    def attendee(self):
        return {'type': self.attendee_type, 'user': self.attendee_user, 'name': self.attendee_name}

    @attendee.setter
    def attendee(self, value):
        self.attendee_type = value.get('type')
        self.attendee_user = value.get('user')
        self.attendee_name = value.get('name') or ''
