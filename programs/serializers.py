from rest_framework import serializers
from rest_framework.exceptions import ErrorDetail
from core.models import User
from core.validation import (
    Variant, UpdateRequiresFieldsMixin, VariantErrorsMixin, VariantPayloadMixin, validate_variant
)
from .models import Event, Attendance

TUTOR_VARIANTS = {
    Event.TUTOR_INTERNAL: Variant(
        required=('user',),
        messages={('user', 'required'): "user is required for an Internal tutor"},
    ),
    Event.TUTOR_EXTERNAL: Variant(
        required=('name',),
        messages={('name', 'required'): "Name is required for External tutor"},
    ),
}

ATTENDEE_VARIANTS = {
    Attendance.MEMBER: Variant(
        required=('user',),
        forbidden=('name',),
        messages={
            ('user', 'required'): "user is required for Member type",
            ('name', 'forbidden'): "name should not be provided for Member type",
        },
    ),
    Attendance.GUEST: Variant(
        required=('name',),
        forbidden=('user',),
        messages={
            ('name', 'required'): "Name is required for Guest type",
            ('user', 'forbidden'): "user should not be provided for Guest type",
        },
    ),
}


class TutorSerializer(VariantErrorsMixin, serializers.Serializer):
    type = serializers.ChoiceField(choices=Event.TUTOR_TYPE_CHOICES)
    user = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)

    def check_variant(self, data):
        validate_variant(data, 'type', TUTOR_VARIANTS)

    def validate(self, attrs):
        self.check_variant(attrs)
        return attrs


class AttendeeSerializer(VariantErrorsMixin, serializers.Serializer):
    type = serializers.ChoiceField(choices=Attendance.ATTENDEE_TYPE_CHOICES)
    user = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)

    def check_variant(self, data):
        validate_variant(data, 'type', ATTENDEE_VARIANTS)

    def validate(self, attrs):
        self.check_variant(attrs)
        return attrs


class EventSerializer(VariantPayloadMixin, UpdateRequiresFieldsMixin, serializers.ModelSerializer):
    variant_fields = ('tutor',)

    tutor = TutorSerializer()
    attendance_count = serializers.IntegerField(source='attendances.count', read_only=True)

    class Meta:
        model = Event
        fields = [
            'id', 'name', 'community', 'date', 'tutor', 'description', 'location',
            'attendance_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'name': {'min_length': 3, 'max_length': 200},
            'description': {'max_length': 1000},
            'location': {'max_length': 200},
        }


class AttendanceSerializer(VariantPayloadMixin, UpdateRequiresFieldsMixin, serializers.ModelSerializer):
    variant_fields = ('attendee',)

    attendee = AttendeeSerializer()
    event_name = serializers.CharField(source='event.name', read_only=True)

    class Meta:
        model = Attendance
        fields = ['id', 'event', 'event_name', 'attendee', 'created_at']
        read_only_fields = ['id', 'created_at']

    def validate(self, attrs):
        attrs = super().validate(attrs)
        event = attrs.get('event', getattr(self.instance, 'event', None))
        attendee = attrs.get('attendee')
        if event is None or not attendee or attendee.get('user') is None:
            return attrs

        duplicates = Attendance.objects.filter(event=event, attendee_user=attendee['user'])
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError(
                {'attendee': ErrorDetail("This member is already registered for the event", code='unique')}
            )
        return attrs
