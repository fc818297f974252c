from rest_framework import serializers
from django.core.exceptions import ValidationError
from django.contrib.auth.password_validation import validate_password


def validate_admin_password(value, admin=None):
    """
    Runs Django's configured password validators and reports their
    messages as serializer errors.
    """
    try:
        validate_password(value, user=admin)
    except ValidationError as e:
        raise serializers.ValidationError(list(e.messages), code='weak_password')

    if len(value) < 6:
        raise serializers.ValidationError("Password must be at least 6 characters", code='min_length')

    return value


def validate_string_list(value, field_name):
    """Accept a list of non-empty strings, stripped and de-duplicated in order."""
    if not isinstance(value, list):
        raise serializers.ValidationError(f"{field_name} must be a list of strings", code='invalid')

    cleaned = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise serializers.ValidationError(f"{field_name} must only contain non-empty strings", code='invalid')
        item = item.strip()
        if item not in cleaned:
            cleaned.append(item)
    return cleaned
