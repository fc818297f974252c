"""
Shared validation helpers for the entity serializers.

Conditional fields are modelled as tagged variants: the discriminator is
resolved first and only the selected variant's rules are checked. Every
problem found is collected and raised together so clients get all field
errors from one request.
"""
from collections.abc import Mapping

from rest_framework import serializers
from rest_framework.exceptions import ErrorDetail

EMPTY_VALUES = (None, '', [], {})


class Variant:
    """Required and forbidden companion fields for one discriminator value."""

    def __init__(self, required=(), forbidden=(), messages=None):
        self.required = tuple(required)
        self.forbidden = tuple(forbidden)
        self.messages = messages or {}

    def message(self, field, code, tag):
        default = {
            'required': f"{field} is required for {tag}",
            'forbidden': f"{field} should not be provided for {tag}",
        }[code]
        return self.messages.get((field, code), default)


def validate_variant(data, tag_field, variants, tag=None, check_required=True):
    """
    Check `data` against the variant selected by its discriminator.

    `tag` overrides the value read from `data` (used by partial updates
    where the discriminator lives on the stored instance). With
    `check_required=False` only forbidden fields are enforced.
    Returns the resolved tag.
    """
    if tag is None:
        tag = data.get(tag_field)

    if tag in EMPTY_VALUES:
        raise serializers.ValidationError({
            tag_field: [ErrorDetail(f"{tag_field} is required", code='required')]
        })
    if tag not in variants:
        choices = ', '.join(sorted(variants))
        raise serializers.ValidationError({
            tag_field: [ErrorDetail(f"{tag_field} must be one of: {choices}", code='invalid_choice')]
        })

    variant = variants[tag]
    errors = {}

    if check_required:
        for field in variant.required:
            if data.get(field) in EMPTY_VALUES:
                errors.setdefault(field, []).append(
                    ErrorDetail(variant.message(field, 'required', tag), code='required')
                )

    for field in variant.forbidden:
        if data.get(field) not in EMPTY_VALUES:
            errors.setdefault(field, []).append(
                ErrorDetail(variant.message(field, 'forbidden', tag), code='forbidden')
            )

    if errors:
        raise serializers.ValidationError(errors)
    return tag


class VariantErrorsMixin:
    """
    Reports field errors and variant errors from the same request.

    DRF only calls `validate()` once every field is valid, so when field
    validation fails the variant rules are run again on the raw input and
    their errors are merged in. Subclasses implement `check_variant(data)`
    and call it from `validate()` as well.
    """

    def check_variant(self, data):
        raise NotImplementedError

    def to_internal_value(self, data):
        try:
            return super().to_internal_value(data)
        except serializers.ValidationError as exc:
            if not isinstance(exc.detail, dict) or not isinstance(data, Mapping):
                raise
            errors = dict(exc.detail)
            try:
                self.check_variant(data)
            except serializers.ValidationError as variant_exc:
                if isinstance(variant_exc.detail, dict):
                    for field, detail in variant_exc.detail.items():
                        errors.setdefault(field, detail)
            raise serializers.ValidationError(errors)


class UpdateRequiresFieldsMixin:
    """Rejects updates that carry no recognised field."""

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if self.instance is not None and not attrs:
            raise serializers.ValidationError(
                ErrorDetail('At least one field must be provided', code='empty_update')
            )
        return attrs


class VariantPayloadMixin:
    """
    Writes nested variant payloads (e.g. `tutor`, `attendee`) through the
    model properties of the same name, which spread them over flat columns.
    """
    variant_fields = ()

    def _pop_payloads(self, validated_data):
        return {
            name: validated_data.pop(name)
            for name in self.variant_fields
            if name in validated_data
        }

    def create(self, validated_data):
        payloads = self._pop_payloads(validated_data)
        instance = self.Meta.model(**validated_data)
        for name, value in payloads.items():
            setattr(instance, name, value)
        instance.save()
        return instance

    def update(self, instance, validated_data):
        for name, value in self._pop_payloads(validated_data).items():
            setattr(instance, name, value)
        return super().update(instance, validated_data)
