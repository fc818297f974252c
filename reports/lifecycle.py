"""
Report status state machine.

The status column is the only source of truth. Every move between states
goes through a conditional UPDATE filtered on the expected current status,
so two processes racing on the same report cannot both succeed.

    (new)       -> pending      create_report
    pending     -> processing   claim_report (worker)
    processing  -> completed    complete_report (output location required)
    processing  -> failed       fail_report (error message required)
    failed      -> pending      reset_report (retry, clears error and output)
    any but processing -> deleted   delete_report
"""
import logging
from datetime import date

from django.utils import timezone
from rest_framework import serializers
from rest_framework.exceptions import ErrorDetail, NotFound

from .exceptions import InvalidTransition
from .models import Report

logger = logging.getLogger(__name__)

DELETED = 'deleted'

TRANSITIONS = {
    None: {Report.PENDING},
    Report.PENDING: {Report.PROCESSING, DELETED},
    Report.PROCESSING: {Report.COMPLETED, Report.FAILED},
    Report.COMPLETED: {DELETED},
    Report.FAILED: {Report.PENDING, DELETED},
}

DATE_FILTERS = ('start_date', 'end_date')


def check_transition(current, requested):
    if requested not in TRANSITIONS.get(current, set()):
        logger.warning(f"Refused report transition {current} -> {requested}")
        raise InvalidTransition(current, requested)


def _parse_date(value):
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def normalize_filters(report_type, filters):
    """
    Validate `filters` for `report_type` and return the cleaned mapping.

    Required keys are checked, dates are parsed and stored back as ISO
    strings, and keys the type does not use are dropped. All problems are
    raised together, nested under `filters`.
    """
    if report_type not in Report.REQUIRED_FILTERS:
        choices = ', '.join(Report.REQUIRED_FILTERS)
        raise serializers.ValidationError({
            'type': [ErrorDetail(f"type must be one of: {choices}", code='invalid_choice')]
        })
    if filters is None:
        filters = {}
    if not isinstance(filters, dict):
        raise serializers.ValidationError({
            'filters': [ErrorDetail("filters must be an object", code='invalid')]
        })

    errors = {}
    for key in Report.missing_filters(report_type, filters):
        errors[key] = [ErrorDetail(f"{key} is required for {report_type} reports", code='required')]

    cleaned = {}
    for key in Report.allowed_filters(report_type):
        value = filters.get(key)
        if value in (None, '') or key in errors:
            continue
        if key in DATE_FILTERS:
            try:
                cleaned[key] = _parse_date(value)
            except ValueError:
                errors[key] = [ErrorDetail(f"{key} must be a date in YYYY-MM-DD format", code='invalid')]
        else:
            value = str(value).strip()
            if not value:
                errors[key] = [ErrorDetail(f"{key} may not be blank", code='blank')]
            else:
                cleaned[key] = value

    start, end = cleaned.get('start_date'), cleaned.get('end_date')
    if start and end and start > end:
        errors['end_date'] = [ErrorDetail("end_date must not be before start_date", code='invalid_range')]

    if errors:
        raise serializers.ValidationError({'filters': errors})

    for key in DATE_FILTERS:
        if key in cleaned:
            cleaned[key] = cleaned[key].isoformat()
    return cleaned


def create_report(report_type, filters, requested_by=None):
    check_transition(None, Report.PENDING)
    cleaned = normalize_filters(report_type, filters)
    report = Report.objects.create(
        report_type=report_type,
        filters=cleaned,
        requested_by=requested_by,
        status=Report.PENDING,
    )
    logger.info(f"Report {report.id} ({report_type}) created as pending")
    return report


def _transition(report_id, expected, requested, **fields):
    """Move `report_id` from `expected` to `requested` in one conditional UPDATE."""
    check_transition(expected, requested)
    updated = Report.objects.filter(pk=report_id, status=expected).update(
        status=requested, updated_at=timezone.now(), **fields
    )
    if not updated:
        current = Report.objects.filter(pk=report_id).values_list('status', flat=True).first()
        if current is None:
            raise NotFound(f"Report {report_id} not found.")
        logger.warning(f"Report {report_id} is {current}, cannot move to {requested}")
        raise InvalidTransition(current, requested)

    logger.info(f"Report {report_id}: {expected} -> {requested}")
    return Report.objects.get(pk=report_id)


def claim_report(report_id):
    """
    Worker claim: pending -> processing. Returns None when the report is no
    longer pending (e.g. another worker got there first).
    """
    claimed = Report.objects.filter(pk=report_id, status=Report.PENDING).update(
        status=Report.PROCESSING, updated_at=timezone.now()
    )
    if not claimed:
        logger.info(f"Report {report_id} was not pending, skipping claim")
        return None
    logger.info(f"Report {report_id} claimed for processing")
    return Report.objects.get(pk=report_id)


def complete_report(report_id, output_location, output_key=''):
    if not output_location:
        raise serializers.ValidationError({
            'output_location': [ErrorDetail("output_location is required to complete a report", code='required')]
        })
    return _transition(
        report_id, Report.PROCESSING, Report.COMPLETED,
        output_location=output_location,
        output_key=output_key or '',
        error_message=None,
        completed_at=timezone.now(),
    )


def fail_report(report_id, error_message):
    if not error_message or not str(error_message).strip():
        raise serializers.ValidationError({
            'error_message': [ErrorDetail("error_message is required to fail a report", code='required')]
        })
    return _transition(
        report_id, Report.PROCESSING, Report.FAILED,
        error_message=str(error_message),
        output_location='',
        output_key='',
        completed_at=timezone.now(),
    )


def reset_report(report_id):
    """Retry: failed -> pending, clearing the previous error and output."""
    return _transition(
        report_id, Report.FAILED, Report.PENDING,
        error_message=None,
        output_location='',
        output_key='',
        completed_at=None,
    )


def apply_worker_update(report, data):
    """
    Status update sent by a worker. Only status, output_location, output_key
    and error_message are accepted; the move is checked against the table.
    Retries are not a worker move: failed -> pending goes through the enqueue
    gateway so that a job is published with it.
    """
    requested = data.get('status')
    if not requested:
        raise serializers.ValidationError({
            'status': [ErrorDetail("status is required", code='required')]
        })
    if requested == Report.PENDING:
        logger.warning(f"Refused worker move of report {report.pk} to pending")
        raise InvalidTransition(
            report.status, requested,
            detail=f"Cannot move report from '{report.status}' to 'pending'. Use POST /api/reports/{report.pk}/enqueue/ to retry.",
        )
    check_transition(report.status, requested)

    if requested == Report.PROCESSING:
        claimed = claim_report(report.pk)
        if claimed is None:
            report.refresh_from_db(fields=['status'])
            raise InvalidTransition(report.status, requested)
        return claimed
    if requested == Report.COMPLETED:
        return complete_report(report.pk, data.get('output_location'), data.get('output_key', ''))
    if requested == Report.FAILED:
        return fail_report(report.pk, data.get('error_message'))
    raise InvalidTransition(report.status, requested)


def delete_report(report):
    deleted, _ = Report.objects.filter(pk=report.pk).exclude(status=Report.PROCESSING).delete()
    if not deleted:
        if not Report.objects.filter(pk=report.pk).exists():
            raise NotFound(f"Report {report.pk} not found.")
        logger.warning(f"Refused to delete report {report.pk} while it is processing")
        raise InvalidTransition(Report.PROCESSING, DELETED, "Cannot delete a report while it is processing.")
    logger.info(f"Report {report.pk} deleted")
