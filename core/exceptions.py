from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.fields import get_error_detail
from rest_framework.views import exception_handler
from rest_framework.response import Response
import logging
import uuid

logger = logging.getLogger(__name__)


class ResourceInUse(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This record is still referenced by other records and cannot be deleted.'
    default_code = 'protected'


def flatten_errors(details, prefix=''):
    """
    Turn DRF's nested `get_full_details()` output into a flat list of
    {field, code, message} entries. Nested fields are dotted.
    """
    errors = []
    if isinstance(details, dict) and set(details) == {'message', 'code'}:
        errors.append({'field': prefix or 'non_field_errors', 'code': details['code'], 'message': str(details['message'])})
    elif isinstance(details, dict):
        for key, value in details.items():
            field = f"{prefix}.{key}" if prefix else str(key)
            if key == 'non_field_errors' and prefix:
                field = prefix
            errors.extend(flatten_errors(value, field))
    elif isinstance(details, list):
        for index, value in enumerate(details):
            if isinstance(value, dict) and set(value) != {'message', 'code'} and prefix:
                errors.extend(flatten_errors(value, f"{prefix}.{index}"))
            else:
                errors.extend(flatten_errors(value, prefix))
    return errors


def custom_exception_handler(exc, context):
    error_id = uuid.uuid4()

    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(detail=get_error_detail(exc))
    elif isinstance(exc, ProtectedError):
        exc = ResourceInUse()

    response = exception_handler(exc, context)

    if response is None:
        logger.error(
            f"Error ID: {error_id}\n"
            f"Error: {str(exc)}\n"
            f"Context: {context}",
            exc_info=exc
        )
        return Response(
            {
                'detail': 'An unexpected error occurred',
                'error_id': str(error_id),
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, ValidationError):
        response.data = {
            'detail': 'Validation failed',
            'errors': flatten_errors(exc.get_full_details()),
        }
    elif response.status_code >= 500:
        logger.error(f"Error ID: {error_id} - {exc}", exc_info=exc)
    else:
        logger.info(f"Error ID: {error_id} - {response.status_code} {exc}")

    if isinstance(response.data, dict):
        response.data['error_id'] = str(error_id)

    return response
