from rest_framework import status
from rest_framework.exceptions import APIException


class InvalidTransition(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Invalid report status transition.'
    default_code = 'invalid_transition'

    def __init__(self, current, requested, detail=None):
        self.current = current
        self.requested = requested
        if detail is None:
            detail = f"Cannot move report from '{current}' to '{requested}'."
        super().__init__(detail)


class QueuePublishFailure(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'The report queue is unavailable. Please try again later.'
    default_code = 'queue_unavailable'
