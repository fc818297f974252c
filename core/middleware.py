# core/middleware.py
import logging
import time

from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)


class UTF8Middleware(MiddlewareMixin):
    def process_request(self, request):
        request._started_at = time.monotonic()

    def process_response(self, request, response):
        # Check if the response is JSON
        if response.get('Content-Type', '').startswith('application/json'):
            if 'charset=utf-8' not in response['Content-Type'].lower():
                response['Content-Type'] = 'application/json; charset=utf-8'

        started = getattr(request, '_started_at', None)
        if started is not None and request.path.startswith('/api/'):
            elapsed_ms = (time.monotonic() - started) * 1000
            logger.info(f"{request.method} {request.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
        return response
