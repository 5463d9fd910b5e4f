"""
Structured logging helpers: a JSON formatter and a per-request access log.
"""
import json
import logging
import time
import uuid
from datetime import datetime, timezone


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    EXTRA_FIELDS = (
        'request_id',
        'path',
        'method',
        'status_code',
        'duration_ms',
        'remote_addr',
        'user_id',
        'store_id',
    )

    def format(self, record):
        payload = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        for key in self.EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value

        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class RequestLogMiddleware:
    """Attach a request id and emit one access log line per request."""

    def __init__(self, get_response):
        self.get_response = get_response
        self.logger = logging.getLogger('api.request')

    def __call__(self, request):
        started_at = time.perf_counter()
        request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        request.request_id = request_id

        response = self.get_response(request)

        duration_ms = round((time.perf_counter() - started_at) * 1000, 2)
        user = getattr(request, 'user', None)
        user_id = str(user.id) if user is not None and getattr(user, 'is_authenticated', False) else None

        self.logger.info(
            'request_completed',
            extra={
                'request_id': request_id,
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'duration_ms': duration_ms,
                'remote_addr': request.META.get('REMOTE_ADDR'),
                'user_id': user_id,
            },
        )
        response['X-Request-ID'] = request_id
        return response
