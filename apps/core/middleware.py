import logging
import time

from django.conf import settings
from django.utils.deprecation import MiddlewareMixin


class RequestTimingMiddleware(MiddlewareMixin):
    """
    Times requests under the prefixes in PERFORMANCE_API_PREFIXES and logs
    them to "{short_name}_performance", warning when a request is slow.
    """

    def _match(self, path):
        for prefix, short_name in settings.PERFORMANCE_API_PREFIXES.items():
            if path.startswith(prefix):
                return short_name
        return None

    def process_request(self, request):
        short_name = self._match(request.path)
        if short_name is not None:
            request._timing_started = time.monotonic()
            request._timing_logger = f"{short_name}_performance"

    def process_response(self, request, response):
        started = getattr(request, "_timing_started", None)
        if started is None:
            return response

        elapsed = time.monotonic() - started
        logger = logging.getLogger(request._timing_logger)
        summary = (
            f"{request.method} {request.path} -> {response.status_code} "
            f"in {elapsed:.3f}s"
        )
        if elapsed > settings.SLOW_REQUEST_THRESHOLD_SEC:
            logger.warning(f"Slow request: {summary}")
        else:
            logger.info(summary)

        response["X-Response-Time"] = f"{elapsed:.3f}s"
        return response
