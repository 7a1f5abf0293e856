import logging
import time

logger = logging.getLogger("clinic.request")


class ApiRequestLogMiddleware:
    """Log method, path, status and duration for every ``/api/`` request."""
    PREFIX = '/api/'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path or ''
        if not path.startswith(self.PREFIX):
            return self.get_response(request)
        started = time.perf_counter()
        response = self.get_response(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, "%s %s %s %.1fms", request.method, path, response.status_code, elapsed_ms)
        return response
