import logging
import time

logger = logging.getLogger(__name__)


# =============== MIDDLEWARE FOR REQUEST LOGGING ===============

class RequestLogMiddleware:
    """
    Middleware to log every request line with its outcome
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        started = time.monotonic()
        remote_addr = request.META.get('HTTP_X_FORWARDED_FOR') or request.META.get('REMOTE_ADDR')

        response = self.get_response(request)

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info(
            f"{request.method} {request.path} - {remote_addr} "
            f"{response.status_code} ({elapsed_ms:.1f} ms)"
        )
        return response
