import logging
import traceback

from django.conf import settings
from django.http import Http404

from .http import ApiError, json_response

logger = logging.getLogger(__name__)


class ApiErrorMiddleware:
    """
    Renders every exception raised by a view as a JSON error body.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if isinstance(exception, ApiError):
            if exception.status_code >= 500:
                logger.error(f"{request.method} {request.path} failed: {exception.message}")
            else:
                logger.info(f"{request.method} {request.path} -> {exception.status_code}: {exception.message}")
            return self._render(exception.message, exception.status_code, exception)

        if isinstance(exception, Http404):
            return self._render(f"Not Found - {request.path}", 404, exception)

        logger.exception(f"Unhandled error on {request.method} {request.path}: {exception}")
        return self._render("Server Error", 500, exception)

    def _render(self, message, status, exception):
        body = {"message": message}
        if settings.DEBUG:
            body["stack"] = "".join(traceback.format_exception(type(exception), exception, exception.__traceback__))
        return json_response(body, status=status)


def not_found(request, exception=None):
    return json_response({"message": f"Not Found - {request.path}"}, status=404)


def server_error(request):
    return json_response({"message": "Server Error"}, status=500)
