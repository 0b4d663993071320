"""
Core middleware for ShiftMarket.

RequestIdMiddleware:
  Tags every request with an id so all log lines emitted while handling it
  can be correlated. An incoming X-Request-ID header is reused when it looks
  sane (e.g. set by a load balancer); otherwise a fresh UUID4 is generated.
  The id is exposed as request.request_id and echoed back in the
  X-Request-ID response header.

RequestIdFilter:
  Logging filter that stamps the current request id onto every record as
  %(request_id)s ("-" outside a request). Wired up in settings.LOGGING.

The id lives in a contextvar, so it follows the request through sync and
async code without being passed around.
"""

import logging
import re
import uuid
from contextvars import ContextVar

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_request_id: ContextVar[str] = ContextVar("request_id", default="-")

# Accept client-supplied ids only if they are short and plain
_VALID_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def get_request_id() -> str:
    """Return the id of the request being handled, or "-" outside one."""
    return _request_id.get()


class RequestIdMiddleware:
    """
    Middleware that assigns a correlation id to each request.

    Must be first in MIDDLEWARE so that log lines from every later layer
    carry the id.
    """

    def __init__(self, get_response):
        """
        Initialize the middleware.

        Args:
            get_response: The next middleware or view in the chain.
        """
        self.get_response = get_response

    def __call__(self, request):
        """
        Bind a request id for the duration of the request.

        Args:
            request: The incoming HTTP request.

        Returns:
            The HTTP response from the next layer, with X-Request-ID set.
        """
        request_id = self._incoming_id(request) or str(uuid.uuid4())
        request.request_id = request_id
        token = _request_id.set(request_id)
        try:
            response = self.get_response(request)
        finally:
            _request_id.reset(token)
        response[REQUEST_ID_HEADER] = request_id
        return response

    @staticmethod
    def _incoming_id(request):
        """Return the client-supplied id if it is well formed."""
        candidate = request.headers.get(REQUEST_ID_HEADER, "")
        if candidate and _VALID_ID.fullmatch(candidate):
            return candidate
        return None


class RequestIdFilter(logging.Filter):
    """Adds request_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True
