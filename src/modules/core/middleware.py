"""Request-scoped logging context."""

from __future__ import annotations

import time
import uuid
from typing import Any, Callable, Dict

import structlog
from django.http import HttpRequest, HttpResponse

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware:
    """Bind a correlation ID, and the customer a route is scoped to, into logs.

    The ID comes from ``X-Request-ID`` or is a fresh UUID4 and is echoed back
    in the response.  Routes under ``customers/<customer_id>/`` also bind
    ``customer_id``, so every cart and checkout log line names the customer
    without each call site passing it along.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.META.get("HTTP_X_REQUEST_ID") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        started = time.monotonic()
        logger.info("request_started", method=request.method, path=request.path)
        try:
            response = self.get_response(request)
        finally:
            structlog.contextvars.unbind_contextvars("customer_id")

        logger.info(
            "request_finished",
            method=request.method,
            path=request.path,
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )
        response[REQUEST_ID_HEADER] = cid
        return response

    def process_view(
        self,
        request: HttpRequest,
        view_func: Callable[..., Any],
        view_args: tuple,
        view_kwargs: Dict[str, Any],
    ) -> None:
        customer_id = view_kwargs.get("customer_id")
        if customer_id is not None:
            structlog.contextvars.bind_contextvars(customer_id=str(customer_id))
