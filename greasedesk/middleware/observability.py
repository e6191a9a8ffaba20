from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from greasedesk.core.metrics import request_metrics
from greasedesk.core.request_context import clear_request_context, set_request_context

logger = logging.getLogger(__name__)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        request.state.tenant_context = None
        set_request_context(request_id=request_id)

        status_code = 500
        endpoint = request.url.path
        method = request.method
        response = None

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            context = getattr(request.state, "tenant_context", None)
            group_id = getattr(context, "group_id", None)
            user_id = getattr(context, "user_id", None)
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            request_metrics.observe(
                endpoint=_route_template(request),
                method=method,
                status_code=status_code,
                duration_ms=duration_ms,
                group_id=group_id,
            )
            logger.info(
                "request completed",
                extra={
                    "request_id": request_id,
                    "group_id": group_id,
                    "user_id": user_id,
                    "endpoint": endpoint,
                    "method": method,
                    "status_code": status_code,
                    "duration_ms": duration_ms,
                },
            )

            if response is not None:
                response.headers["X-Request-ID"] = request_id

            clear_request_context()


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or request.url.path
