from __future__ import annotations

from typing import Any

from aws_lambda_powertools import Logger, Tracer
from mangum import Mangum
from mangum.types import LambdaContext

from clubbooking.api import app, metrics

logger = Logger()
tracer = Tracer()
asgi_handler = Mangum(app, lifespan="off")


def _normalize_http_event(event: dict[str, Any]) -> dict[str, Any]:
    # Local invocations and tests send HTTP API v2.0 events without gateway-populated fields
    if event.get("version") != "2.0":
        return event
    request_context = event.setdefault("requestContext", {})
    http_ctx = request_context.setdefault("http", {})
    http_ctx.setdefault("sourceIp", "127.0.0.1")
    http_ctx.setdefault("userAgent", "unknown")
    request_context.setdefault("stage", "$default")
    event.setdefault("rawQueryString", "")
    event.setdefault("headers", {})
    return event


@metrics.log_metrics
@tracer.capture_lambda_handler
def lambda_handler(event: dict[str, Any], context: LambdaContext) -> Any:
    if isinstance(event, dict):
        event = _normalize_http_event(event)
        route = event.get("routeKey")
        tracer.put_annotation(key="Route", value=str(route))
        logger.debug("Handling request", extra={"route": route})

    # Metrics recorded by the routes are flushed once per invocation by log_metrics
    return asgi_handler(event, context)
