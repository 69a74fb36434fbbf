from __future__ import annotations

from typing import Any

from aws_lambda_powertools import Logger
from fastapi import HTTPException, Request

from .models import Identity

logger = Logger()

PROFILE_HEADER = "X-Profile-Id"


def _claims_subject(event: Any) -> str | None:
    if not isinstance(event, dict):
        return None
    authorizer = event.get("requestContext", {}).get("authorizer") or {}
    claims = (authorizer.get("jwt") or {}).get("claims") or {}
    sub = claims.get("sub")
    return sub if isinstance(sub, str) and sub else None


def get_identity(request: Request) -> Identity:
    # Mangum exposes the raw API Gateway event on the ASGI scope
    profile_id = _claims_subject(request.scope.get("aws.event")) or request.headers.get(PROFILE_HEADER)
    if not profile_id:
        logger.info("Request without identity", extra={"path": request.url.path})
        raise HTTPException(status_code=401, detail="Identity required")
    return Identity(id=profile_id)
