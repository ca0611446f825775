from __future__ import annotations

from enum import Enum
from typing import Mapping

from .exceptions import (
    ApiError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)

AUTH_STATUS_CODES = frozenset({401, 403})


class ErrorCategory(str, Enum):
    PRECONDITION = "precondition"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    SERVER = "server"
    NETWORK = "network"


def map_error(status_code: int, payload: Mapping[str, object] | None, trace_id: str | None) -> ApiError:
    payload = payload or {}
    error_label = payload.get("error")
    code = str(payload.get("code") or error_label or "HTTP_ERROR")
    code = code.strip().upper().replace(" ", "_")
    message = str(payload.get("message") or error_label or "Request failed")
    details = payload.get("fieldErrors") or payload.get("details")
    payload_trace_id = payload.get("correlationId") or payload.get("trace_id")
    resolved_trace_id = str(payload_trace_id) if payload_trace_id is not None else trace_id
    mapped: type[ApiError]
    if status_code == 401:
        mapped = UnauthorizedError
    elif status_code == 403:
        mapped = ForbiddenError
    elif status_code == 404:
        mapped = NotFoundError
    elif status_code in {400, 422}:
        mapped = ValidationError
    elif status_code == 409:
        mapped = ConflictError
    elif status_code == 429:
        mapped = RateLimitError
    elif status_code >= 500:
        mapped = ServerError
    else:
        mapped = ApiError
    return mapped(
        code=code,
        message=message,
        details=details,
        trace_id=resolved_trace_id,
        status_code=status_code,
        raw_payload=dict(payload),
    )


def categorize(error: ApiError) -> ErrorCategory:
    if isinstance(error, TransportError) or error.status_code <= 0:
        return ErrorCategory.NETWORK
    if error.status_code in AUTH_STATUS_CODES:
        return ErrorCategory.AUTHORIZATION
    if error.status_code >= 500:
        return ErrorCategory.SERVER
    return ErrorCategory.VALIDATION
