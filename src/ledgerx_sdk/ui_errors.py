from __future__ import annotations

import re
from dataclasses import dataclass

from .error_mapper import ErrorCategory, categorize
from .exceptions import ApiError

_INSUFFICIENT_BALANCE = re.compile(r"insufficient|balance", re.IGNORECASE)


@dataclass(frozen=True)
class UserFacingError:
    message: str
    category: ErrorCategory
    details: str | None = None
    trace_id: str | None = None

    @property
    def technical_details(self) -> str | None:
        if self.details:
            return self.details
        return None


def _backend_message(exc: ApiError) -> str:
    message = (exc.message or "").strip()
    if message == "Request failed":
        return ""
    return message


def to_user_facing_error(exc: ApiError) -> UserFacingError:
    """Message shown next to the form or table that issued the failing call."""
    category = categorize(exc)
    backend = _backend_message(exc)
    status = exc.status_code
    if category is ErrorCategory.NETWORK:
        primary = "Network error. Check connection."
    elif category is ErrorCategory.SERVER:
        primary = "Server error. Please try again later."
    elif category is ErrorCategory.AUTHORIZATION:
        primary = "Your session has expired. Please sign in again." if status == 401 else (
            backend or "You are not allowed to perform this action."
        )
    elif status == 422:
        primary = "Insufficient balance." if backend and _INSUFFICIENT_BALANCE.search(backend) else (
            backend or "Validation failed."
        )
    elif status == 409:
        primary = "Duplicate request (idempotency). Please do not retry."
    elif status == 404:
        primary = backend or "Not found."
    elif status == 400:
        primary = backend or "Invalid request."
    else:
        primary = backend or "Something went wrong."
    details = f"{exc.code} (HTTP {status})"
    if exc.details:
        details = f"{details}: {exc.details}"
    return UserFacingError(message=primary, category=category, details=details, trace_id=exc.trace_id)
