from __future__ import annotations

import logging

from ledgerx_sdk import ApiGateway, ApiError, UserProfile
from ledgerx_sdk.models import SignupRequest

from .base import PreconditionError, WorkflowError, normalize_currency, normalize_error

logger = logging.getLogger(__name__)

SIGNUP_FORBIDDEN = "Only an admin can create accounts, or use the quick login."


class SignupWorkflow:
    """Merchant self-registration; runs without a session."""

    def __init__(self, gateway: ApiGateway) -> None:
        self.gateway = gateway

    def register_merchant(self, username: str | None, password: str | None, currency_code: str | None = "INR") -> UserProfile:
        name = (username or "").strip()
        if len(name) < 2:
            raise PreconditionError("Username must be at least 2 characters")
        if not password or len(password) < 8:
            raise PreconditionError("Password must be at least 8 characters")
        request = SignupRequest(username=name, password=password, currency_code=normalize_currency(currency_code))
        logger.info("signup_attempt", extra={"username": name})
        try:
            user = self.gateway.auth().signup(request)
        except (ApiError, ValueError) as exc:
            error = normalize_error(exc, "Sign up failed")
            if error.status_code == 403:
                raise WorkflowError(
                    message=SIGNUP_FORBIDDEN,
                    category=error.category,
                    details=error.details,
                    trace_id=error.trace_id,
                    status_code=403,
                ) from exc
            raise error from exc
        logger.info("signup_success", extra={"username": name, "user_id": user.id})
        return user
