"""Shared plumbing for the workflow services.

Every service turns SDK failures into a ``WorkflowError`` carrying the text
to show next to the form or table that issued the call. ``PreconditionError``
is raised before any request is made.
"""
from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Generic, Mapping, TypeVar

from ledgerx_sdk import (
    ApiError,
    ApiGateway,
    ErrorCategory,
    Identity,
    MutationAttempts,
    SessionStore,
    StaleResponseError,
    to_user_facing_error,
)

from ..observability import AUDIT_LOGGER, get_logger, log_action

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(eq=False)
class WorkflowError(RuntimeError):
    message: str
    category: ErrorCategory = ErrorCategory.VALIDATION
    details: str | None = None
    trace_id: str | None = None
    status_code: int | None = None

    def __str__(self) -> str:
        return self.message


class PreconditionError(WorkflowError):
    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message=message, category=ErrorCategory.PRECONDITION, details=details)


_CURRENCY = re.compile(r"^[A-Z]{3}$")


def normalize_currency(currency_code: str | None, default: str = "INR") -> str:
    code = (currency_code or default).strip().upper()
    if not _CURRENCY.match(code):
        raise PreconditionError("Currency must be a 3-letter ISO code.")
    return code


def parse_amount(amount: object, minimum: Decimal, message: str) -> Decimal:
    """Parse user input into a Decimal no smaller than ``minimum``."""
    if amount is None or isinstance(amount, bool):
        raise PreconditionError(message)
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError) as exc:
        raise PreconditionError(message) from exc
    if not value.is_finite() or value < minimum:
        raise PreconditionError(message)
    return value


def normalize_error(exc: Exception, fallback: str = "Something went wrong.") -> WorkflowError:
    if isinstance(exc, WorkflowError):
        return exc
    if isinstance(exc, ApiError):
        friendly = to_user_facing_error(exc)
        return WorkflowError(
            message=friendly.message or fallback,
            category=friendly.category,
            details=friendly.technical_details,
            trace_id=exc.trace_id,
            status_code=exc.status_code,
        )
    # Response bodies that fail model validation
    return WorkflowError(message=fallback, category=ErrorCategory.SERVER, details=str(exc) or None)


@dataclass(frozen=True)
class ReadOutcome(Generic[T]):
    name: str
    value: T | None = None
    error: WorkflowError | None = None
    discarded: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.discarded


def settle_all(reads: Mapping[str, Callable[[], Any]], max_workers: int | None = None) -> dict[str, ReadOutcome[Any]]:
    """Run independent reads together and collect every settlement.

    Never raises for a failed read and never cancels siblings. The result
    keeps the declaration order of ``reads``.
    """
    if not reads:
        return {}
    outcomes: dict[str, ReadOutcome[Any]] = {}
    with ThreadPoolExecutor(max_workers=max_workers or len(reads)) as pool:
        futures = {name: pool.submit(read) for name, read in reads.items()}
        for name, future in futures.items():
            try:
                outcomes[name] = ReadOutcome(name=name, value=future.result())
            except StaleResponseError:
                outcomes[name] = ReadOutcome(name=name, discarded=True)
            except (ApiError, ValueError) as exc:
                logger.warning("read_failed", extra={"read": name, "error": str(exc)})
                outcomes[name] = ReadOutcome(name=name, error=normalize_error(exc))
    return outcomes


def first_error(outcomes: Mapping[str, ReadOutcome[Any]]) -> WorkflowError | None:
    for outcome in outcomes.values():
        if outcome.error is not None:
            return outcome.error
    return None


class WorkflowService:
    module = "core"

    def __init__(
        self,
        gateway: ApiGateway,
        session: SessionStore,
        attempts: MutationAttempts | None = None,
    ) -> None:
        self.gateway = gateway
        self.session = session
        self.attempts = attempts or MutationAttempts()
        self.audit = get_logger(AUDIT_LOGGER)

    def _identity(self) -> Identity:
        identity = self.session.identity
        if identity is None:
            raise PreconditionError("Please sign in again.")
        return identity

    def _merchant_id(self) -> str:
        merchant_id = self._identity().merchant_affiliation
        if not merchant_id:
            raise PreconditionError("Merchant ID not found. Please log in again.")
        return merchant_id

    def _call(self, fn: Callable[..., T], *args: Any, fallback: str = "Something went wrong.", **kwargs: Any) -> T:
        try:
            return fn(*args, **kwargs)
        except StaleResponseError:
            raise
        except (ApiError, ValueError) as exc:
            raise normalize_error(exc, fallback) from exc

    def _mutate(
        self,
        action: str,
        fn: Callable[[str], T],
        *,
        scope_hint: str,
        target_id: str | None = None,
        attempt_key: str | None = None,
        fallback: str = "Something went wrong.",
    ) -> T:
        """Run one idempotent mutation.

        The key is reused only while the same attempt is unsettled: a second
        submit during the call is refused, and after a network failure the
        next submit replays the same key. Any definite answer retires it.
        """
        operation = attempt_key or f"{action}:{target_id or ''}"
        if not self.attempts.begin(operation):
            raise PreconditionError("This action is already in progress.")
        attempt = self.attempts.get_or_create(operation, scope_hint, target_id)
        self._begin_trace()
        try:
            result = fn(attempt.idempotency_key)
        except (ApiError, ValueError) as exc:
            error = normalize_error(exc, fallback)
            if error.category is not ErrorCategory.NETWORK:
                self.attempts.clear(operation)
            self._record(action, "failure", error.trace_id)
            raise error from exc
        finally:
            self.attempts.end(operation)
        self.attempts.clear(operation)
        self._record(action, "success", self._trace_id())
        return result

    def _guarded(
        self,
        action: str,
        operation: str,
        call: Callable[[], T],
        *,
        fallback: str = "Something went wrong.",
    ) -> T:
        """Run a mutation without an idempotency key, refusing a second submit while in flight."""
        if not self.attempts.begin(operation):
            raise PreconditionError("This action is already in progress.")
        self._begin_trace()
        try:
            result = self._call(call, fallback=fallback)
        except WorkflowError as exc:
            self._record(action, "failure", exc.trace_id)
            raise
        finally:
            self.attempts.end(operation)
        self._record(action, "success", self._trace_id())
        return result

    def _begin_trace(self) -> None:
        # Each mutation gets its own correlation id for the audit line.
        if self.gateway.trace:
            self.gateway.trace.begin_action()

    def _trace_id(self) -> str | None:
        return self.gateway.trace.trace_id if self.gateway.trace else None

    def _record(self, action: str, outcome: str, trace_id: str | None) -> None:
        identity = self.session.identity
        log_action(
            self.audit,
            module=self.module,
            action=action,
            actor_role=",".join(sorted(identity.roles)) if identity else None,
            merchant_id=identity.merchant_affiliation if identity else None,
            trace_id=trace_id,
            outcome=outcome,
        )
