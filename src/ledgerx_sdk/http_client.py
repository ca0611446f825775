from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .error_mapper import AUTH_STATUS_CODES, map_error
from .exceptions import ApiError, StaleResponseError, TransportError
from .idempotency import idempotency_headers
from .tracing import TraceContext

logger = logging.getLogger(__name__)

AuthErrorHandler = Callable[[ApiError], None]


@dataclass
class LastOperation:
    service: str
    module: str
    operation: str
    duration_ms: int
    result: str
    trace_id: str | None


@dataclass
class HttpClient:
    """JSON client for one backend.

    The bearer credential lives on the underlying ``requests.Session`` so
    that only the session store, through ``set_bearer``, can change it.
    """

    config: ClientConfig
    base_url: str
    service: str = "ledger"
    trace: TraceContext | None = None
    session: requests.Session | None = None
    auth_status_codes: frozenset[int] = AUTH_STATUS_CODES
    last_operation: LastOperation | None = None
    _auth_error_handler: AuthErrorHandler | None = None
    _context_versions: dict[str, int] = field(default_factory=dict)
    _context_lock: threading.Lock = field(default_factory=threading.Lock)

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
            )
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)
        self.session.headers.update({"Accept": "application/json", "Content-Type": "application/json"})
        if self.trace is None:
            self.trace = TraceContext()

    def set_bearer(self, token: str | None) -> None:
        if self.session is None:
            raise RuntimeError("HTTP session not initialized")
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        else:
            self.session.headers.pop("Authorization", None)

    @property
    def has_bearer(self) -> bool:
        return bool(self.session is not None and self.session.headers.get("Authorization"))

    def register_auth_error_handler(self, handler: AuthErrorHandler | None) -> None:
        self._auth_error_handler = handler

    def _build_url(self, path: str) -> str:
        base = self.base_url.rstrip("/") + "/"
        return urljoin(base, path.lstrip("/"))

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        idempotency_key: str | None = None,
        context_key: str | None = None,
        context_version: int | None = None,
        module: str = "unknown",
        operation: str = "unknown",
    ) -> dict[str, Any] | list[Any] | None:
        if self.session is None:
            raise RuntimeError("HTTP session not initialized")
        trace_context = self.trace or TraceContext()
        request_headers = trace_context.headers()
        if idempotency_key:
            request_headers.update(idempotency_headers(idempotency_key))

        normalized_method = method.upper()
        url = self._build_url(path)
        if context_key and context_version is None:
            context_version = self.get_context_version(context_key)

        started = time.monotonic()
        try:
            response = self.session.request(
                method=normalized_method,
                url=url,
                headers=request_headers,
                json=json_body,
                params=params,
                timeout=(self.config.connect_timeout_seconds, self.config.read_timeout_seconds),
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as exc:
            self._record_operation(module, operation, started, "network_error", trace_context.trace_id)
            raise TransportError(
                code="NETWORK_ERROR",
                message=str(exc) or "Network error",
                details={"type": type(exc).__name__},
                trace_id=trace_context.trace_id,
                status_code=0,
                raw_payload=None,
            ) from exc

        if context_key and not self._context_is_current(context_key, context_version):
            if response.status_code in self.auth_status_codes:
                # A revoked session is acted on even when the answer itself is dropped.
                self._report_auth_failure(self._error_from_response(response, trace_context), operation)
            self._record_operation(module, operation, started, "discarded", trace_context.trace_id)
            raise StaleResponseError(
                code="STALE_RESPONSE",
                message="Response discarded because its context changed",
                details={"context_key": context_key, "context_version": context_version},
                trace_id=trace_context.trace_id,
                status_code=0,
                raw_payload=None,
            )

        trace_context.update_from_headers(response.headers)
        if response.ok:
            self._record_operation(module, operation, started, "success", trace_context.trace_id)
            if not response.content:
                return None
            return response.json()

        error = self._error_from_response(response, trace_context)
        self._record_operation(module, operation, started, "error", trace_context.trace_id)
        if response.status_code in self.auth_status_codes:
            self._report_auth_failure(error, operation)
        raise error

    def _error_from_response(self, response: requests.Response, trace_context: TraceContext) -> ApiError:
        payload: Any
        try:
            payload = response.json()
        except ValueError:
            payload = {"message": response.text} if response.text else {}
        if not isinstance(payload, dict):
            payload = {"details": payload}
        trace_context.update_from_payload(payload)
        return map_error(response.status_code, payload, trace_context.trace_id)

    def _report_auth_failure(self, error: ApiError, operation: str) -> None:
        if self._auth_error_handler is None:
            return
        logger.warning(
            "auth_error_response",
            extra={"service": self.service, "status_code": error.status_code, "operation": operation},
        )
        self._auth_error_handler(error)

    def switch_context(self, context_key: str) -> int:
        with self._context_lock:
            new_version = self._context_versions.get(context_key, 0) + 1
            self._context_versions[context_key] = new_version
            return new_version

    def get_context_version(self, context_key: str) -> int:
        with self._context_lock:
            return self._context_versions.get(context_key, 0)

    def _context_is_current(self, context_key: str, context_version: int | None) -> bool:
        if context_version is None:
            return True
        return self.get_context_version(context_key) == context_version

    def _record_operation(self, module: str, operation: str, started: float, result: str, trace_id: str | None) -> None:
        self.last_operation = LastOperation(
            service=self.service,
            module=module,
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
            trace_id=trace_id,
        )
