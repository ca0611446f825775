from __future__ import annotations

import itertools
import secrets
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone

IDEMPOTENCY_HEADER = "Idempotency-Key"

_sequence = itertools.count(1)
_sequence_lock = threading.Lock()


def _normalize(value: str) -> str:
    return value.strip().lower().replace(" ", "-").replace("_", "-")


def generate_idempotency_key(scope_hint: str | None = None, target_id: str | None = None) -> str:
    """Build a key unique per logical mutation.

    Layout: ``<scope>[-<target>]-<utc timestamp>-<sequence>-<nonce>``. The
    timestamp and process-wide sequence keep keys ordered, the 64-bit nonce
    keeps keys from separate processes apart.
    """
    scope = _normalize(scope_hint) if scope_hint and scope_hint.strip() else "mutation"
    ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    with _sequence_lock:
        seq = next(_sequence)
    nonce = secrets.token_hex(8)
    prefix = f"{scope}-{_normalize(target_id)}" if target_id else scope
    return f"{prefix}-{ts}-{seq}-{nonce}"


def idempotency_headers(idempotency_key: str) -> dict[str, str]:
    return {IDEMPOTENCY_HEADER: idempotency_key}


@dataclass(frozen=True)
class MutationAttempt:
    operation: str
    idempotency_key: str


@dataclass
class MutationAttempts:
    """Tracks in-flight mutations per logical operation.

    While an operation is in flight the same key is handed out, so a resubmit
    of that invocation can be deduplicated by the backend. Once the call
    settles the attempt is cleared and the next invocation gets a new key.
    """

    _pending: dict[str, MutationAttempt] = field(default_factory=dict)
    _in_flight: set[str] = field(default_factory=set)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def get_or_create(self, operation: str, scope_hint: str | None = None, target_id: str | None = None) -> MutationAttempt:
        with self._lock:
            cached = self._pending.get(operation)
            if cached:
                return cached
            attempt = MutationAttempt(
                operation=operation,
                idempotency_key=generate_idempotency_key(scope_hint or operation, target_id),
            )
            self._pending[operation] = attempt
            return attempt

    def begin(self, operation: str) -> bool:
        with self._lock:
            if operation in self._in_flight:
                return False
            self._in_flight.add(operation)
            return True

    def end(self, operation: str) -> None:
        with self._lock:
            self._in_flight.discard(operation)

    def clear(self, operation: str) -> None:
        with self._lock:
            self._pending.pop(operation, None)

    def in_flight(self, operation: str) -> bool:
        with self._lock:
            return operation in self._in_flight
