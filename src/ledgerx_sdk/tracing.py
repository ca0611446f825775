"""Correlation ids shared with both backends.

Both services echo ``X-Correlation-ID`` (or mint one) and put it in their
error bodies as ``correlationId``. Reads reuse the current id; every
balance-changing action starts a fresh one so that its audit line and the
backend logs can be joined on it.
"""
from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Mapping

TRACE_HEADER = "X-Correlation-ID"
PAYLOAD_KEY = "correlationId"


@dataclass
class TraceContext:
    trace_id: str | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def ensure(self) -> str:
        with self._lock:
            if not self.trace_id:
                self.trace_id = str(uuid.uuid4())
            return self.trace_id

    def begin_action(self) -> str:
        with self._lock:
            self.trace_id = str(uuid.uuid4())
            return self.trace_id

    def headers(self) -> dict[str, str]:
        return {TRACE_HEADER: self.ensure()}

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        wanted = TRACE_HEADER.lower()
        for key, value in headers.items():
            if key.lower() == wanted and value:
                self._adopt(value)
                return

    def update_from_payload(self, payload: Mapping[str, object]) -> None:
        trace_id = payload.get(PAYLOAD_KEY)
        if isinstance(trace_id, str) and trace_id:
            self._adopt(trace_id)

    def _adopt(self, trace_id: str) -> None:
        with self._lock:
            self.trace_id = trace_id
