from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..http_client import HttpClient
from ..idempotency import generate_idempotency_key


@dataclass
class BaseClient:
    http: HttpClient
    module: str = "core"

    def _request(self, method: str, path: str, *, operation: str = "unknown", **kwargs):
        return self.http.request(method, path, module=self.module, operation=operation, **kwargs)


def _coerce_model(value: Any, model_type: type[Any]):
    if isinstance(value, model_type):
        return value
    return model_type.model_validate(value)


def _resolve_idempotency(idempotency_key: str | None, scope_hint: str, target_id: str | None = None) -> str:
    return idempotency_key or generate_idempotency_key(scope_hint, target_id)


def _expect_object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"Expected {what} response to be a JSON object")
    return data


def _expect_list(data: Any, what: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"Expected {what} response to be a JSON array")
    return data
