from __future__ import annotations

from typing import Any, Mapping

from ..models import EntriesQuery, LedgerEntry, Page
from .base import BaseClient, _coerce_model, _expect_object


class EntriesClient(BaseClient):
    def list_entries(
        self,
        query: EntriesQuery | Mapping[str, Any] | None = None,
        *,
        context_key: str | None = None,
        context_version: int | None = None,
    ) -> Page[LedgerEntry]:
        request = _coerce_model(query or {}, EntriesQuery)
        data = self._request(
            "GET",
            "/api/v1/entries",
            params=request.to_params(),
            context_key=context_key,
            context_version=context_version,
            operation="list_entries",
        )
        return Page[LedgerEntry].model_validate(_expect_object(data, "entries"))
