from __future__ import annotations

from dataclasses import dataclass

from ..http_client import HttpClient
from ..models import AdminStats, PayoutStats
from .base import BaseClient, _expect_object


@dataclass
class AdminClient(BaseClient):
    """Admin aggregates live on both backends."""

    payout_http: HttpClient | None = None

    def ledger_stats(self) -> AdminStats:
        data = self._request("GET", "/api/v1/admin/stats", operation="admin_stats")
        return AdminStats.model_validate(_expect_object(data, "admin stats"))

    def payout_stats(self) -> PayoutStats:
        if self.payout_http is None:
            raise RuntimeError("Payout client not configured")
        data = self.payout_http.request("GET", "/api/v1/payouts/stats", module=self.module, operation="payout_stats")
        return PayoutStats.model_validate(_expect_object(data, "payout stats"))
