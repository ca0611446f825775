from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .base import WorkflowError, WorkflowService, first_error, settle_all

logger = logging.getLogger(__name__)


@dataclass
class DashboardSnapshot:
    """Per-section results of one landing-page load.

    A failed section is simply absent; ``error`` holds the first failure in
    the order the sections were declared.
    """

    sections: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    trace_id: str | None = None

    def get(self, name: str, default: Any = None) -> Any:
        return self.sections.get(name, default)

    @property
    def has_data(self) -> bool:
        return any(value is not None and value != [] for value in self.sections.values())


class DashboardService(WorkflowService):
    module = "dashboard"

    def load_admin(self, recent_merchants: int = 5) -> DashboardSnapshot:
        admin = self.gateway.admin()
        merchants = self.gateway.merchants()
        outcomes = settle_all(
            {
                "admin_stats": admin.ledger_stats,
                "payout_stats": admin.payout_stats,
                "merchants": lambda: merchants.list_merchants(page=0, size=recent_merchants).content,
            }
        )
        snapshot = DashboardSnapshot(
            sections={name: outcome.value for name, outcome in outcomes.items() if outcome.ok}
        )
        error = first_error(outcomes)
        if error is not None:
            snapshot.error = error.message
            snapshot.trace_id = error.trace_id
        snapshot.sections.setdefault("merchants", [])
        logger.info(
            "admin_dashboard_loaded",
            extra={"failed": [name for name, outcome in outcomes.items() if outcome.error is not None]},
        )
        return snapshot

    def load_merchant(self) -> DashboardSnapshot:
        snapshot = DashboardSnapshot()
        try:
            profile = self._call(self.gateway.users().me, fallback="Failed to load wallets")
        except WorkflowError as exc:
            return self._failed(snapshot, exc)
        snapshot.sections["profile"] = profile
        if not (profile.main_wallet_id and profile.escrow_wallet_id):
            snapshot.sections.update({"main_wallet": None, "escrow_wallet": None})
            return snapshot
        wallets = self.gateway.wallets()
        outcomes = settle_all(
            {
                "main_wallet": lambda: wallets.get_wallet(profile.main_wallet_id),
                "escrow_wallet": lambda: wallets.get_wallet(profile.escrow_wallet_id),
            }
        )
        for name, outcome in outcomes.items():
            snapshot.sections[name] = outcome.value if outcome.ok else None
        error = first_error(outcomes)
        if error is not None:
            snapshot.error = error.message
            snapshot.trace_id = error.trace_id
        return snapshot

    def load_vendor(self) -> DashboardSnapshot:
        snapshot = DashboardSnapshot()
        try:
            profile = self._call(self.gateway.users().me, fallback="Failed to load wallet")
            snapshot.sections["profile"] = profile
            snapshot.sections["vendor_wallet"] = (
                self._call(self.gateway.wallets().get_wallet, profile.vendor_wallet_id, fallback="Failed to load wallet")
                if profile.vendor_wallet_id
                else None
            )
        except WorkflowError as exc:
            return self._failed(snapshot, exc)
        return snapshot

    @staticmethod
    def _failed(snapshot: DashboardSnapshot, exc: WorkflowError) -> DashboardSnapshot:
        snapshot.error = exc.message
        snapshot.trace_id = exc.trace_id
        return snapshot
