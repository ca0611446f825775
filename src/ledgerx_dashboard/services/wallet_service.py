from __future__ import annotations

from dataclasses import dataclass

from ledgerx_sdk import Settlement, Wallet
from ledgerx_sdk.models import WalletType

from .base import PreconditionError, WorkflowService, normalize_currency


@dataclass
class WalletPanel:
    wallet: Wallet | None = None
    message: str | None = None


def _require_id(value: str | None, message: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise PreconditionError(message)
    return cleaned


class WalletWorkflow(WorkflowService):
    module = "wallets"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.panel = WalletPanel()

    def freeze(self, wallet_id: str | None) -> Wallet:
        wallet_id = _require_id(wallet_id, "Wallet ID is required.")
        wallet = self._guarded(
            "freeze_wallet",
            f"freeze:{wallet_id}",
            lambda: self.gateway.wallets().freeze(wallet_id),
            fallback="Failed to freeze",
        )
        # The response body is the new state; no second read.
        self.panel = WalletPanel(wallet=wallet, message="Wallet frozen.")
        return wallet

    def unfreeze(self, wallet_id: str | None) -> Wallet:
        wallet_id = _require_id(wallet_id, "Wallet ID is required.")
        wallet = self._guarded(
            "unfreeze_wallet",
            f"unfreeze:{wallet_id}",
            lambda: self.gateway.wallets().unfreeze(wallet_id),
            fallback="Failed to unfreeze",
        )
        self.panel = WalletPanel(wallet=wallet, message="Wallet unfrozen.")
        return wallet

    def lookup(self, wallet_id: str | None) -> Wallet:
        wallet_id = _require_id(wallet_id, "Wallet ID is required.")
        wallet = self._call(self.gateway.wallets().get_wallet, wallet_id, fallback="Failed to fetch wallet")
        self.panel = WalletPanel(wallet=wallet)
        return wallet

    def lookup_by_type(
        self,
        merchant_id: str | None,
        currency_code: str | None = "INR",
        wallet_type: WalletType | str = WalletType.ESCROW,
        vendor_user_id: str | None = None,
    ) -> Wallet:
        merchant_id = _require_id(merchant_id, "Merchant ID required")
        wallet = self._call(
            self.gateway.wallets().get_wallet_by_type,
            merchant_id,
            normalize_currency(currency_code),
            wallet_type,
            vendor_user_id,
            fallback="Failed to fetch wallet",
        )
        self.panel = WalletPanel(wallet=wallet)
        return wallet

    def settlement_report(self, merchant_id: str | None, currency_code: str | None = "INR") -> Settlement:
        merchant_id = _require_id(merchant_id, "Merchant ID required")
        return self._call(
            self.gateway.wallets().get_settlement,
            merchant_id,
            normalize_currency(currency_code),
            fallback="Failed to load settlement",
        )
