from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from ledgerx_sdk import Commission, Page, Settlement, UserProfile, VendorSummary, Wallet
from ledgerx_sdk.models import AddVendorRequest, CommissionRequest, CommissionType, WalletType

from .base import (
    PreconditionError,
    WorkflowError,
    WorkflowService,
    normalize_currency,
    parse_amount,
    settle_all,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderSettlement:
    settlement: Settlement
    commission: Commission | None = None


class MerchantWorkflow(WorkflowService):
    module = "merchants"

    def list_vendors(self) -> list[VendorSummary]:
        merchant_id = self._merchant_id()
        return self._call(self.gateway.merchants().list_vendors, merchant_id, fallback="Failed to load vendors")

    def add_vendor(self, username: str | None, password: str | None, currency_code: str | None = "INR") -> UserProfile:
        merchant_id = self._merchant_id()
        name = (username or "").strip()
        if len(name) < 2:
            raise PreconditionError("Username must be at least 2 characters.")
        if not password or len(password) < 8:
            raise PreconditionError("Password must be at least 8 characters.")
        request = AddVendorRequest(username=name, password=password, currency_code=normalize_currency(currency_code))
        return self._guarded(
            "add_vendor",
            f"add_vendor:{name}",
            lambda: self.gateway.merchants().add_vendor(merchant_id, request),
            fallback="Failed to add vendor",
        )

    def load_commission(self) -> Commission | None:
        """Current commission, or None when the merchant has none configured."""
        merchant_id = self._merchant_id()
        try:
            return self._call(
                self.gateway.commission().get_commission,
                merchant_id,
                fallback="Failed to load commission",
            )
        except WorkflowError as exc:
            if exc.status_code == 404:
                return None
            raise

    def update_commission(self, rate: object) -> Commission:
        merchant_id = self._merchant_id()
        value = parse_amount(rate, Decimal("0"), "Enter a valid rate 0-100")
        if value > 100:
            raise PreconditionError("Enter a valid rate 0-100")
        request = CommissionRequest(
            commission_type=CommissionType.PERCENTAGE,
            percentage_value=value,
            currency_code="INR",
        )
        return self._guarded(
            "update_commission",
            f"update_commission:{merchant_id}",
            lambda: self.gateway.commission().update_commission(merchant_id, request),
            fallback="Failed to update",
        )

    def order_settlement(self, currency_code: str | None = "INR") -> OrderSettlement:
        """Settlement figures with the commission rate alongside.

        A failed commission read is tolerated; a failed settlement read is not.
        """
        merchant_id = self._merchant_id()
        currency = normalize_currency(currency_code)
        wallets = self.gateway.wallets()
        commission = self.gateway.commission()
        outcomes = settle_all(
            {
                "settlement": lambda: wallets.get_settlement(merchant_id, currency),
                "commission": lambda: commission.get_commission(merchant_id),
            }
        )
        settlement = outcomes["settlement"]
        if settlement.error is not None:
            raise settlement.error
        if not settlement.ok:
            raise WorkflowError(message="Failed to load")
        if outcomes["commission"].error is not None:
            logger.info("commission_unavailable", extra={"merchant_id": merchant_id})
        return OrderSettlement(settlement=settlement.value, commission=outcomes["commission"].value)

    def escrow_balance(self, currency_code: str | None = "INR") -> Wallet:
        merchant_id = self._merchant_id()
        try:
            return self._call(
                self.gateway.wallets().get_wallet_by_type,
                merchant_id,
                normalize_currency(currency_code),
                WalletType.ESCROW,
                fallback="Failed to load escrow wallet",
            )
        except WorkflowError as exc:
            if exc.status_code == 403:
                raise WorkflowError(
                    message="The ledger service does not allow this merchant to resolve its own wallets.",
                    category=exc.category,
                    details=exc.details,
                    trace_id=exc.trace_id,
                    status_code=exc.status_code,
                ) from exc
            raise

    def list_merchants(self, page: int = 0, size: int = 20) -> Page[UserProfile]:
        return self._call(
            self.gateway.merchants().list_merchants,
            page=page,
            size=size,
            fallback="Failed to load merchants",
        )
