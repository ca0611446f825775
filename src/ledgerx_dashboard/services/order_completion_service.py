"""Merchant order lifecycle: record payment success, then split escrow.

The split depends on two reads made in order: the merchant profile and
vendor list first, then the pending orders of the chosen vendor. Changing
the vendor invalidates whatever pending-orders read is still in flight for
the previous one; its response is dropped when it lands.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from decimal import Decimal

from ledgerx_sdk import ApiError, PendingOrder, StaleResponseError, UserProfile, VendorSummary
from ledgerx_sdk.models import OrderCompleteRequest, PaymentSuccessRequest

from .base import (
    PreconditionError,
    WorkflowService,
    first_error,
    normalize_currency,
    normalize_error,
    parse_amount,
    settle_all,
)

logger = logging.getLogger(__name__)

PENDING_ORDERS_CONTEXT = "order_completion.vendor"
MIN_PAYMENT_AMOUNT = Decimal("0.01")


@dataclass
class OrderCompletionContext:
    profile: UserProfile | None = None
    vendors: list[VendorSummary] = field(default_factory=list)
    selected_vendor_id: str | None = None
    pending_orders: list[PendingOrder] = field(default_factory=list)
    selected_order: PendingOrder | None = None
    loading_pending: bool = False
    error: str | None = None
    message: str | None = None

    def vendor(self, vendor_id: str | None) -> VendorSummary | None:
        return next((vendor for vendor in self.vendors if vendor.user_id == vendor_id), None)


class OrderCompletionWorkflow(WorkflowService):
    module = "order_completion"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.context = OrderCompletionContext()
        self._lock = threading.Lock()

    def load(self) -> OrderCompletionContext:
        merchant_id = self._merchant_id()
        self.reset_selection()
        users = self.gateway.users()
        merchants = self.gateway.merchants()
        outcomes = settle_all(
            {
                "profile": users.me,
                "vendors": lambda: merchants.list_vendors(merchant_id),
            }
        )
        with self._lock:
            self.context.profile = outcomes["profile"].value if outcomes["profile"].ok else None
            self.context.vendors = list(outcomes["vendors"].value or []) if outcomes["vendors"].ok else []
            error = first_error(outcomes)
            self.context.error = error.message if error else None
        return self.context

    def reset_selection(self) -> None:
        with self._lock:
            self.gateway.payout.switch_context(PENDING_ORDERS_CONTEXT)
            self.context.selected_vendor_id = None
            self.context.pending_orders = []
            self.context.selected_order = None
            self.context.loading_pending = False

    def select_vendor(self, vendor_id: str | None) -> OrderCompletionContext:
        with self._lock:
            # Cleared before the next read is issued.
            version = self.gateway.payout.switch_context(PENDING_ORDERS_CONTEXT)
            self.context.selected_vendor_id = vendor_id or None
            self.context.pending_orders = []
            self.context.selected_order = None
            self.context.error = None
            self.context.message = None
        if not vendor_id:
            return self.context
        return self.load_pending_orders(version)

    def load_pending_orders(self, version: int | None = None) -> OrderCompletionContext:
        merchant_id = self._merchant_id()
        with self._lock:
            vendor_id = self.context.selected_vendor_id
            if not vendor_id:
                raise PreconditionError("Please select a vendor.")
            if version is None:
                version = self.gateway.payout.get_context_version(PENDING_ORDERS_CONTEXT)
            self.context.loading_pending = True
        try:
            orders = self.gateway.payouts().list_pending_orders(
                merchant_id,
                vendor_id,
                context_key=PENDING_ORDERS_CONTEXT,
                context_version=version,
            )
        except StaleResponseError:
            logger.info("pending_orders_discarded", extra={"vendor_id": vendor_id})
            return self.context
        except (ApiError, ValueError) as exc:
            error = normalize_error(exc, "Failed to load pending orders")
            with self._lock:
                if self._is_current(version):
                    self.context.pending_orders = []
                    self.context.error = error.message
                    self.context.loading_pending = False
            return self.context
        with self._lock:
            if not self._is_current(version):
                logger.info("pending_orders_discarded", extra={"vendor_id": vendor_id})
                return self.context
            self.context.pending_orders = orders
            self.context.loading_pending = False
        return self.context

    def select_order(self, order_id: str | None) -> PendingOrder:
        with self._lock:
            order = next((item for item in self.context.pending_orders if item.order_id == order_id), None)
            if order is None:
                self.context.selected_order = None
                raise PreconditionError("Please select an order to complete.")
            self.context.selected_order = order
            return order

    def record_payment_success(
        self,
        vendor_id: str | None,
        order_id: str | None,
        amount: object,
        currency_code: str | None = "INR",
    ) -> str:
        merchant_id = self._merchant_id()
        profile = self.context.profile
        if profile is None or not profile.escrow_wallet_id:
            raise PreconditionError("Escrow wallet not found. Refresh the page.")
        if not vendor_id:
            raise PreconditionError("Please select a vendor.")
        if not order_id or not order_id.strip():
            raise PreconditionError("Order ID is required.")
        value = parse_amount(amount, MIN_PAYMENT_AMOUNT, "Amount must be at least 0.01")
        request = PaymentSuccessRequest(
            merchant_id=merchant_id,
            vendor_id=vendor_id,
            order_id=order_id.strip(),
            amount=value,
            currency_code=normalize_currency(currency_code),
            escrow_wallet_id=profile.escrow_wallet_id,
        )
        response = self._guarded(
            "payment_success",
            f"payment_success:{vendor_id}:{request.order_id}",
            lambda: self.gateway.webhooks().payment_success(request),
            fallback="Failed to record payment",
        )
        self.context.message = response.message or "Escrow credited."
        return self.context.message

    def complete_selected_order(self) -> str:
        merchant_id = self._merchant_id()
        with self._lock:
            profile = self.context.profile
            vendor = self.context.vendor(self.context.selected_vendor_id)
            order = self.context.selected_order
        if profile is None or not profile.escrow_wallet_id or not profile.main_wallet_id:
            raise PreconditionError("Wallet IDs not found. Refresh the page.")
        if vendor is None:
            raise PreconditionError("Please select a vendor.")
        if not vendor.vendor_wallet_id:
            raise PreconditionError("Vendor wallet not found for the selected vendor.")
        if order is None:
            raise PreconditionError("Please select an order to complete.")
        request = OrderCompleteRequest(
            merchant_id=merchant_id,
            order_id=order.order_id,
            amount=order.amount,
            currency_code=order.currency_code or "INR",
            vendor_id=vendor.user_id,
            escrow_wallet_id=profile.escrow_wallet_id,
            main_wallet_id=profile.main_wallet_id,
            vendor_wallet_id=vendor.vendor_wallet_id,
        )
        response = self._guarded(
            "order_complete",
            f"order_complete:{order.order_id}",
            lambda: self.gateway.webhooks().order_complete(request),
            fallback="Failed to complete order",
        )
        with self._lock:
            self.context.pending_orders = [
                item for item in self.context.pending_orders if item.order_id != order.order_id
            ]
            if self.context.selected_order is not None and self.context.selected_order.order_id == order.order_id:
                self.context.selected_order = None
            self.context.message = response.message or "Order distributed."
            return self.context.message

    def _is_current(self, version: int) -> bool:
        return self.gateway.payout.get_context_version(PENDING_ORDERS_CONTEXT) == version

