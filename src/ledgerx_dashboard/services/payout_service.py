from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from ledgerx_sdk import Payout, PayoutStatus, Role, StaleResponseError
from ledgerx_sdk.models import PayoutRequest, PayoutRequestVendor

from .base import PreconditionError, WorkflowError, WorkflowService, normalize_currency, parse_amount

logger = logging.getLogger(__name__)

PAYOUT_LIST_CONTEXT = "payouts.list"
CONFIRM = "confirm"
REVERSE = "reverse"
MIN_PAYOUT_AMOUNT = Decimal("0.01")


def available_actions(payout: Payout) -> tuple[str, ...]:
    """Actions offered for a payout row.

    Only ``PROCESSING`` payouts can be confirmed or reversed; the backend
    still enforces its own transitions.
    """
    if payout.status == PayoutStatus.PROCESSING.value:
        return (CONFIRM, REVERSE)
    return ()


@dataclass
class PayoutListState:
    payouts: list[Payout] = field(default_factory=list)
    total_elements: int = 0
    error: str | None = None
    message: str | None = None
    filters: dict[str, Any] = field(default_factory=dict)

    def find(self, payout_id: str) -> Payout | None:
        return next((payout for payout in self.payouts if payout.id == payout_id), None)


class PayoutWorkflow(WorkflowService):
    module = "payouts"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.state = PayoutListState()

    def available_actions(self, payout: Payout) -> tuple[str, ...]:
        return available_actions(payout)

    def load(
        self,
        vendor_id: str | None = None,
        merchant_id: str | None = None,
        size: int = 100,
    ) -> PayoutListState:
        identity = self._identity()
        if not vendor_id and not merchant_id and not identity.has_role(Role.ADMIN.value):
            merchant_id = self._merchant_id()
        filters = {"vendor_id": vendor_id, "merchant_id": merchant_id, "size": size}
        self.state.filters = filters
        version = self.gateway.payout.switch_context(PAYOUT_LIST_CONTEXT)
        try:
            page = self._call(
                self.gateway.payouts().list_payouts,
                context_key=PAYOUT_LIST_CONTEXT,
                context_version=version,
                fallback="Failed to load payouts",
                **filters,
            )
        except StaleResponseError:
            logger.info("payouts_discarded", extra=filters)
            return self.state
        except WorkflowError as exc:
            self.state.payouts = []
            self.state.total_elements = 0
            self.state.error = exc.message
            return self.state
        self.state.payouts = list(page.content)
        self.state.total_elements = page.total_elements
        self.state.error = None
        return self.state

    def reload(self) -> PayoutListState:
        return self.load(**self.state.filters)

    def load_own_payouts(self, size: int = 50) -> PayoutListState:
        """Vendor view: payouts addressed to the signed-in vendor."""
        try:
            profile = self._call(self.gateway.users().me, fallback="Failed to load payouts")
        except WorkflowError as exc:
            self.state.payouts = []
            self.state.error = exc.message
            return self.state
        return self.load(vendor_id=profile.id, size=size)

    def confirm(self, payout_id: str) -> PayoutListState:
        return self._transition(CONFIRM, payout_id, "Failed to mark as completed")

    def reverse(self, payout_id: str) -> PayoutListState:
        return self._transition(REVERSE, payout_id, "Failed to mark as failed")

    def request_payout(self, amount: object, currency_code: str | None = "INR") -> Payout:
        self._identity()
        value = parse_amount(amount, MIN_PAYOUT_AMOUNT, "Amount must be at least 0.01")
        request = PayoutRequestVendor(amount=value, currency_code=normalize_currency(currency_code))
        payout = self._mutate(
            "request_payout",
            lambda key: self.gateway.payouts().request_payout(request, idempotency_key=key),
            scope_hint="payout",
            attempt_key=f"request_payout:{request.amount}:{request.currency_code}",
            fallback="Failed to create payout",
        )
        self.state.message = "Payout requested."
        return payout

    def create_payout(
        self,
        merchant_id: str | None,
        vendor_id: str | None,
        vendor_wallet_id: str | None,
        amount: object,
        currency_code: str | None = "INR",
    ) -> Payout:
        if not merchant_id or not vendor_id or not vendor_wallet_id:
            raise PreconditionError("Merchant, vendor and vendor wallet are required.")
        value = parse_amount(amount, MIN_PAYOUT_AMOUNT, "Amount must be at least 0.01")
        request = PayoutRequest(
            merchant_id=merchant_id,
            vendor_id=vendor_id,
            vendor_wallet_id=vendor_wallet_id,
            amount=value,
            currency_code=normalize_currency(currency_code),
        )
        payout = self._mutate(
            "create_payout",
            lambda key: self.gateway.payouts().create_payout(request, idempotency_key=key),
            scope_hint="payout",
            target_id=vendor_id,
            attempt_key=f"create_payout:{vendor_wallet_id}:{request.amount}:{request.currency_code}",
            fallback="Failed to create payout",
        )
        if self.state.filters:
            self.reload()
        return payout

    def _transition(self, action: str, payout_id: str, fallback: str) -> PayoutListState:
        payout = self.state.find(payout_id)
        if payout is None:
            raise PreconditionError("Payout not found. Refresh the list.")
        if action not in available_actions(payout):
            raise PreconditionError(f"Only PROCESSING payouts can be {'confirmed' if action == CONFIRM else 'reversed'}.")
        client = self.gateway.payouts()
        call = client.confirm if action == CONFIRM else client.reverse
        self._mutate(
            f"{action}_payout",
            lambda key: call(payout_id, idempotency_key=key),
            scope_hint=action,
            target_id=payout_id,
            fallback=fallback,
        )
        # Resulting balances come from the backend, so the whole list is read again.
        return self.reload()
