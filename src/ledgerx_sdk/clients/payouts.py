from __future__ import annotations

from typing import Any, Mapping

from ..models import Page, Payout, PayoutRequest, PayoutRequestVendor, PendingOrder
from .base import BaseClient, _coerce_model, _expect_list, _expect_object, _resolve_idempotency


class PayoutsClient(BaseClient):
    def list_payouts(
        self,
        *,
        vendor_id: str | None = None,
        merchant_id: str | None = None,
        page: int = 0,
        size: int = 20,
        context_key: str | None = None,
        context_version: int | None = None,
    ) -> Page[Payout]:
        params = {key: value for key, value in {
            "vendorId": vendor_id,
            "merchantId": merchant_id,
            "page": page,
            "size": size,
        }.items() if value is not None}
        data = self._request(
            "GET",
            "/api/v1/payouts",
            params=params,
            context_key=context_key,
            context_version=context_version,
            operation="list_payouts",
        )
        return Page[Payout].model_validate(_expect_object(data, "payouts"))

    def list_pending_orders(
        self,
        merchant_id: str,
        vendor_id: str,
        *,
        context_key: str | None = None,
        context_version: int | None = None,
    ) -> list[PendingOrder]:
        data = self._request(
            "GET",
            "/api/v1/payouts/pending-orders",
            params={"merchantId": merchant_id, "vendorId": vendor_id},
            context_key=context_key,
            context_version=context_version,
            operation="list_pending_orders",
        )
        return [PendingOrder.model_validate(item) for item in _expect_list(data, "pending orders")]

    def get_payout(self, payout_id: str) -> Payout:
        data = self._request("GET", f"/api/v1/payouts/{payout_id}", operation="get_payout")
        return Payout.model_validate(_expect_object(data, "payout"))

    def create_payout(self, payload: PayoutRequest | Mapping[str, Any], idempotency_key: str | None = None) -> Payout:
        request = _coerce_model(payload, PayoutRequest)
        data = self._request(
            "POST",
            "/api/v1/payouts",
            json_body=request.to_payload(),
            idempotency_key=_resolve_idempotency(idempotency_key, "payout", request.vendor_id),
            operation="create_payout",
        )
        return Payout.model_validate(_expect_object(data, "payout"))

    def request_payout(
        self,
        payload: PayoutRequestVendor | Mapping[str, Any],
        idempotency_key: str | None = None,
    ) -> Payout:
        request = _coerce_model(payload, PayoutRequestVendor)
        data = self._request(
            "POST",
            "/api/v1/payouts/request",
            json_body=request.to_payload(),
            idempotency_key=_resolve_idempotency(idempotency_key, "payout-request"),
            operation="request_payout",
        )
        return Payout.model_validate(_expect_object(data, "payout"))

    def confirm(self, payout_id: str, idempotency_key: str | None = None) -> Payout:
        data = self._request(
            "POST",
            f"/api/v1/payouts/{payout_id}/confirm",
            idempotency_key=_resolve_idempotency(idempotency_key, "confirm", payout_id),
            operation="confirm_payout",
        )
        return Payout.model_validate(_expect_object(data, "payout"))

    def reverse(self, payout_id: str, idempotency_key: str | None = None) -> Payout:
        data = self._request(
            "POST",
            f"/api/v1/payouts/{payout_id}/reverse",
            idempotency_key=_resolve_idempotency(idempotency_key, "reverse", payout_id),
            operation="reverse_payout",
        )
        return Payout.model_validate(_expect_object(data, "payout"))
