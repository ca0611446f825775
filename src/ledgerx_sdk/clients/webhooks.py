from __future__ import annotations

from typing import Any, Mapping

from ..models import OrderCompleteRequest, PaymentSuccessRequest, WebhookResponse
from .base import BaseClient, _coerce_model, _expect_object


class WebhooksClient(BaseClient):
    """Simulated payment-provider callbacks.

    The backend deduplicates by ``(merchantId, vendorId, orderId)``, so these
    calls carry no idempotency key.
    """

    def payment_success(self, payload: PaymentSuccessRequest | Mapping[str, Any]) -> WebhookResponse:
        request = _coerce_model(payload, PaymentSuccessRequest)
        data = self._request(
            "POST",
            "/api/v1/mock/webhooks/payment-success",
            json_body=request.to_payload(),
            operation="payment_success",
        )
        return WebhookResponse.model_validate(_expect_object(data, "payment success"))

    def order_complete(self, payload: OrderCompleteRequest | Mapping[str, Any]) -> WebhookResponse:
        request = _coerce_model(payload, OrderCompleteRequest)
        data = self._request(
            "POST",
            "/api/v1/mock/webhooks/order-complete",
            json_body=request.to_payload(),
            operation="order_complete",
        )
        return WebhookResponse.model_validate(_expect_object(data, "order complete"))
