from __future__ import annotations

from typing import Any, Mapping

from ..models import Commission, CommissionRequest
from .base import BaseClient, _coerce_model, _expect_object


class CommissionClient(BaseClient):
    def get_commission(self, merchant_id: str) -> Commission:
        data = self._request("GET", f"/api/v1/merchants/{merchant_id}/commission", operation="get_commission")
        return Commission.model_validate(_expect_object(data, "commission"))

    def update_commission(self, merchant_id: str, payload: CommissionRequest | Mapping[str, Any]) -> Commission:
        request = _coerce_model(payload, CommissionRequest)
        data = self._request(
            "PUT",
            f"/api/v1/merchants/{merchant_id}/commission",
            json_body=request.to_payload(),
            operation="update_commission",
        )
        return Commission.model_validate(_expect_object(data, "commission"))
