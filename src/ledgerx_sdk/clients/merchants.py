from __future__ import annotations

from typing import Any, Mapping

from ..models import AddVendorRequest, Page, UserProfile, VendorSummary
from .base import BaseClient, _coerce_model, _expect_list, _expect_object


class MerchantsClient(BaseClient):
    def list_merchants(self, page: int = 0, size: int = 20) -> Page[UserProfile]:
        data = self._request(
            "GET",
            "/api/v1/merchants",
            params={"page": page, "size": size},
            operation="list_merchants",
        )
        return Page[UserProfile].model_validate(_expect_object(data, "merchants"))

    def list_vendors(self, merchant_id: str) -> list[VendorSummary]:
        data = self._request("GET", f"/api/v1/merchants/{merchant_id}/vendors", operation="list_vendors")
        return [VendorSummary.model_validate(item) for item in _expect_list(data, "vendors")]

    def add_vendor(self, merchant_id: str, payload: AddVendorRequest | Mapping[str, Any]) -> UserProfile:
        request = _coerce_model(payload, AddVendorRequest)
        data = self._request(
            "POST",
            f"/api/v1/merchants/{merchant_id}/vendors",
            json_body=request.to_payload(),
            operation="add_vendor",
        )
        return UserProfile.model_validate(_expect_object(data, "vendor"))
