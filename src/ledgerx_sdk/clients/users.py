from __future__ import annotations

from typing import Any, Mapping

from ..models import BankDetails, BankDetailsRequest, UserProfile
from .base import BaseClient, _coerce_model, _expect_object


class UsersClient(BaseClient):
    def me(self, *, context_key: str | None = None) -> UserProfile:
        data = self._request("GET", "/api/v1/users/me", context_key=context_key, operation="me")
        return UserProfile.model_validate(_expect_object(data, "profile"))

    def get_bank_details(self) -> BankDetails | None:
        # 204 No Content means nothing saved yet
        data = self._request("GET", "/api/v1/users/me/bank-details", operation="get_bank_details")
        if not data:
            return None
        return BankDetails.model_validate(_expect_object(data, "bank details"))

    def update_bank_details(self, payload: BankDetailsRequest | Mapping[str, Any]) -> BankDetails:
        request = _coerce_model(payload, BankDetailsRequest)
        data = self._request(
            "PUT",
            "/api/v1/users/me/bank-details",
            json_body=request.to_payload(),
            operation="update_bank_details",
        )
        return BankDetails.model_validate(_expect_object(data, "bank details"))
