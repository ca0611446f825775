from __future__ import annotations

from typing import Any, Mapping

from ..models import LoginRequest, SignupRequest, TokenResponse, UserProfile
from .base import BaseClient, _coerce_model, _expect_object


class AuthClient(BaseClient):
    def login(self, username: str, password: str) -> TokenResponse:
        payload = LoginRequest(username=username, password=password).to_payload()
        data = self._request("POST", "/auth/login", json_body=payload, operation="login")
        return TokenResponse.model_validate(_expect_object(data, "login"))

    def signup(self, payload: SignupRequest | Mapping[str, Any]) -> UserProfile:
        request = _coerce_model(payload, SignupRequest)
        data = self._request("POST", "/api/v1/users", json_body=request.to_payload(), operation="signup")
        return UserProfile.model_validate(_expect_object(data, "signup"))
