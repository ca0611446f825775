from __future__ import annotations

from typing import Any, Mapping

from ..models import CreditRequest, LedgerEntry, Settlement, TransferRequest, TransferResult, Wallet, WalletType
from .base import BaseClient, _coerce_model, _expect_object, _resolve_idempotency


class WalletsClient(BaseClient):
    def get_wallet(self, wallet_id: str, *, context_key: str | None = None) -> Wallet:
        data = self._request("GET", f"/api/v1/wallets/{wallet_id}", context_key=context_key, operation="get_wallet")
        return Wallet.model_validate(_expect_object(data, "wallet"))

    def get_wallet_by_type(
        self,
        merchant_id: str,
        currency_code: str,
        wallet_type: WalletType | str,
        vendor_user_id: str | None = None,
    ) -> Wallet:
        params = {
            "currencyCode": currency_code,
            "walletType": WalletType(wallet_type.upper()).value,
        }
        if vendor_user_id:
            params["vendorUserId"] = vendor_user_id
        data = self._request(
            "GET",
            f"/api/v1/merchants/{merchant_id}/wallets/by-type",
            params=params,
            operation="get_wallet_by_type",
        )
        return Wallet.model_validate(_expect_object(data, "wallet"))

    def get_settlement(self, merchant_id: str, currency_code: str = "INR") -> Settlement:
        data = self._request(
            "GET",
            f"/api/v1/merchants/{merchant_id}/settlement",
            params={"currencyCode": currency_code},
            operation="get_settlement",
        )
        return Settlement.model_validate(_expect_object(data, "settlement"))

    def credit(
        self,
        wallet_id: str,
        payload: CreditRequest | Mapping[str, Any],
        idempotency_key: str | None = None,
    ) -> LedgerEntry:
        request = _coerce_model(payload, CreditRequest)
        data = self._request(
            "POST",
            f"/api/v1/wallets/{wallet_id}/credit",
            json_body=request.to_payload(),
            idempotency_key=_resolve_idempotency(idempotency_key, "credit", wallet_id),
            operation="credit",
        )
        return LedgerEntry.model_validate(_expect_object(data, "credit"))

    def transfer(
        self,
        payload: TransferRequest | Mapping[str, Any],
        idempotency_key: str | None = None,
    ) -> TransferResult:
        request = _coerce_model(payload, TransferRequest)
        data = self._request(
            "POST",
            "/api/v1/transfers",
            json_body=request.to_payload(),
            idempotency_key=_resolve_idempotency(idempotency_key, "transfer", request.reference_id),
            operation="transfer",
        )
        return TransferResult.model_validate(_expect_object(data, "transfer"))

    def freeze(self, wallet_id: str) -> Wallet:
        data = self._request("POST", f"/api/v1/wallets/{wallet_id}/freeze", operation="freeze")
        return Wallet.model_validate(_expect_object(data, "freeze"))

    def unfreeze(self, wallet_id: str) -> Wallet:
        data = self._request("POST", f"/api/v1/wallets/{wallet_id}/unfreeze", operation="unfreeze")
        return Wallet.model_validate(_expect_object(data, "unfreeze"))
