from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest
import responses
from responses import matchers

from ledgerx_sdk.idempotency import IDEMPOTENCY_HEADER
from ledgerx_sdk.models import EntriesQuery, PayoutRequest, WalletType

from conftest import LEDGER_URL, PAYOUT_URL


def _body(call) -> dict:
    return json.loads(call.request.body)


@responses.activate
def test_login_and_signup_shapes(gateway) -> None:
    responses.add(responses.POST, f"{LEDGER_URL}/auth/login", json={"accessToken": "tok"})
    responses.add(
        responses.POST,
        f"{LEDGER_URL}/api/v1/users",
        json={"id": "u1", "username": "shop", "roles": ["MERCHANT"], "merchantId": "m-9"},
        status=201,
    )

    token = gateway.auth().login("merchant1", "secret-pass")
    user = gateway.auth().signup({"username": "shop", "password": "password1"})

    assert token.access_token == "tok"
    assert _body(responses.calls[0]) == {"username": "merchant1", "password": "secret-pass"}
    assert _body(responses.calls[1]) == {
        "username": "shop",
        "password": "password1",
        "roles": ["MERCHANT"],
        "currencyCode": "INR",
    }
    assert user.merchant_id == "m-9"


@responses.activate
def test_wallet_by_type_params(gateway) -> None:
    responses.add(
        responses.GET,
        f"{LEDGER_URL}/api/v1/merchants/m-1/wallets/by-type",
        match=[matchers.query_param_matcher({"currencyCode": "INR", "walletType": "VENDOR", "vendorUserId": "v1"})],
        json={"id": "w9", "walletType": "VENDOR", "balance": 12.5},
    )

    wallet = gateway.wallets().get_wallet_by_type("m-1", "INR", WalletType.VENDOR, "v1")

    assert wallet.balance == Decimal("12.5")


@responses.activate
def test_entries_query_params(gateway) -> None:
    responses.add(
        responses.GET,
        f"{LEDGER_URL}/api/v1/entries",
        match=[
            matchers.query_param_matcher(
                {
                    "merchantId": "m-1",
                    "from": "2024-01-01T00:00:00Z",
                    "referenceType": "ORDER",
                    "page": "2",
                    "size": "20",
                    "sort": "createdAt,desc",
                }
            )
        ],
        json={"content": [{"id": "e1", "amount": 10, "type": "CREDIT"}], "totalElements": 41, "totalPages": 3, "number": 2},
    )

    query = EntriesQuery(
        merchant_id="m-1",
        from_=datetime(2024, 1, 1, tzinfo=timezone.utc),
        reference_type="ORDER",
        page=2,
    )
    page = gateway.entries().list_entries(query)

    assert page.total_elements == 41
    assert page.content[0].amount == Decimal("10")


@responses.activate
def test_payout_mutations_carry_scoped_keys(gateway) -> None:
    responses.add(responses.POST, f"{PAYOUT_URL}/api/v1/payouts/p1/confirm", json={"id": "p1", "status": "SETTLED"})
    responses.add(responses.POST, f"{PAYOUT_URL}/api/v1/payouts", json={"id": "p2", "status": "PROCESSING"})

    gateway.payouts().confirm("p1")
    gateway.payouts().create_payout(
        PayoutRequest(
            merchant_id="m-1",
            vendor_id="v1",
            vendor_wallet_id="w-v1",
            amount=Decimal("150.50"),
            currency_code="INR",
        )
    )

    assert responses.calls[0].request.headers[IDEMPOTENCY_HEADER].startswith("confirm-p1-")
    assert responses.calls[1].request.headers[IDEMPOTENCY_HEADER].startswith("payout-v1-")
    assert _body(responses.calls[1])["amount"] == 150.5


@responses.activate
def test_pending_orders_keep_amounts(gateway) -> None:
    responses.add(
        responses.GET,
        f"{PAYOUT_URL}/api/v1/payouts/pending-orders",
        match=[matchers.query_param_matcher({"merchantId": "m-1", "vendorId": "v1"})],
        json=[{"orderId": "o1", "amount": 250.75, "currencyCode": "INR"}],
    )

    orders = gateway.payouts().list_pending_orders("m-1", "v1")

    assert orders[0].order_id == "o1"
    assert orders[0].amount == Decimal("250.75")


@responses.activate
def test_webhooks_send_no_idempotency_key(gateway) -> None:
    responses.add(
        responses.POST,
        f"{PAYOUT_URL}/api/v1/mock/webhooks/payment-success",
        json={"event": "PAYMENT_SUCCESS", "message": "Escrow credited"},
    )

    response = gateway.webhooks().payment_success(
        {
            "merchantId": "m-1",
            "vendorId": "v1",
            "orderId": "o1",
            "amount": "99.99",
            "currencyCode": "INR",
            "escrowWalletId": "w-esc",
        }
    )

    assert response.message == "Escrow credited"
    assert IDEMPOTENCY_HEADER not in responses.calls[0].request.headers
    assert _body(responses.calls[0])["escrowWalletId"] == "w-esc"


@responses.activate
def test_bank_details_empty_and_saved(gateway) -> None:
    responses.add(responses.GET, f"{LEDGER_URL}/api/v1/users/me/bank-details", status=204)
    responses.add(
        responses.PUT,
        f"{LEDGER_URL}/api/v1/users/me/bank-details",
        json={"accountNumber": "1234", "beneficiaryName": "Vendor One"},
    )

    assert gateway.users().get_bank_details() is None
    saved = gateway.users().update_bank_details({"accountNumber": "1234", "beneficiaryName": "Vendor One"})

    assert saved.beneficiary_name == "Vendor One"
    assert _body(responses.calls[1]) == {"accountNumber": "1234", "beneficiaryName": "Vendor One"}


@responses.activate
def test_admin_stats_span_both_services(gateway) -> None:
    responses.add(responses.GET, f"{LEDGER_URL}/api/v1/admin/stats", json={"totalMerchants": 3, "frozenWallets": 1})
    responses.add(responses.GET, f"{PAYOUT_URL}/api/v1/payouts/stats", json={"processingCount": 2})

    admin = gateway.admin()

    assert admin.ledger_stats().total_merchants == 3
    assert admin.payout_stats().processing_count == 2


@responses.activate
def test_commission_update_body(gateway) -> None:
    responses.add(
        responses.PUT,
        f"{PAYOUT_URL}/api/v1/merchants/m-1/commission",
        json={"merchantId": "m-1", "commissionType": "PERCENTAGE", "percentageValue": 2.5},
    )

    commission = gateway.commission().update_commission("m-1", {"percentageValue": "2.5", "currencyCode": "INR"})

    assert commission.percentage_value == Decimal("2.5")
    assert _body(responses.calls[0]) == {"commissionType": "PERCENTAGE", "percentageValue": 2.5, "currencyCode": "INR"}


@responses.activate
def test_credit_and_transfer_shapes(gateway) -> None:
    responses.add(
        responses.POST,
        f"{LEDGER_URL}/api/v1/wallets/w-esc/credit",
        json={"id": "e1", "walletId": "w-esc", "type": "CREDIT", "amount": 100},
    )
    responses.add(
        responses.POST,
        f"{LEDGER_URL}/api/v1/transfers",
        json={"debitEntry": {"id": "d1"}, "creditEntries": [{"id": "c1"}, {"id": "c2"}], "idempotent": True},
    )

    entry = gateway.wallets().credit("w-esc", {"amount": "100", "currencyCode": "INR", "referenceId": "o1"})
    result = gateway.wallets().transfer(
        {
            "fromWalletId": "w-esc",
            "referenceId": "o1",
            "currencyCode": "INR",
            "totalAmount": "100",
            "creditLegs": [{"toWalletId": "w-main", "amount": "90"}, {"toWalletId": "w-v1", "amount": "10"}],
        }
    )

    assert entry.amount == Decimal("100")
    assert responses.calls[0].request.headers[IDEMPOTENCY_HEADER].startswith("credit-w-esc-")
    assert responses.calls[1].request.headers[IDEMPOTENCY_HEADER].startswith("transfer-o1-")
    assert _body(responses.calls[1])["creditLegs"] == [
        {"toWalletId": "w-main", "amount": 90.0},
        {"toWalletId": "w-v1", "amount": 10.0},
    ]
    assert result.idempotent
    assert [item.id for item in result.credit_entries] == ["c1", "c2"]


def _payout_request(amount: str) -> PayoutRequest:
    return PayoutRequest(
        merchant_id="m-1",
        vendor_id="v1",
        vendor_wallet_id="w-v1",
        amount=Decimal(amount),
        currency_code="INR",
    )


def test_amounts_keep_their_exact_digits_on_the_wire() -> None:
    assert '"amount":250.75' in _payout_request("250.75").model_dump_json(by_alias=True)
    assert '"amount":1000,' in _payout_request("1000.00").model_dump_json(by_alias=True)
    assert _payout_request("0.1").to_payload()["amount"] == 0.1


def test_amount_that_would_round_is_refused() -> None:
    with pytest.raises(ValueError, match="without rounding"):
        _payout_request("12345678901234.56789").to_payload()
