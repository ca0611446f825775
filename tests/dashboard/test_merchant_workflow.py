from __future__ import annotations

import json
from decimal import Decimal

import pytest
import responses

from ledgerx_dashboard.services import MerchantWorkflow, PreconditionError, SignupWorkflow, VendorProfileWorkflow, WorkflowError

from conftest import LEDGER_URL, PAYOUT_URL

COMMISSION_URL = f"{PAYOUT_URL}/api/v1/merchants/m-1/commission"


@responses.activate
def test_add_vendor(gateway, merchant_session) -> None:
    responses.add(
        responses.POST,
        f"{LEDGER_URL}/api/v1/merchants/m-1/vendors",
        json={"id": "v-9", "username": "vendor9", "roles": ["VENDOR"]},
    )

    vendor = MerchantWorkflow(gateway, merchant_session).add_vendor(" vendor9 ", "password9")

    assert vendor.id == "v-9"
    assert json.loads(responses.calls[0].request.body) == {
        "username": "vendor9",
        "password": "password9",
        "currencyCode": "INR",
    }


@pytest.mark.parametrize(
    ("username", "password", "message"),
    [("v", "password9", "at least 2"), ("vendor9", "short", "at least 8")],
)
def test_add_vendor_preconditions(gateway, merchant_session, username, password, message) -> None:
    with pytest.raises(PreconditionError, match=message):
        MerchantWorkflow(gateway, merchant_session).add_vendor(username, password)


@responses.activate
def test_missing_commission_is_none(gateway, merchant_session) -> None:
    responses.add(responses.GET, COMMISSION_URL, json={"message": "No commission"}, status=404)

    assert MerchantWorkflow(gateway, merchant_session).load_commission() is None


@responses.activate
def test_update_commission(gateway, merchant_session) -> None:
    responses.add(responses.PUT, COMMISSION_URL, json={"commissionType": "PERCENTAGE", "percentageValue": 2.5})

    commission = MerchantWorkflow(gateway, merchant_session).update_commission("2.5")

    assert commission.percentage_value == Decimal("2.5")
    assert json.loads(responses.calls[0].request.body) == {
        "commissionType": "PERCENTAGE",
        "percentageValue": 2.5,
        "currencyCode": "INR",
    }


@pytest.mark.parametrize("rate", ["-1", "100.5", "abc"])
def test_update_commission_rejects_rate(gateway, merchant_session, rate) -> None:
    with pytest.raises(PreconditionError, match="Enter a valid rate 0-100"):
        MerchantWorkflow(gateway, merchant_session).update_commission(rate)


@responses.activate
def test_order_settlement_tolerates_missing_commission(gateway, merchant_session) -> None:
    responses.add(
        responses.GET,
        f"{LEDGER_URL}/api/v1/merchants/m-1/settlement",
        json={"merchantId": "m-1", "totalConfirmedEscrowCredits": 300, "reconciled": False},
    )
    responses.add(responses.GET, COMMISSION_URL, status=500)

    result = MerchantWorkflow(gateway, merchant_session).order_settlement()

    assert result.settlement.total_confirmed_escrow_credits == Decimal("300")
    assert result.commission is None


@responses.activate
def test_order_settlement_failure_raises(gateway, merchant_session) -> None:
    responses.add(responses.GET, f"{LEDGER_URL}/api/v1/merchants/m-1/settlement", status=500)
    responses.add(responses.GET, COMMISSION_URL, json={"percentageValue": 1})

    with pytest.raises(WorkflowError, match="Server error"):
        MerchantWorkflow(gateway, merchant_session).order_settlement()


@responses.activate
def test_bank_details(gateway, vendor_session) -> None:
    responses.add(responses.GET, f"{LEDGER_URL}/api/v1/users/me/bank-details", status=404)
    responses.add(
        responses.PUT,
        f"{LEDGER_URL}/api/v1/users/me/bank-details",
        json={"accountNumber": "001", "beneficiaryName": "Vendor One", "ifscCode": "HDFC0001"},
    )
    workflow = VendorProfileWorkflow(gateway, vendor_session)

    assert workflow.load_bank_details() is None
    saved = workflow.save_bank_details("001", "Vendor One", " HDFC0001 ")

    assert saved.ifsc_code == "HDFC0001"
    with pytest.raises(PreconditionError, match="Account number and beneficiary name required"):
        workflow.save_bank_details("", "Vendor One")


@responses.activate
def test_signup_forbidden_message(gateway) -> None:
    responses.add(responses.POST, f"{LEDGER_URL}/api/v1/users", json={"message": "Forbidden"}, status=403)

    with pytest.raises(WorkflowError, match="Only an admin can create accounts"):
        SignupWorkflow(gateway).register_merchant("shop", "password1")


def test_signup_preconditions(gateway) -> None:
    with pytest.raises(PreconditionError, match="at least 8"):
        SignupWorkflow(gateway).register_merchant("shop", "short")


@responses.activate
def test_escrow_balance_forbidden_message(gateway, merchant_session) -> None:
    responses.add(responses.GET, f"{LEDGER_URL}/api/v1/merchants/m-1/wallets/by-type", status=403)

    with pytest.raises(WorkflowError, match="does not allow this merchant"):
        MerchantWorkflow(gateway, merchant_session).escrow_balance()


@responses.activate
def test_list_merchants_page(gateway, admin_session) -> None:
    responses.add(
        responses.GET,
        f"{LEDGER_URL}/api/v1/merchants",
        json={"content": [{"id": "u-1", "username": "merchant1"}], "totalElements": 1, "totalPages": 1},
    )

    page = MerchantWorkflow(gateway, admin_session).list_merchants()

    assert page.total_elements == 1
    assert page.content[0].username == "merchant1"
