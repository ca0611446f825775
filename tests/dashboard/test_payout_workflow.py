from __future__ import annotations

import json

import pytest
import responses
from responses import matchers

from ledgerx_dashboard.services import PayoutWorkflow, PreconditionError, WorkflowError, available_actions
from ledgerx_sdk import Payout
from ledgerx_sdk.idempotency import IDEMPOTENCY_HEADER

from conftest import LEDGER_URL, PAYOUT_URL

PAYOUTS_URL = f"{PAYOUT_URL}/api/v1/payouts"


def _page(*payouts: dict) -> dict:
    return {"content": list(payouts), "totalElements": len(payouts), "totalPages": 1}


@pytest.mark.parametrize(
    ("status", "actions"),
    [
        ("CREATED", ()),
        ("PROCESSING", ("confirm", "reverse")),
        ("SETTLED", ()),
        ("FAILED", ()),
        (None, ()),
    ],
)
def test_only_processing_payouts_offer_actions(status, actions) -> None:
    assert available_actions(Payout(id="p1", status=status)) == actions


@responses.activate
def test_merchant_load_defaults_to_own_merchant(gateway, merchant_session) -> None:
    responses.add(
        responses.GET,
        PAYOUTS_URL,
        match=[matchers.query_param_matcher({"merchantId": "m-1", "page": "0", "size": "100"})],
        json=_page({"id": "p1", "status": "PROCESSING", "amount": 100}),
    )

    state = PayoutWorkflow(gateway, merchant_session).load()

    assert [payout.id for payout in state.payouts] == ["p1"]
    assert state.total_elements == 1


@responses.activate
def test_admin_load_without_filters(gateway, admin_session) -> None:
    responses.add(
        responses.GET,
        PAYOUTS_URL,
        match=[matchers.query_param_matcher({"page": "0", "size": "100"})],
        json=_page(),
    )

    state = PayoutWorkflow(gateway, admin_session).load()

    assert state.payouts == []
    assert state.error is None


@responses.activate
def test_confirm_sends_scoped_key_and_reloads(gateway, merchant_session) -> None:
    responses.add(responses.GET, PAYOUTS_URL, json=_page({"id": "p1", "status": "PROCESSING"}))
    responses.add(responses.POST, f"{PAYOUTS_URL}/p1/confirm", json={"id": "p1", "status": "SETTLED"})
    responses.add(responses.GET, PAYOUTS_URL, json=_page({"id": "p1", "status": "SETTLED"}))
    workflow = PayoutWorkflow(gateway, merchant_session)
    workflow.load()

    state = workflow.confirm("p1")

    confirm_call = responses.calls[1]
    assert confirm_call.request.headers[IDEMPOTENCY_HEADER].startswith("confirm-p1-")
    assert state.payouts[0].status == "SETTLED"
    assert workflow.available_actions(state.payouts[0]) == ()
    assert len(responses.calls) == 3


@responses.activate
def test_actions_refused_for_non_processing(gateway, merchant_session) -> None:
    responses.add(responses.GET, PAYOUTS_URL, json=_page({"id": "p1", "status": "SETTLED"}))
    workflow = PayoutWorkflow(gateway, merchant_session)
    workflow.load()

    with pytest.raises(PreconditionError, match="PROCESSING"):
        workflow.reverse("p1")
    with pytest.raises(PreconditionError, match="not found"):
        workflow.confirm("p404")
    assert len(responses.calls) == 1


@responses.activate
def test_reverse_conflict_is_reported(gateway, merchant_session) -> None:
    responses.add(responses.GET, PAYOUTS_URL, json=_page({"id": "p1", "status": "PROCESSING"}))
    responses.add(responses.POST, f"{PAYOUTS_URL}/p1/reverse", json={"message": "duplicate"}, status=409)
    workflow = PayoutWorkflow(gateway, merchant_session)
    workflow.load()

    with pytest.raises(WorkflowError) as excinfo:
        workflow.reverse("p1")

    assert excinfo.value.message == "Duplicate request (idempotency). Please do not retry."
    assert not workflow.attempts.in_flight("reverse_payout:p1")


@responses.activate
def test_vendor_requests_and_lists_own_payouts(gateway, vendor_session) -> None:
    responses.add(responses.POST, f"{PAYOUTS_URL}/request", json={"id": "p7", "status": "PROCESSING"})
    responses.add(responses.GET, f"{LEDGER_URL}/api/v1/users/me", json={"id": "v-1", "username": "vendor1"})
    responses.add(
        responses.GET,
        PAYOUTS_URL,
        match=[matchers.query_param_matcher({"vendorId": "v-1", "page": "0", "size": "50"})],
        json=_page({"id": "p7", "status": "PROCESSING"}),
    )
    workflow = PayoutWorkflow(gateway, vendor_session)

    payout = workflow.request_payout("75.25", "inr")
    state = workflow.load_own_payouts()

    assert payout.id == "p7"
    assert json.loads(responses.calls[0].request.body) == {"amount": 75.25, "currencyCode": "INR"}
    assert responses.calls[0].request.headers[IDEMPOTENCY_HEADER].startswith("payout-")
    assert [item.id for item in state.payouts] == ["p7"]


def test_request_payout_validates_amount(gateway, vendor_session) -> None:
    with pytest.raises(PreconditionError, match="at least 0.01"):
        PayoutWorkflow(gateway, vendor_session).request_payout("0")


@responses.activate
def test_load_failure_clears_list(gateway, merchant_session) -> None:
    responses.add(responses.GET, PAYOUTS_URL, json={"message": "Merchant mismatch"}, status=403)

    state = PayoutWorkflow(gateway, merchant_session).load()

    assert state.payouts == []
    assert state.error == "Merchant mismatch"


@responses.activate
def test_admin_creates_payout_and_reloads(gateway, admin_session) -> None:
    responses.add(responses.GET, PAYOUTS_URL, json=_page())
    responses.add(responses.POST, PAYOUTS_URL, json={"id": "p9", "status": "PROCESSING"})
    responses.add(responses.GET, PAYOUTS_URL, json=_page({"id": "p9", "status": "PROCESSING"}))
    workflow = PayoutWorkflow(gateway, admin_session)
    workflow.load()

    payout = workflow.create_payout("m-1", "v1", "w-v1", "120", "INR")

    assert payout.id == "p9"
    assert responses.calls[1].request.headers[IDEMPOTENCY_HEADER].startswith("payout-v1-")
    assert json.loads(responses.calls[1].request.body) == {
        "merchantId": "m-1",
        "vendorId": "v1",
        "vendorWalletId": "w-v1",
        "amount": 120.0,
        "currencyCode": "INR",
    }
    assert [item.id for item in workflow.state.payouts] == ["p9"]


def test_create_payout_requires_vendor_wallet(gateway, admin_session) -> None:
    with pytest.raises(PreconditionError, match="vendor wallet"):
        PayoutWorkflow(gateway, admin_session).create_payout("m-1", "v1", None, "10")
