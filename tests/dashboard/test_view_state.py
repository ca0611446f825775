from __future__ import annotations

from ledgerx_dashboard.services import DashboardSnapshot, EntriesView, PayoutListState
from ledgerx_dashboard.ui.view_state import ViewStateStatus, resolve_state, state_for


def test_resolve_state_precedence() -> None:
    assert resolve_state(can_view=False, is_loading=True, error="x", has_data=True).status is ViewStateStatus.NO_PERMISSION
    assert resolve_state(can_view=True, is_loading=True, error=None, has_data=False).status is ViewStateStatus.LOADING
    assert resolve_state(can_view=True, is_loading=False, error="x", has_data=True).status is ViewStateStatus.PARTIAL_ERROR
    assert resolve_state(can_view=True, is_loading=False, error="x", has_data=False).status is ViewStateStatus.FATAL_ERROR
    assert resolve_state(can_view=True, is_loading=False, error=None, has_data=False).status is ViewStateStatus.EMPTY
    assert resolve_state(can_view=True, is_loading=False, error=None, has_data=True).status is ViewStateStatus.SUCCESS


def test_state_for_partial_dashboard() -> None:
    snapshot = DashboardSnapshot(sections={"merchants": []}, error="Server error.", trace_id="t-1")
    state = state_for(snapshot)
    assert state.status is ViewStateStatus.FATAL_ERROR

    snapshot.sections["payout_stats"] = {"processing": 1}
    state = state_for(snapshot)
    assert state.status is ViewStateStatus.PARTIAL_ERROR
    assert state.render()["trace_id"] == "t-1"


def test_state_for_empty_views() -> None:
    assert state_for(PayoutListState()).status is ViewStateStatus.EMPTY
    view = EntriesView(message="No vendor wallet found for your account.")
    state = state_for(view)
    assert state.status is ViewStateStatus.EMPTY
    assert state.message == "No vendor wallet found for your account."
    assert state_for([]).status is ViewStateStatus.EMPTY
    assert state_for(None, can_view=False).status is ViewStateStatus.NO_PERMISSION
