from __future__ import annotations

import pytest

from ledgerx_dashboard.app.navigation import (
    ACCESS_DENIED_PATH,
    ENTRY_POINTS,
    LOGIN_PATH,
    RouteOutcome,
    entry_point,
    entry_points_for,
    landing_for,
    resolve,
)
from ledgerx_sdk import Identity


def _identity(*roles: str) -> Identity:
    return Identity(subject="user", roles=frozenset(roles), merchant_affiliation="m-1")


def test_every_entry_point_has_unique_key_and_path() -> None:
    assert len({entry.key for entry in ENTRY_POINTS}) == len(ENTRY_POINTS)
    assert len({entry.path for entry in ENTRY_POINTS}) == len(ENTRY_POINTS)


@pytest.mark.parametrize(
    ("roles", "path"),
    [
        (("ADMIN",), "/admin"),
        (("MERCHANT",), "/merchant"),
        (("VENDOR",), "/vendor"),
        (("VENDOR", "MERCHANT", "ADMIN"), "/admin"),
        (("VENDOR", "MERCHANT"), "/merchant"),
    ],
)
def test_landing_by_role_priority(roles, path) -> None:
    decision = landing_for(_identity(*roles))
    assert decision.allowed
    assert decision.path == path


def test_landing_without_roles_is_access_denied() -> None:
    decision = landing_for(_identity())
    assert decision.outcome is RouteOutcome.ACCESS_DENIED
    assert decision.path == ACCESS_DENIED_PATH


def test_landing_without_identity_requires_login() -> None:
    assert landing_for(None).path == LOGIN_PATH


def test_resolve_outcomes() -> None:
    merchant = _identity("MERCHANT")
    assert resolve(merchant, "merchant.order_complete").allowed
    assert resolve(merchant, "admin.freeze").outcome is RouteOutcome.ACCESS_DENIED
    assert resolve(None, "merchant.home").outcome is RouteOutcome.LOGIN_REQUIRED
    assert resolve(merchant, "nowhere").outcome is RouteOutcome.UNKNOWN


def test_entry_points_for_identity() -> None:
    keys = {entry.key for entry in entry_points_for(_identity("VENDOR"))}
    assert keys == {"vendor.home", "vendor.transactions", "vendor.payout", "vendor.payout_status", "vendor.bank"}
    assert entry_points_for(None) == []
    assert entry_point("admin.home").label == "Dashboard"
