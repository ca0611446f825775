"""Static role to entry-point table and the access check over it.

The identity used here is decoded client-side and never verified, so a
decision from this module only chooses what to show. Both backends authorize
every call on their own.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ledgerx_sdk import Identity, Role

LOGIN_PATH = "/login"
SIGNUP_PATH = "/signup"
ACCESS_DENIED_PATH = "/unauthorized"

ROLE_PRIORITY: tuple[Role, ...] = (Role.ADMIN, Role.MERCHANT, Role.VENDOR)


class RouteOutcome(str, Enum):
    ALLOWED = "allowed"
    LOGIN_REQUIRED = "login_required"
    ACCESS_DENIED = "access_denied"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class EntryPoint:
    key: str
    label: str
    role: Role
    path: str
    landing: bool = False


ENTRY_POINTS: tuple[EntryPoint, ...] = (
    EntryPoint("admin.home", "Dashboard", Role.ADMIN, "/admin", landing=True),
    EntryPoint("admin.merchants", "Merchants", Role.ADMIN, "/admin/merchants"),
    EntryPoint("admin.payouts", "Payouts", Role.ADMIN, "/admin/payouts"),
    EntryPoint("admin.wallets", "Wallet search", Role.ADMIN, "/admin/wallets"),
    EntryPoint("admin.transactions", "Transactions", Role.ADMIN, "/admin/transactions"),
    EntryPoint("admin.freeze", "Freeze wallet", Role.ADMIN, "/admin/freeze"),
    EntryPoint("admin.settlement", "Settlement report", Role.ADMIN, "/admin/settlement"),
    EntryPoint("merchant.home", "Dashboard", Role.MERCHANT, "/merchant", landing=True),
    EntryPoint("merchant.vendors", "Vendors", Role.MERCHANT, "/merchant/vendors"),
    EntryPoint("merchant.vendor_wallets", "Vendor wallets", Role.MERCHANT, "/merchant/vendor-wallets"),
    EntryPoint("merchant.order_complete", "Order completion", Role.MERCHANT, "/merchant/order-complete"),
    EntryPoint("merchant.order_settlement", "Order settlement", Role.MERCHANT, "/merchant/order-settlement"),
    EntryPoint("merchant.commission", "Commission", Role.MERCHANT, "/merchant/commission"),
    EntryPoint("merchant.escrow", "Escrow balance", Role.MERCHANT, "/merchant/escrow"),
    EntryPoint("merchant.payments", "Payment records", Role.MERCHANT, "/merchant/payments"),
    EntryPoint("merchant.transactions", "Transactions", Role.MERCHANT, "/merchant/transactions"),
    EntryPoint("merchant.payouts", "Payouts", Role.MERCHANT, "/merchant/payouts"),
    EntryPoint("vendor.home", "Dashboard", Role.VENDOR, "/vendor", landing=True),
    EntryPoint("vendor.transactions", "Transactions", Role.VENDOR, "/vendor/transactions"),
    EntryPoint("vendor.payout", "Request payout", Role.VENDOR, "/vendor/payout"),
    EntryPoint("vendor.payout_status", "Payout status", Role.VENDOR, "/vendor/payout-status"),
    EntryPoint("vendor.bank", "Bank details", Role.VENDOR, "/vendor/bank"),
)

_BY_KEY = {entry.key: entry for entry in ENTRY_POINTS}
_LANDING = {entry.role: entry for entry in ENTRY_POINTS if entry.landing}


@dataclass(frozen=True)
class RouteDecision:
    outcome: RouteOutcome
    path: str
    entry: EntryPoint | None = None

    @property
    def allowed(self) -> bool:
        return self.outcome is RouteOutcome.ALLOWED


def entry_point(key: str) -> EntryPoint | None:
    return _BY_KEY.get(key)


def entry_points_for(identity: Identity | None) -> list[EntryPoint]:
    if identity is None:
        return []
    return [entry for entry in ENTRY_POINTS if identity.has_role(entry.role.value)]


def resolve(identity: Identity | None, key: str) -> RouteDecision:
    entry = _BY_KEY.get(key)
    if entry is None:
        return RouteDecision(RouteOutcome.UNKNOWN, LOGIN_PATH)
    if identity is None:
        return RouteDecision(RouteOutcome.LOGIN_REQUIRED, LOGIN_PATH, entry)
    if not identity.has_role(entry.role.value):
        return RouteDecision(RouteOutcome.ACCESS_DENIED, ACCESS_DENIED_PATH, entry)
    return RouteDecision(RouteOutcome.ALLOWED, entry.path, entry)


def landing_for(identity: Identity | None) -> RouteDecision:
    if identity is None:
        return RouteDecision(RouteOutcome.LOGIN_REQUIRED, LOGIN_PATH)
    for role in ROLE_PRIORITY:
        if identity.has_role(role.value):
            entry = _LANDING[role]
            return RouteDecision(RouteOutcome.ALLOWED, entry.path, entry)
    return RouteDecision(RouteOutcome.ACCESS_DENIED, ACCESS_DENIED_PATH)
