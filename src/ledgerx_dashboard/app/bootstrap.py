from __future__ import annotations

import logging
from typing import Any, Callable

from ledgerx_sdk import (
    ApiError,
    ApiGateway,
    AuthStore,
    ClientConfig,
    Identity,
    MutationAttempts,
    SessionStore,
    load_config,
    to_user_facing_error,
)

from ..services import (
    DashboardService,
    EntriesView,
    LedgerExplorer,
    MerchantWorkflow,
    OrderCompletionContext,
    OrderCompletionWorkflow,
    PayoutListState,
    PayoutWorkflow,
    SignupWorkflow,
    VendorProfileWorkflow,
    WalletPanel,
    WalletWorkflow,
    WorkflowError,
)
from ..ui.view_state import ViewState, state_for
from .navigation import ACCESS_DENIED_PATH, LOGIN_PATH, RouteDecision, RouteOutcome, landing_for, resolve
from .state import AppState

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please sign in again."


class DashboardApp:
    """Composition root: one gateway, one session, one set of workflows."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        gateway: ApiGateway | None = None,
        session: SessionStore | None = None,
        auth_store: AuthStore | None = None,
    ) -> None:
        self.config = config or (gateway.config if gateway else load_config())
        self.gateway = gateway or ApiGateway(self.config)
        self.session = session or SessionStore(self.gateway, auth_store=auth_store)
        self.session.on_redirect = self._on_session_redirect
        self.session.subscribe(self._on_identity_changed)
        self.state = AppState()
        self.view_state: ViewState | None = None

        attempts = MutationAttempts()
        self.dashboard = DashboardService(self.gateway, self.session, attempts)
        self.order_completion = OrderCompletionWorkflow(self.gateway, self.session, attempts)
        self.payouts = PayoutWorkflow(self.gateway, self.session, attempts)
        self.wallets = WalletWorkflow(self.gateway, self.session, attempts)
        self.merchants = MerchantWorkflow(self.gateway, self.session, attempts)
        self.ledger = LedgerExplorer(self.gateway, self.session, attempts)
        self.vendor_profile = VendorProfileWorkflow(self.gateway, self.session, attempts)
        self.signup = SignupWorkflow(self.gateway)

        # Entry points without a loader are form-only pages.
        self._loaders: dict[str, Callable[[], Any]] = {
            "admin.home": self.dashboard.load_admin,
            "admin.merchants": self.merchants.list_merchants,
            "admin.payouts": self.payouts.load,
            "merchant.home": self.dashboard.load_merchant,
            "merchant.vendors": self.merchants.list_vendors,
            "merchant.vendor_wallets": self.merchants.list_vendors,
            "merchant.order_complete": self.order_completion.load,
            "merchant.order_settlement": self.merchants.order_settlement,
            "merchant.commission": self.merchants.load_commission,
            "merchant.escrow": self.merchants.escrow_balance,
            "merchant.payments": self.ledger.payment_records,
            "merchant.transactions": self.ledger.merchant_transactions,
            "merchant.payouts": self.payouts.load,
            "vendor.home": self.dashboard.load_vendor,
            "vendor.transactions": self.ledger.vendor_transactions,
            "vendor.payout_status": self.payouts.load_own_payouts,
            "vendor.bank": self.vendor_profile.load_bank_details,
        }

    def start(self) -> RouteDecision:
        identity = self.session.init()
        if identity is None:
            self._navigate(LOGIN_PATH, "No active session")
            return RouteDecision(RouteOutcome.LOGIN_REQUIRED, LOGIN_PATH)
        return self._land(identity)

    def login(self, username: str, password: str) -> RouteDecision:
        self.state.error_message = None
        if not (username or "").strip() or not password:
            self.state.error_message = "Username and password required"
            return RouteDecision(RouteOutcome.LOGIN_REQUIRED, LOGIN_PATH)
        try:
            identity = self.session.login(username.strip(), password)
        except ApiError as exc:
            self.state.error_message = self._login_error(exc)
            logger.warning("login_failed", extra={"status_code": exc.status_code, "trace_id": exc.trace_id})
            self._navigate(LOGIN_PATH, "Authentication failed")
            return RouteDecision(RouteOutcome.LOGIN_REQUIRED, LOGIN_PATH)
        if identity is None:
            self.state.error_message = "The sign-in response could not be read. Please try again."
            self._navigate(LOGIN_PATH, "Authentication failed")
            return RouteDecision(RouteOutcome.LOGIN_REQUIRED, LOGIN_PATH)
        return self._land(identity)

    def logout(self) -> RouteDecision:
        self.session.logout()
        self._navigate(LOGIN_PATH, "Session cleared")
        return RouteDecision(RouteOutcome.LOGIN_REQUIRED, LOGIN_PATH)

    def open(self, entry_key: str) -> RouteDecision:
        """View-activated event: check access, then (re)load the view's data."""
        decision = resolve(self.session.identity, entry_key)
        if decision.outcome is RouteOutcome.LOGIN_REQUIRED:
            self._navigate(LOGIN_PATH, "Sign in required")
            return decision
        if decision.outcome is RouteOutcome.ACCESS_DENIED:
            self._navigate(ACCESS_DENIED_PATH, "Access denied")
            self.view_state = state_for(None, can_view=False)
            return decision
        if decision.outcome is RouteOutcome.UNKNOWN:
            logger.warning("unknown_entry_point", extra={"entry": entry_key})
            if self.session.identity is not None:
                return self._land(self.session.identity)
            self._navigate(LOGIN_PATH, "Sign in required")
            return RouteDecision(RouteOutcome.LOGIN_REQUIRED, LOGIN_PATH)

        self._navigate(decision.path, decision.entry.label if decision.entry else "Ready")
        self.state.active_entry = entry_key
        self.state.error_message = None
        self.state.view = None
        loader = self._loaders.get(entry_key)
        if loader is None:
            self.view_state = None
            return decision
        try:
            view = loader()
        except WorkflowError as exc:
            if self.session.identity is None:
                return self._expired_during_load()
            self.state.error_message = exc.message
            self.view_state = state_for(None, error=exc.message)
            return decision
        if self.session.identity is None:
            return self._expired_during_load()
        self.state.view = view
        self.view_state = state_for(view)
        return decision

    def _expired_during_load(self) -> RouteDecision:
        # The redirect already ran from the auth failure handler.
        return RouteDecision(RouteOutcome.LOGIN_REQUIRED, LOGIN_PATH)

    def _land(self, identity: Identity) -> RouteDecision:
        decision = landing_for(identity)
        if decision.entry is None:
            self._navigate(decision.path, "Access denied")
            return decision
        return self.open(decision.entry.key)

    @staticmethod
    def _login_error(exc: ApiError) -> str:
        if exc.status_code == 401:
            backend = (exc.message or "").strip()
            return backend if backend and backend != "Request failed" else "Invalid username or password"
        return to_user_facing_error(exc).message

    def _on_session_redirect(self, reason: str) -> None:
        self.state.redirect_reason = reason
        self.state.error_message = SESSION_EXPIRED_MESSAGE
        self.state.view = None
        self.view_state = None
        self._navigate(LOGIN_PATH, "Session expired")

    def _on_identity_changed(self, identity: Identity | None) -> None:
        previous = self.state.identity
        self.state.identity = identity
        if previous is not None and (identity is None or identity.subject != previous.subject):
            # Page contexts never carry over between users.
            self.order_completion.reset_selection()
            self.order_completion.context = OrderCompletionContext()
            self.payouts.state = PayoutListState()
            self.ledger.view = EntriesView()
            self.wallets.panel = WalletPanel()

    def _navigate(self, route: str, status_message: str) -> None:
        logger.info("navigation", extra={"route": route})
        self.state.history.append(route)
        self.state.route = route
        self.state.status_message = status_message
