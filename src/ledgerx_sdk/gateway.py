from __future__ import annotations

from dataclasses import dataclass

from .clients.admin import AdminClient
from .clients.auth import AuthClient
from .clients.commission import CommissionClient
from .clients.entries import EntriesClient
from .clients.merchants import MerchantsClient
from .clients.payouts import PayoutsClient
from .clients.users import UsersClient
from .clients.wallets import WalletsClient
from .clients.webhooks import WebhooksClient
from .config import ClientConfig
from .http_client import AuthErrorHandler, HttpClient
from .tracing import TraceContext


@dataclass
class ApiGateway:
    """The ledger-service and payout-service clients, kept in lockstep.

    Both clients must always carry the same bearer credential; the only way
    to change it is ``apply_credential``.
    """

    config: ClientConfig
    trace: TraceContext | None = None
    ledger: HttpClient | None = None
    payout: HttpClient | None = None

    def __post_init__(self) -> None:
        self.trace = self.trace or TraceContext()
        if self.ledger is None:
            self.ledger = HttpClient(
                config=self.config,
                base_url=self.config.ledger_api_base_url,
                service="ledger",
                trace=self.trace,
            )
        if self.payout is None:
            self.payout = HttpClient(
                config=self.config,
                base_url=self.config.payout_api_base_url,
                service="payout",
                trace=self.trace,
            )

    def apply_credential(self, credential: str | None) -> None:
        self.ledger.set_bearer(credential)
        self.payout.set_bearer(credential)

    def register_auth_error_handler(self, handler: AuthErrorHandler | None) -> None:
        self.ledger.register_auth_error_handler(handler)
        self.payout.register_auth_error_handler(handler)

    def auth(self) -> AuthClient:
        return AuthClient(http=self.ledger, module="auth")

    def users(self) -> UsersClient:
        return UsersClient(http=self.ledger, module="users")

    def wallets(self) -> WalletsClient:
        return WalletsClient(http=self.ledger, module="wallets")

    def entries(self) -> EntriesClient:
        return EntriesClient(http=self.ledger, module="entries")

    def merchants(self) -> MerchantsClient:
        return MerchantsClient(http=self.ledger, module="merchants")

    def admin(self) -> AdminClient:
        return AdminClient(http=self.ledger, module="admin", payout_http=self.payout)

    def payouts(self) -> PayoutsClient:
        return PayoutsClient(http=self.payout, module="payouts")

    def commission(self) -> CommissionClient:
        return CommissionClient(http=self.payout, module="commission")

    def webhooks(self) -> WebhooksClient:
        return WebhooksClient(http=self.payout, module="webhooks")
