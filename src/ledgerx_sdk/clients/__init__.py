from .admin import AdminClient
from .auth import AuthClient
from .commission import CommissionClient
from .entries import EntriesClient
from .merchants import MerchantsClient
from .payouts import PayoutsClient
from .users import UsersClient
from .wallets import WalletsClient
from .webhooks import WebhooksClient

__all__ = [
    "AdminClient",
    "AuthClient",
    "CommissionClient",
    "EntriesClient",
    "MerchantsClient",
    "PayoutsClient",
    "UsersClient",
    "WalletsClient",
    "WebhooksClient",
]
