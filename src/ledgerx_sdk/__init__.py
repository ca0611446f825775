from .auth_store import AuthStore
from .config import ClientConfig, ConfigError, load_config
from .error_mapper import ErrorCategory, categorize, map_error
from .exceptions import (
    ApiError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServerError,
    StaleResponseError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)
from .gateway import ApiGateway
from .http_client import HttpClient
from .idempotency import MutationAttempt, MutationAttempts, generate_idempotency_key
from .models import (
    AdminStats,
    BankDetails,
    Commission,
    EntriesQuery,
    LedgerEntry,
    Page,
    Payout,
    PayoutStats,
    PayoutStatus,
    PendingOrder,
    Role,
    Settlement,
    UserProfile,
    VendorSummary,
    Wallet,
)
from .session import ExpiryState, SessionStatus, SessionStore
from .token_codec import Identity, decode_identity
from .tracing import TraceContext
from .ui_errors import UserFacingError, to_user_facing_error

__all__ = [
    "AdminStats",
    "ApiError",
    "ApiGateway",
    "AuthStore",
    "BankDetails",
    "ClientConfig",
    "Commission",
    "ConfigError",
    "ConflictError",
    "EntriesQuery",
    "ErrorCategory",
    "ExpiryState",
    "ForbiddenError",
    "HttpClient",
    "Identity",
    "LedgerEntry",
    "MutationAttempt",
    "MutationAttempts",
    "NotFoundError",
    "Page",
    "Payout",
    "PayoutStats",
    "PayoutStatus",
    "PendingOrder",
    "Role",
    "ServerError",
    "SessionStatus",
    "SessionStore",
    "Settlement",
    "StaleResponseError",
    "TraceContext",
    "TransportError",
    "UnauthorizedError",
    "UserFacingError",
    "UserProfile",
    "ValidationError",
    "VendorSummary",
    "Wallet",
    "categorize",
    "decode_identity",
    "generate_idempotency_key",
    "load_config",
    "map_error",
    "to_user_facing_error",
]
