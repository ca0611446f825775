from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel


def amount_to_wire(value: Decimal) -> int | float:
    """Write an amount as a JSON number whose text is the exact decimal.

    Whole amounts go out as integers. Anything else must survive the float
    round trip digit for digit, otherwise the amount is refused.
    """
    if value == value.to_integral_value():
        return int(value)
    as_float = float(value)
    if Decimal(repr(as_float)) != value:
        raise ValueError(f"Amount {value} cannot be sent without rounding")
    return as_float


# Amounts travel as JSON numbers; the Decimal is kept untouched in between.
Amount = Annotated[Decimal, PlainSerializer(amount_to_wire, when_used="json")]
CurrencyCode = Annotated[str, Field(pattern=r"^[A-Z]{3}$")]


class ApiModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Role(str, Enum):
    ADMIN = "ADMIN"
    MERCHANT = "MERCHANT"
    VENDOR = "VENDOR"


class PayoutStatus(str, Enum):
    CREATED = "CREATED"
    PROCESSING = "PROCESSING"
    SETTLED = "SETTLED"
    FAILED = "FAILED"


class WalletType(str, Enum):
    MAIN = "MAIN"
    ESCROW = "ESCROW"
    VENDOR = "VENDOR"


class CommissionType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_PLUS_PERCENTAGE = "FIXED_PLUS_PERCENTAGE"


T = TypeVar("T")


class Page(ApiModel, Generic[T]):
    content: List[T] = Field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    number: int = 0
    size: int = 0


# Auth / users


class LoginRequest(ApiModel):
    username: str
    password: str


class TokenResponse(ApiModel):
    access_token: str


class SignupRequest(ApiModel):
    username: str = Field(min_length=2)
    password: str = Field(min_length=8)
    roles: List[str] = Field(default_factory=lambda: [Role.MERCHANT.value])
    currency_code: CurrencyCode = "INR"


class UserProfile(ApiModel):
    id: str
    username: str
    roles: List[str] = Field(default_factory=list)
    merchant_id: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    main_wallet_id: Optional[str] = None
    escrow_wallet_id: Optional[str] = None
    vendor_wallet_id: Optional[str] = None


class BankDetailsRequest(ApiModel):
    account_number: str = Field(min_length=1)
    ifsc_code: Optional[str] = None
    beneficiary_name: str = Field(min_length=1)


class BankDetails(ApiModel):
    user_id: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    beneficiary_name: Optional[str] = None
    updated_at: Optional[datetime] = None


# Wallets / ledger


class Wallet(ApiModel):
    id: str
    merchant_id: Optional[str] = None
    wallet_type: Optional[str] = None
    vendor_user_id: Optional[str] = None
    currency_code: Optional[str] = None
    status: Optional[str] = None
    balance: Optional[Amount] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreditRequest(ApiModel):
    amount: Amount = Field(gt=0)
    currency_code: CurrencyCode
    reference_id: str = Field(min_length=1)
    reference_type: Optional[str] = None
    description: Optional[str] = None


class CreditLeg(ApiModel):
    to_wallet_id: str
    amount: Amount = Field(gt=0)


class TransferRequest(ApiModel):
    from_wallet_id: str
    reference_id: str = Field(min_length=1)
    currency_code: CurrencyCode
    total_amount: Amount = Field(gt=0)
    credit_legs: List[CreditLeg] = Field(min_length=1)
    description: Optional[str] = None


class LedgerEntry(ApiModel):
    id: str
    wallet_id: Optional[str] = None
    type: Optional[str] = None
    amount: Optional[Amount] = None
    currency_code: Optional[str] = None
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class TransferResult(ApiModel):
    debit_entry: Optional[LedgerEntry] = None
    credit_entries: List[LedgerEntry] = Field(default_factory=list)
    idempotent: bool = False


class Settlement(ApiModel):
    merchant_id: Optional[str] = None
    currency_code: Optional[str] = None
    escrow_wallet_id: Optional[str] = None
    total_confirmed_escrow_credits: Optional[Amount] = None
    total_payout_debits: Optional[Amount] = None
    total_refund_debits: Optional[Amount] = None
    expected_balance: Optional[Amount] = None
    ledger_net_balance: Optional[Amount] = None
    reconciled: bool = False


class EntriesQuery(ApiModel):
    wallet_id: Optional[str] = None
    merchant_id: Optional[str] = None
    from_: Optional[datetime] = Field(default=None, alias="from")
    to: Optional[datetime] = None
    min_amount: Optional[Amount] = None
    max_amount: Optional[Amount] = None
    reference_type: Optional[str] = None
    status: Optional[str] = None
    page: int = Field(default=0, ge=0)
    size: int = Field(default=20, ge=1, le=100)
    sort: str = "createdAt,desc"

    def to_params(self) -> dict[str, Any]:
        params = self.to_payload()
        return {key: value for key, value in params.items() if value != ""}


# Merchants / admin


class VendorSummary(ApiModel):
    user_id: str
    username: Optional[str] = None
    vendor_wallet_id: Optional[str] = None


class AddVendorRequest(ApiModel):
    username: str = Field(min_length=2)
    password: str = Field(min_length=8)
    currency_code: CurrencyCode = "INR"


class AdminStats(ApiModel):
    total_merchants: int = 0
    total_vendors: int = 0
    total_wallets: int = 0
    frozen_wallets: int = 0
    total_ledger_entries: int = 0


class PayoutStats(ApiModel):
    total_payouts: int = 0
    created_count: int = 0
    processing_count: int = 0
    settled_count: int = 0
    failed_count: int = 0
    total_settled_amount: Optional[Amount] = None


# Payouts / commission / webhooks


class Payout(ApiModel):
    id: str
    merchant_id: Optional[str] = None
    vendor_id: Optional[str] = None
    vendor_wallet_id: Optional[str] = None
    amount: Optional[Amount] = None
    currency_code: Optional[str] = None
    status: Optional[str] = None
    ledger_entry_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_processing(self) -> bool:
        return self.status == PayoutStatus.PROCESSING.value


class PendingOrder(ApiModel):
    order_id: str
    amount: Amount
    currency_code: str
    created_at: Optional[datetime] = None


class PayoutRequestVendor(ApiModel):
    amount: Amount = Field(gt=0)
    currency_code: CurrencyCode


class PayoutRequest(ApiModel):
    merchant_id: str
    vendor_id: str
    vendor_wallet_id: str
    amount: Amount = Field(gt=0)
    currency_code: CurrencyCode


class CommissionRequest(ApiModel):
    commission_type: CommissionType = CommissionType.PERCENTAGE
    percentage_value: Amount = Field(ge=0, le=100)
    fixed_amount: Optional[Amount] = None
    currency_code: Optional[CurrencyCode] = None


class Commission(ApiModel):
    merchant_id: Optional[str] = None
    commission_type: Optional[str] = None
    percentage_value: Optional[Amount] = None
    fixed_amount: Optional[Amount] = None
    currency_code: Optional[str] = None


class PaymentSuccessRequest(ApiModel):
    merchant_id: str
    vendor_id: str
    order_id: str = Field(min_length=1)
    amount: Amount = Field(ge=Decimal("0.01"))
    currency_code: CurrencyCode
    escrow_wallet_id: str


class OrderCompleteRequest(ApiModel):
    merchant_id: str
    order_id: str
    amount: Amount
    currency_code: CurrencyCode
    vendor_id: str
    escrow_wallet_id: str
    main_wallet_id: str
    vendor_wallet_id: str


class WebhookResponse(ApiModel):
    event: Optional[str] = None
    message: Optional[str] = None


# Persistence


class StoredSession(BaseModel):
    access_token: str
    identity: Optional[dict[str, Any]] = None
    env_name: Optional[str] = None
