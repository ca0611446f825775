from .base import PreconditionError, ReadOutcome, WorkflowError, settle_all
from .dashboard_service import DashboardService, DashboardSnapshot
from .ledger_service import EntriesView, LedgerExplorer
from .merchant_service import MerchantWorkflow, OrderSettlement
from .order_completion_service import OrderCompletionContext, OrderCompletionWorkflow
from .payout_service import PayoutListState, PayoutWorkflow, available_actions
from .signup_service import SignupWorkflow
from .vendor_service import VendorProfileWorkflow
from .wallet_service import WalletPanel, WalletWorkflow

__all__ = [
    "DashboardService",
    "DashboardSnapshot",
    "EntriesView",
    "LedgerExplorer",
    "MerchantWorkflow",
    "OrderCompletionContext",
    "OrderCompletionWorkflow",
    "OrderSettlement",
    "PayoutListState",
    "PayoutWorkflow",
    "PreconditionError",
    "ReadOutcome",
    "SignupWorkflow",
    "VendorProfileWorkflow",
    "WalletPanel",
    "WalletWorkflow",
    "WorkflowError",
    "available_actions",
    "settle_all",
]
