from __future__ import annotations

from ledgerx_sdk import BankDetails
from ledgerx_sdk.models import BankDetailsRequest

from .base import PreconditionError, WorkflowError, WorkflowService


class VendorProfileWorkflow(WorkflowService):
    module = "vendor_profile"

    def load_bank_details(self) -> BankDetails | None:
        self._identity()
        try:
            return self._call(self.gateway.users().get_bank_details, fallback="Failed to load")
        except WorkflowError as exc:
            if exc.status_code == 404:
                return None
            raise

    def save_bank_details(
        self,
        account_number: str | None,
        beneficiary_name: str | None,
        ifsc_code: str | None = None,
    ) -> BankDetails:
        self._identity()
        account = (account_number or "").strip()
        beneficiary = (beneficiary_name or "").strip()
        if not account or not beneficiary:
            raise PreconditionError("Account number and beneficiary name required")
        request = BankDetailsRequest(
            account_number=account,
            beneficiary_name=beneficiary,
            ifsc_code=(ifsc_code or "").strip() or None,
        )
        return self._guarded(
            "save_bank_details",
            "save_bank_details",
            lambda: self.gateway.users().update_bank_details(request),
            fallback="Failed to save",
        )
