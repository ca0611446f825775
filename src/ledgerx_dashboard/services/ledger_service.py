from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from ledgerx_sdk import EntriesQuery, LedgerEntry, Page, Role, StaleResponseError

from .base import PreconditionError, WorkflowError, WorkflowService

logger = logging.getLogger(__name__)

ENTRIES_CONTEXT = "ledger.entries"


@dataclass
class EntriesView:
    query: EntriesQuery = field(default_factory=EntriesQuery)
    entries: list[LedgerEntry] = field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    error: str | None = None
    message: str | None = None

    @property
    def has_next(self) -> bool:
        return self.query.page + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.query.page > 0


class LedgerExplorer(WorkflowService):
    """Paged, filtered reads of ledger entries for every role."""

    module = "ledger"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.view = EntriesView()

    def search(self, query: EntriesQuery | Mapping[str, Any] | None = None) -> EntriesView:
        request = query if isinstance(query, EntriesQuery) else EntriesQuery.model_validate(query or {})
        identity = self._identity()
        if identity.has_role(Role.ADMIN.value):
            if not request.wallet_id and not request.merchant_id:
                raise PreconditionError("Provide wallet ID or merchant ID")
        elif not request.wallet_id and not request.merchant_id:
            request = request.model_copy(update={"merchant_id": self._merchant_id()})
        return self._fetch(request)

    def next_page(self) -> EntriesView:
        if not self.view.has_next:
            return self.view
        return self._fetch(self.view.query.model_copy(update={"page": self.view.query.page + 1}))

    def previous_page(self) -> EntriesView:
        if not self.view.has_previous:
            return self.view
        return self._fetch(self.view.query.model_copy(update={"page": self.view.query.page - 1}))

    def payment_records(self, page: int = 0) -> EntriesView:
        return self._fetch(EntriesQuery(merchant_id=self._merchant_id(), reference_type="ORDER", page=page))

    def merchant_transactions(
        self,
        page: int = 0,
        reference_type: str | None = None,
        status: str | None = None,
    ) -> EntriesView:
        return self._fetch(
            EntriesQuery(
                merchant_id=self._merchant_id(),
                reference_type=reference_type or None,
                status=status or None,
                page=page,
            )
        )

    def vendor_transactions(self, page: int = 0) -> EntriesView:
        try:
            profile = self._call(self.gateway.users().me, fallback="Failed to load transactions")
        except WorkflowError as exc:
            self.view = EntriesView(error=exc.message)
            return self.view
        if not profile.vendor_wallet_id:
            self.view = EntriesView(message="No vendor wallet found for your account.")
            return self.view
        return self._fetch(EntriesQuery(wallet_id=profile.vendor_wallet_id, page=page))

    def _fetch(self, query: EntriesQuery) -> EntriesView:
        version = self.gateway.ledger.switch_context(ENTRIES_CONTEXT)
        try:
            page: Page[LedgerEntry] = self._call(
                self.gateway.entries().list_entries,
                query,
                context_key=ENTRIES_CONTEXT,
                context_version=version,
                fallback="Failed to load entries",
            )
        except StaleResponseError:
            logger.info("entries_discarded", extra={"page": query.page})
            return self.view
        except WorkflowError as exc:
            self.view = EntriesView(query=query, error=exc.message)
            return self.view
        self.view = EntriesView(
            query=query,
            entries=list(page.content),
            total_elements=page.total_elements,
            total_pages=page.total_pages,
        )
        return self.view
