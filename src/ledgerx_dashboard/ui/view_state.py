from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ViewStateStatus(str, Enum):
    LOADING = "loading"
    EMPTY = "empty"
    SUCCESS = "success"
    PARTIAL_ERROR = "partial_error"
    FATAL_ERROR = "fatal_error"
    NO_PERMISSION = "no_permission"


@dataclass(frozen=True)
class ViewState:
    status: ViewStateStatus
    message: str | None = None
    trace_id: str | None = None
    data_available: bool = False

    def render(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "trace_id": self.trace_id,
            "data_available": self.data_available,
        }


def resolve_state(
    *,
    can_view: bool,
    is_loading: bool,
    error: str | None,
    has_data: bool,
    trace_id: str | None = None,
    empty_message: str = "No data found",
) -> ViewState:
    """Collapse a view's flags into one status.

    A failed read never blanks the page: with some data it is a partial
    error, with none it is a fatal error shown over the empty placeholder.
    """
    if not can_view:
        return ViewState(ViewStateStatus.NO_PERMISSION, "Access denied", trace_id=trace_id)
    if is_loading:
        return ViewState(ViewStateStatus.LOADING, "Loading...", trace_id=trace_id, data_available=has_data)
    if error and has_data:
        return ViewState(ViewStateStatus.PARTIAL_ERROR, error, trace_id=trace_id, data_available=True)
    if error:
        return ViewState(ViewStateStatus.FATAL_ERROR, error, trace_id=trace_id)
    if not has_data:
        return ViewState(ViewStateStatus.EMPTY, empty_message, trace_id=trace_id)
    return ViewState(ViewStateStatus.SUCCESS, "Ready", trace_id=trace_id, data_available=True)


_COLLECTION_FIELDS = ("entries", "payouts", "pending_orders", "vendors", "content")


def _has_data(view: Any) -> bool:
    if view is None:
        return False
    if isinstance(view, (list, tuple)):
        return bool(view)
    flag = getattr(view, "has_data", None)
    if isinstance(flag, bool):
        return flag
    for name in _COLLECTION_FIELDS:
        if getattr(view, name, None):
            return True
    if hasattr(view, "wallet"):
        return getattr(view, "wallet") is not None
    return not any(hasattr(view, name) for name in _COLLECTION_FIELDS)


def state_for(view: Any, *, can_view: bool = True, error: str | None = None) -> ViewState:
    """View state for whatever a workflow load returned."""
    return resolve_state(
        can_view=can_view,
        is_loading=bool(getattr(view, "loading_pending", False)),
        error=error or getattr(view, "error", None),
        has_data=_has_data(view),
        trace_id=getattr(view, "trace_id", None),
        empty_message=getattr(view, "message", None) or "No data found",
    )
