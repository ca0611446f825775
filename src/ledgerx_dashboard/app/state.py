from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ledgerx_sdk import Identity

from .navigation import LOGIN_PATH


@dataclass
class AppState:
    route: str = LOGIN_PATH
    active_entry: str | None = None
    error_message: str | None = None
    status_message: str = "Ready"
    redirect_reason: str | None = None
    identity: Identity | None = None
    view: Any = None
    history: list[str] = field(default_factory=list)
