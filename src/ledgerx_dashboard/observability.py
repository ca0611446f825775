"""Audit trail for balance-changing actions.

Each mutation issued by a workflow produces exactly one JSON line on the
``ledgerx_dashboard.audit`` logger, success or failure. Only identifiers go
into the line; amounts, credentials and bank details never do.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

AUDIT_LOGGER = "ledgerx_dashboard.audit"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


@dataclass(frozen=True)
class AuditRecord:
    module: str
    action: str
    outcome: str
    actor_role: str | None = None
    merchant_id: str | None = None
    trace_id: str | None = None
    ts: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_json(self) -> str:
        return json.dumps({"level": "INFO", **asdict(self)}, sort_keys=True)


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    actor_role: str | None,
    merchant_id: str | None,
    trace_id: str | None,
    outcome: str,
) -> AuditRecord:
    record = AuditRecord(
        module=module,
        action=action,
        outcome=outcome,
        actor_role=actor_role,
        merchant_id=merchant_id,
        trace_id=trace_id,
    )
    logger.info(record.to_json())
    return record
