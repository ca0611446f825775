"""Read the identity claims out of a bearer credential.

The signature is never verified here. Both backends authorize every call on
their own, so whatever this module returns is only a hint for choosing which
views to offer.
"""
from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class Identity:
    subject: str
    roles: frozenset[str] = field(default_factory=frozenset)
    merchant_affiliation: str | None = None

    def has_role(self, role: str) -> bool:
        return role.upper() in self.roles

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "roles": sorted(self.roles),
            "merchant_affiliation": self.merchant_affiliation,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Identity":
        return cls(
            subject=str(data["subject"]),
            roles=_normalize_roles(data.get("roles")),
            merchant_affiliation=data.get("merchant_affiliation"),
        )


def _normalize_roles(raw: Any) -> frozenset[str]:
    if not isinstance(raw, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(role.strip().upper() for role in raw if isinstance(role, str) and role.strip())


def _decode_segment(segment: str) -> Any:
    padded = segment + ("=" * (-len(segment) % 4))
    decoded = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    return json.loads(decoded)


def decode_identity(credential: str | None) -> Identity | None:
    if not credential or not isinstance(credential, str):
        return None

    parts = credential.split(".")
    if len(parts) != 3 or not parts[1]:
        return None

    try:
        payload = _decode_segment(parts[1])
    except (ValueError, UnicodeError, binascii.Error, RecursionError):
        return None

    if not isinstance(payload, dict):
        return None

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        return None

    merchant_id = payload.get("merchantId")
    return Identity(
        subject=subject,
        roles=_normalize_roles(payload.get("roles")),
        merchant_affiliation=str(merchant_id) if merchant_id else None,
    )
