from __future__ import annotations

import base64
import json
from typing import Any, Callable, Iterable

import pytest

from ledgerx_sdk import ApiGateway, AuthStore, ClientConfig, SessionStore, TraceContext

LEDGER_URL = "https://ledger.example.com"
PAYOUT_URL = "https://payout.example.com"


def _segment(data: dict[str, Any]) -> str:
    raw = base64.urlsafe_b64encode(json.dumps(data).encode("utf-8")).decode("ascii")
    return raw.rstrip("=")


def make_token(
    subject: str = "merchant1",
    roles: Iterable[str] = ("MERCHANT",),
    merchant_id: str | None = "m-1",
    **claims: Any,
) -> str:
    payload: dict[str, Any] = {"sub": subject, "roles": list(roles), **claims}
    if merchant_id:
        payload["merchantId"] = merchant_id
    return f"{_segment({'alg': 'HS256', 'typ': 'JWT'})}.{_segment(payload)}.signature"


@pytest.fixture()
def token_factory() -> Callable[..., str]:
    return make_token


@pytest.fixture()
def config() -> ClientConfig:
    return ClientConfig(env_name="test", ledger_api_base_url=LEDGER_URL, payout_api_base_url=PAYOUT_URL)


@pytest.fixture()
def gateway(config: ClientConfig) -> ApiGateway:
    return ApiGateway(config, trace=TraceContext())


@pytest.fixture()
def auth_store(tmp_path) -> AuthStore:
    return AuthStore(base_dir=tmp_path)


@pytest.fixture()
def session(gateway: ApiGateway, auth_store: AuthStore) -> SessionStore:
    return SessionStore(gateway, auth_store=auth_store)


@pytest.fixture()
def merchant_session(session: SessionStore) -> SessionStore:
    session.set_credential(make_token())
    return session


@pytest.fixture()
def admin_session(session: SessionStore) -> SessionStore:
    session.set_credential(make_token(subject="admin", roles=("ADMIN",), merchant_id=None))
    return session


@pytest.fixture()
def vendor_session(session: SessionStore) -> SessionStore:
    session.set_credential(make_token(subject="vendor1", roles=("VENDOR",), merchant_id="m-1"))
    return session
