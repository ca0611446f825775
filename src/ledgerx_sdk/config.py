from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable

from dotenv import load_dotenv


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    env_name: str
    ledger_api_base_url: str
    payout_api_base_url: str
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 15.0
    max_connections: int = 20
    verify_ssl: bool = True
    app_name: str = "ledgerx"

    @property
    def normalized_env(self) -> str:
        return self.env_name.lower().strip()


def _require(values: dict[str, str | None], required: Iterable[str]) -> None:
    missing = [key for key in required if not values.get(key)]
    if missing:
        raise ConfigError(f"Missing required config values: {', '.join(missing)}")


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected an integer, got {raw!r}") from exc


def _validate(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def _base_url(name: str, env_key: str) -> str:
    return (
        (os.getenv(f"{name}_{env_key}") or "").strip()
        or (os.getenv(name) or "").strip()
    )


def load_config(env_file: str | None = None) -> ClientConfig:
    """Load both backend addresses and transport settings from the environment.

    A ``.env`` file is read first when present; real environment variables win.
    ``LEDGERX_ENV`` picks per-environment overrides such as
    ``LEDGERX_PAYOUT_API_BASE_URL_STAGING``.
    """
    load_dotenv(env_file)

    env_name = (os.getenv("LEDGERX_ENV") or "dev").strip()
    env_key = env_name.upper()

    ledger_api_base_url = _base_url("LEDGERX_LEDGER_API_BASE_URL", env_key)
    payout_api_base_url = _base_url("LEDGERX_PAYOUT_API_BASE_URL", env_key)

    timeout_seconds = _read_float("LEDGERX_TIMEOUT_SECONDS", "10")
    _validate(
        timeout_seconds > 0,
        f"Invalid LEDGERX_TIMEOUT_SECONDS: expected > 0, got {timeout_seconds}",
    )

    connect_timeout_seconds = _read_float(
        "LEDGERX_CONNECT_TIMEOUT_SECONDS", str(min(timeout_seconds, 5.0))
    )
    _validate(
        connect_timeout_seconds > 0,
        (
            "Invalid LEDGERX_CONNECT_TIMEOUT_SECONDS: "
            f"expected > 0, got {connect_timeout_seconds}"
        ),
    )

    read_timeout_seconds = _read_float(
        "LEDGERX_READ_TIMEOUT_SECONDS",
        str(max(timeout_seconds, connect_timeout_seconds)),
    )
    _validate(
        read_timeout_seconds > 0,
        f"Invalid LEDGERX_READ_TIMEOUT_SECONDS: expected > 0, got {read_timeout_seconds}",
    )

    max_connections = _read_int("LEDGERX_MAX_CONNECTIONS", "20")
    _validate(
        max_connections >= 1,
        f"Invalid LEDGERX_MAX_CONNECTIONS: expected >= 1, got {max_connections}",
    )

    verify_ssl = _coerce_bool(os.getenv("LEDGERX_VERIFY_SSL"), True)

    values = {
        "LEDGERX_LEDGER_API_BASE_URL": ledger_api_base_url,
        "LEDGERX_PAYOUT_API_BASE_URL": payout_api_base_url,
    }
    _require(values, ["LEDGERX_LEDGER_API_BASE_URL", "LEDGERX_PAYOUT_API_BASE_URL"])

    return ClientConfig(
        env_name=env_name,
        ledger_api_base_url=ledger_api_base_url.rstrip("/"),
        payout_api_base_url=payout_api_base_url.rstrip("/"),
        connect_timeout_seconds=connect_timeout_seconds,
        read_timeout_seconds=read_timeout_seconds,
        max_connections=max_connections,
        verify_ssl=verify_ssl,
        app_name=(os.getenv("LEDGERX_APP_NAME") or "ledgerx").strip(),
    )
