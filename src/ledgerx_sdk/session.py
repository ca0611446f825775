"""Session state shared by every workflow.

One ``SessionStore`` is built per app and handed to whatever needs the
current identity. It is the only writer of the bearer credential: every
change goes through ``set_credential``, which re-applies the header on both
backend clients before the new identity becomes visible to readers.
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable

from .auth_store import AuthStore
from .exceptions import ApiError
from .gateway import ApiGateway
from .models import StoredSession
from .token_codec import Identity, decode_identity

logger = logging.getLogger(__name__)

SessionListener = Callable[["Identity | None"], None]
RedirectCallback = Callable[[str], None]

SESSION_EXPIRED = "session_expired"
ACCESS_REVOKED = "access_revoked"


class SessionStatus(str, Enum):
    INITIALIZING = "initializing"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class ExpiryState(str, Enum):
    ACTIVE = "active"
    EXPIRING = "expiring"
    REDIRECTED = "redirected"


class SessionStore:
    def __init__(
        self,
        gateway: ApiGateway,
        auth_store: AuthStore | None = None,
        on_redirect: RedirectCallback | None = None,
    ) -> None:
        self.gateway = gateway
        self.auth_store = auth_store or AuthStore(app_name=gateway.config.app_name)
        self.on_redirect = on_redirect
        self.status = SessionStatus.INITIALIZING
        self.expiry = ExpiryState.ACTIVE
        self.redirect_reason: str | None = None
        self._credential: str | None = None
        self._identity: Identity | None = None
        self._listeners: list[SessionListener] = []
        self._lock = threading.RLock()
        gateway.register_auth_error_handler(self.handle_auth_failure)

    @property
    def credential(self) -> str | None:
        return self._credential

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def init(self) -> Identity | None:
        """Rehydrate from the persisted session, if any.

        Only the stored credential is used; the identity is always decoded
        again from it.
        """
        stored = self.auth_store.load()
        if stored is None:
            return self.set_credential(None)
        identity = self.set_credential(stored.access_token)
        logger.info("session_rehydrated", extra={"authenticated": identity is not None})
        return identity

    def set_credential(self, credential: str | None) -> Identity | None:
        with self._lock:
            identity = decode_identity(credential) if credential else None
            if credential and identity is None:
                logger.warning("credential_undecodable")
                credential = None
            # Both clients get the header before the identity is published.
            self.gateway.apply_credential(credential)
            self._credential = credential
            self._identity = identity
            if credential and identity is not None:
                self.auth_store.save(
                    StoredSession(
                        access_token=credential,
                        identity=identity.to_dict(),
                        env_name=self.gateway.config.env_name,
                    )
                )
                self.status = SessionStatus.AUTHENTICATED
                self.expiry = ExpiryState.ACTIVE
                self.redirect_reason = None
            else:
                self.auth_store.clear()
                self.status = SessionStatus.UNAUTHENTICATED
            listeners = list(self._listeners)
        for listener in listeners:
            listener(identity)
        return identity

    def login(self, username: str, password: str) -> Identity | None:
        logger.info("login_attempt", extra={"username": username})
        token = self.gateway.auth().login(username, password)
        identity = self.set_credential(token.access_token)
        logger.info(
            "login_success",
            extra={"username": username, "roles": sorted(identity.roles) if identity else []},
        )
        return identity

    def logout(self) -> None:
        self.set_credential(None)
        logger.info("logout")

    def refresh_identity(self) -> Identity | None:
        with self._lock:
            credential = self._credential
            if credential is None:
                return None
            return self.set_credential(credential)

    def handle_auth_failure(self, error: ApiError) -> bool:
        """Clear the session and redirect once per expiry.

        Returns True only for the call that performed the redirect. Failures
        that arrive while no session is held (a rejected login, for example)
        leave the state alone.
        """
        with self._lock:
            if self.expiry is not ExpiryState.ACTIVE or self._credential is None:
                return False
            self.expiry = ExpiryState.EXPIRING
            reason = SESSION_EXPIRED if error.status_code == 401 else ACCESS_REVOKED
            self.set_credential(None)
            self.expiry = ExpiryState.REDIRECTED
            self.redirect_reason = reason
        logger.warning("session_redirect", extra={"reason": reason, "status_code": error.status_code})
        if self.on_redirect:
            self.on_redirect(reason)
        return True
