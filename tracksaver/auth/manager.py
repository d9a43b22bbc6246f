"""Per-process sign-in state.

Valid transitions::

    SignedOut -> Authenticating -> SignedIn
    Authenticating -> SignedOut   (any login failure)
    SignedIn -> SignedOut         (logout, or Unauthorized from the API)
"""

from __future__ import annotations
import enum
import logging
import threading

from ..errors import SessionStateError
from .credential_store import CredentialStore
from .session import AuthorizationSession

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    SIGNED_OUT = "signed_out"
    AUTHENTICATING = "authenticating"
    SIGNED_IN = "signed_in"


_ALLOWED = {
    (SessionState.SIGNED_OUT, SessionState.AUTHENTICATING),
    (SessionState.AUTHENTICATING, SessionState.SIGNED_IN),
    (SessionState.AUTHENTICATING, SessionState.SIGNED_OUT),
    (SessionState.SIGNED_IN, SessionState.SIGNED_OUT),
}


class AuthManager:
    def __init__(self, store: CredentialStore, session: AuthorizationSession):
        self.store = store
        self.session = session
        self._lock = threading.Lock()
        self._state = SessionState.SIGNED_IN if store.has_credentials() else SessionState.SIGNED_OUT

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def signed_in(self) -> bool:
        return self._state is SessionState.SIGNED_IN

    def _transition(self, target: SessionState) -> None:
        with self._lock:
            if (self._state, target) not in _ALLOWED:
                raise SessionStateError(f"Cannot go from {self._state.value} to {target.value}")
            logger.debug(f"Session {self._state.value} -> {target.value}")
            self._state = target

    def login(self) -> None:
        self._transition(SessionState.AUTHENTICATING)
        try:
            self.session.login()
        except BaseException:
            self._transition(SessionState.SIGNED_OUT)
            raise
        self._transition(SessionState.SIGNED_IN)

    def cancel_login(self) -> bool:
        return self.session.cancel()

    def logout(self) -> None:
        self._transition(SessionState.SIGNED_OUT)
        self.store.delete_all()

    def invalidate(self) -> None:
        """Handle an Unauthorized answer: wipe credentials and sign out."""
        self.store.delete_all()
        with self._lock:
            if self._state is SessionState.SIGNED_IN:
                self._state = SessionState.SIGNED_OUT
        logger.info("Spotify session invalidated; sign in again")


__all__ = ["AuthManager", "SessionState"]
