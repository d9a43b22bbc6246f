"""Interactive Spotify login (Authorization Code + PKCE).

Runs once per explicit login action; background and automation callers never
start it, they only consume the tokens it stores.
"""

from __future__ import annotations
import logging
import threading
import time
from typing import Callable, Optional, Protocol
from urllib.parse import parse_qs, urlencode, urlparse

import requests

from ..errors import InvalidConfig, MissingAuthCode, MissingCallbackURL, SessionFailed
from .callback_server import LoopbackCallbackCapture, PendingAuthorization
from .credential_store import CredentialStore
from .pkce import code_challenge, generate_state, generate_verifier
from .token_endpoint import DEFAULT_TIMEOUT, persist_token_response, request_token

logger = logging.getLogger(__name__)


class CallbackCapture(Protocol):
    """Presents the authorization URL and resolves the pending handle."""

    def start(self, authorize_url: str, pending: PendingAuthorization) -> None: ...

    def stop(self) -> None: ...


class AuthorizationSession:
    def __init__(
        self,
        store: CredentialStore,
        client_id: str | None,
        redirect_uri: str,
        scope: str,
        authorize_url: str,
        token_url: str,
        http: requests.Session | None = None,
        capture: CallbackCapture | None = None,
        clock: Callable[[], float] = time.time,
        timeout_seconds: float = 300,
        request_timeout: float = DEFAULT_TIMEOUT,
    ):
        self.store = store
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.scope = scope
        self.authorize_url = authorize_url
        self.token_url = token_url
        self.http = http or requests.Session()
        self.capture = capture
        self.clock = clock
        self.timeout_seconds = timeout_seconds
        self.request_timeout = request_timeout
        self._lock = threading.Lock()
        self._pending: Optional[PendingAuthorization] = None

    def validate_config(self) -> None:
        if not self.client_id:
            raise InvalidConfig("Spotify client_id is not configured.")
        parsed = urlparse(self.redirect_uri)
        if not parsed.scheme or not parsed.hostname:
            raise InvalidConfig(f"Invalid redirect URI: {self.redirect_uri!r}")

    def build_authorize_url(self, challenge: str, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "code_challenge_method": "S256",
            "code_challenge": challenge,
            "scope": self.scope,
            "state": state,
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    def cancel(self) -> bool:
        """Abort a login that is waiting for the browser redirect."""
        with self._lock:
            pending = self._pending
        if pending is None:
            return False
        logger.info("Cancelling Spotify login")
        return pending.cancel()

    def login(self) -> None:
        self.validate_config()
        verifier = generate_verifier()
        state = generate_state()
        url = self.build_authorize_url(code_challenge(verifier), state)
        capture = self.capture or LoopbackCallbackCapture(self.redirect_uri)

        pending = PendingAuthorization()
        with self._lock:
            if self._pending is not None and not self._pending.done:
                raise SessionFailed("A login is already in progress.")
            self._pending = pending
        try:
            capture.start(url, pending)
            logger.info("Waiting for Spotify authorization in the browser...")
            callback_url = pending.wait(self.timeout_seconds)
        finally:
            capture.stop()
            with self._lock:
                self._pending = None

        code = self._extract_code(callback_url, state)
        response = request_token(
            self.http,
            self.token_url,
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
                "client_id": self.client_id or "",
                "code_verifier": verifier,
            },
            timeout=self.request_timeout,
        )
        persist_token_response(self.store, response, clock=self.clock)
        logger.info(f"Spotify login complete (token expires in {response.expires_in}s)")

    @staticmethod
    def _extract_code(callback_url: str | None, expected_state: str) -> str:
        if not callback_url:
            raise MissingCallbackURL()
        qs = parse_qs(urlparse(callback_url).query)
        error = qs.get('error', [None])[0]
        if error:
            raise SessionFailed(f"Spotify authorization error: {error}")
        code = qs.get('code', [None])[0]
        if not code:
            raise MissingAuthCode()
        state = qs.get('state', [None])[0]
        if state != expected_state:
            raise SessionFailed("Authorization state mismatch; please retry the login.")
        return code


__all__ = ["AuthorizationSession", "CallbackCapture"]
