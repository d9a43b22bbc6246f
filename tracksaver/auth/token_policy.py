"""Access token refresh policy.

Every API request asks :meth:`TokenRefreshPolicy.ensure_access_token` for a
bearer token. A cached token is reused while it is valid for more than
``leeway_seconds``; otherwise the refresh token is exchanged for a new one.

Refresh tokens may be rotated single-use by Spotify, so refreshes are
single-flight per process: the first caller performs the exchange and
publishes a future, concurrent callers wait on that future instead of issuing
their own request. Across processes the shared store is last-write-wins.
"""

from __future__ import annotations
import logging
import threading
import time
from concurrent.futures import Future
from typing import Callable, Optional

import requests

from ..errors import MissingRefreshToken
from .credential_store import CredentialStore
from .token_endpoint import DEFAULT_TIMEOUT, persist_token_response, request_token

logger = logging.getLogger(__name__)

DEFAULT_LEEWAY_SECONDS = 60


class TokenRefreshPolicy:
    def __init__(
        self,
        store: CredentialStore,
        client_id: str,
        token_url: str,
        http: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
        leeway_seconds: float = DEFAULT_LEEWAY_SECONDS,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.store = store
        self.client_id = client_id
        self.token_url = token_url
        self.http = http or requests.Session()
        self.clock = clock
        self.leeway_seconds = leeway_seconds
        self.timeout = timeout
        self._lock = threading.Lock()
        self._inflight: Optional[Future] = None

    def cached_access_token(self) -> Optional[str]:
        """Return the stored token if it stays valid beyond the leeway window."""
        access = self.store.read_access_token()
        expires_at = self.store.read_access_token_expiry()
        if access is None or expires_at is None:
            return None
        if expires_at - self.clock() <= self.leeway_seconds:
            return None
        return access

    def ensure_access_token(self) -> str:
        cached = self.cached_access_token()
        if cached is not None:
            return cached

        with self._lock:
            future = self._inflight
            leader = future is None
            if leader:
                future = Future()
                self._inflight = future

        if not leader:
            logger.debug("Waiting for in-flight token refresh")
            return future.result()

        try:
            # A refresh may have completed between the cache check and the lock
            token = self.cached_access_token() or self._refresh()
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(token)
            return token
        finally:
            with self._lock:
                self._inflight = None

    def _refresh(self) -> str:
        refresh_token = self.store.read_refresh_token()
        if not refresh_token:
            raise MissingRefreshToken()
        logger.info("Refreshing Spotify access token")
        response = request_token(
            self.http,
            self.token_url,
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self.client_id,
            },
            timeout=self.timeout,
        )
        expires_at = persist_token_response(
            self.store, response, clock=self.clock, fallback_refresh_token=refresh_token
        )
        logger.debug(f"Access token refreshed (valid for {int(expires_at - self.clock())}s)")
        return response.access_token


__all__ = ["TokenRefreshPolicy", "DEFAULT_LEEWAY_SECONDS"]
