"""Token endpoint exchange shared by the login flow and the refresh policy."""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

from ..errors import CredentialStoreError, DecodingFailed, HttpStatus, TransportFailed
from .credential_store import CredentialStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


@dataclass
class TokenResponse:
    access_token: str
    token_type: str
    expires_in: int
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "TokenResponse":
        try:
            access_token = data["access_token"]
            expires_in = int(data["expires_in"])
            if not isinstance(access_token, str) or not access_token:
                raise ValueError("access_token must be a non-empty string")
            return cls(
                access_token=access_token,
                token_type=data.get("token_type", "Bearer"),
                expires_in=expires_in,
                refresh_token=data.get("refresh_token") or None,
                scope=data.get("scope"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DecodingFailed(e) from e


def request_token(
    http: requests.Session,
    token_url: str,
    params: Dict[str, str],
    timeout: float = DEFAULT_TIMEOUT,
) -> TokenResponse:
    """POST a form-encoded grant to the token endpoint.

    Raises:
        HttpStatus: non-2xx answer (e.g. 400 invalid_grant)
        DecodingFailed: body is not a valid token response
        TransportFailed: the request never completed
    """
    grant = params.get("grant_type")
    logger.debug(f"Requesting token (grant_type={grant})")
    try:
        resp = http.post(
            token_url,
            data=params,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise TransportFailed(e) from e
    if not 200 <= resp.status_code < 300:
        logger.warning(f"Token endpoint answered {resp.status_code} for grant_type={grant}")
        raise HttpStatus(resp.status_code)
    try:
        payload = resp.json()
    except ValueError as e:
        raise DecodingFailed(e) from e
    return TokenResponse.from_dict(payload)


def persist_token_response(
    store: CredentialStore,
    token: TokenResponse,
    clock: Callable[[], float] = time.time,
    fallback_refresh_token: Optional[str] = None,
) -> float:
    """Store access token, expiry and (rotated or previous) refresh token.

    Returns the absolute expiry that was stored.
    """
    expires_at = clock() + token.expires_in
    store.save_access_token(token.access_token)
    try:
        store.save_access_token_expiry(expires_at)
    except CredentialStoreError:
        # Never leave the new token paired with the previous expiry
        store.delete_access_token()
        raise
    refresh = token.refresh_token or fallback_refresh_token
    if refresh:
        store.save_refresh_token(refresh)
    return expires_at


__all__ = ["TokenResponse", "request_token", "persist_token_response"]
