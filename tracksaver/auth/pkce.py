"""PKCE (RFC 7636) helpers.

Verifier and challenge for one login attempt; never persisted.
"""

from __future__ import annotations
import base64
import hashlib
import secrets
import string

VERIFIER_LENGTH = 64
UNRESERVED_CHARS = string.ascii_letters + string.digits + "-._~"


def generate_verifier(length: int = VERIFIER_LENGTH) -> str:
    return ''.join(secrets.choice(UNRESERVED_CHARS) for _ in range(length))


def code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip('=')


def generate_state() -> str:
    """Random value echoed back by the provider on the redirect (CSRF guard)."""
    return secrets.token_urlsafe(12)


__all__ = ["generate_verifier", "code_challenge", "generate_state", "VERIFIER_LENGTH", "UNRESERVED_CHARS"]
