"""Spotify authentication: PKCE login, credential storage, token refresh.

- pkce.py: verifier/challenge generation
- credential_store.py: dual-scope token storage (keyring / files)
- token_endpoint.py: token grant requests and persistence
- token_policy.py: cached-or-refresh access token, single-flight
- callback_server.py: loopback redirect capture for the browser login
- session.py: interactive login flow
- manager.py: sign-in state machine
"""

from .credential_store import CredentialStore, FileScope, KeyringScope, build_credential_store
from .manager import AuthManager, SessionState
from .session import AuthorizationSession
from .token_policy import TokenRefreshPolicy

__all__ = [
    "CredentialStore",
    "FileScope",
    "KeyringScope",
    "build_credential_store",
    "AuthManager",
    "SessionState",
    "AuthorizationSession",
    "TokenRefreshPolicy",
]
