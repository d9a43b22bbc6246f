"""Composition root: one set of collaborators per process.

The CLI, the shortcut runner and any background job share one
:class:`AppContainer`, so they share one credential store, one refresh
policy (single-flight) and one API client.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Callable

import requests

from .auth.credential_store import CredentialStore, build_credential_store
from .auth.manager import AuthManager
from .auth.session import AuthorizationSession, CallbackCapture
from .auth.token_policy import TokenRefreshPolicy
from .config_types import AppConfig
from .history import HistoryStore
from .selection import PlaylistSelection
from .spotify.client import SpotifyAPIClient

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    config: AppConfig
    store: CredentialStore
    tokens: TokenRefreshPolicy
    session: AuthorizationSession
    auth: AuthManager
    client: SpotifyAPIClient
    selection: PlaylistSelection
    history: HistoryStore

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        store: CredentialStore | None = None,
        http: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
        capture: CallbackCapture | None = None,
    ) -> "AppContainer":
        sp = config.spotify
        if store is None:
            store = build_credential_store(config.storage.to_dict())
        store.migrate_legacy_tokens()
        http = http or requests.Session()
        tokens = TokenRefreshPolicy(
            store,
            client_id=sp.client_id or "",
            token_url=sp.token_url,
            http=http,
            clock=clock,
            leeway_seconds=sp.refresh_leeway_seconds,
            timeout=sp.request_timeout_seconds,
        )
        session = AuthorizationSession(
            store,
            client_id=sp.client_id,
            redirect_uri=sp.redirect_uri,
            scope=sp.scope,
            authorize_url=sp.authorize_url,
            token_url=sp.token_url,
            http=http,
            capture=capture,
            clock=clock,
            timeout_seconds=sp.timeout_seconds,
            request_timeout=sp.request_timeout_seconds,
        )
        client = SpotifyAPIClient(tokens, store, http=http, api_base=sp.api_base, timeout=sp.request_timeout_seconds)
        selection = PlaylistSelection(
            config.selection.file,
            slot_start_hours=config.selection.slot_start_hours,
            boundary_belongs_to=config.selection.boundary_belongs_to,
        )
        history = HistoryStore(config.history.directory, max_entries=config.history.max_entries)
        return cls(
            config=config,
            store=store,
            tokens=tokens,
            session=session,
            auth=AuthManager(store, session),
            client=client,
            selection=selection,
            history=history,
        )


__all__ = ["AppContainer"]
