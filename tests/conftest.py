"""Pytest fixtures for test configuration.

Global test safety measures:
 - Monkeypatch webbrowser.open to a no-op to guard against accidental flows
 - Every credential scope is file-backed under tmp_path (no OS keyring access)
"""
import time
import webbrowser
from pathlib import Path
from typing import Any, Dict

import pytest

from tracksaver.auth.credential_store import CredentialStore, FileScope
from tracksaver.config import load_typed_config
from tracksaver.container import AppContainer

from mocks.fake_http import FakeCapture, FakeClock, FakeSession


def pytest_sessionstart(session):  # type: ignore[no-untyped-def]
    # Defensive: replace webbrowser.open to avoid launching windows if a code path missed injection
    webbrowser.open = lambda *a, **k: True  # type: ignore[assignment]


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    """Rate-limit backoff (Retry-After and tenacity waits) must not slow tests down."""
    monkeypatch.setattr(time, "sleep", lambda s: None)


@pytest.fixture
def test_config(tmp_path: Path) -> Dict[str, Any]:
    """Provide a minimal test configuration as a dict.

    Default paths are isolated to tmp_path for test isolation.
    Tests can override individual values using dict update or deep_merge.
    """
    return {
        'log_level': 'DEBUG',
        'spotify': {
            'client_id': 'test-client-id',
            'redirect_scheme': 'http',
            'redirect_host': '127.0.0.1',
            'redirect_port': 9876,
            'redirect_path': '/callback',
            'timeout_seconds': 5,
        },
        'storage': {
            'backend': 'file',
            'shared_file': str(tmp_path / 'shared' / 'credentials.json'),
            'private_file': str(tmp_path / 'private' / 'credentials.json'),
        },
        'selection': {
            'file': str(tmp_path / 'selection.json'),
            'slot_start_hours': [0, 8, 16],
            'boundary_belongs_to': 'next',
        },
        'history': {'directory': str(tmp_path / 'history'), 'max_entries': 200},
    }


@pytest.fixture
def store(tmp_path: Path) -> CredentialStore:
    return CredentialStore(
        FileScope(tmp_path / 'shared' / 'credentials.json'),
        FileScope(tmp_path / 'private' / 'credentials.json'),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def http() -> FakeSession:
    return FakeSession()


@pytest.fixture
def capture() -> FakeCapture:
    return FakeCapture()


@pytest.fixture
def signed_in_store(store: CredentialStore, clock: FakeClock) -> CredentialStore:
    """Store holding a valid access token (1h left) and a refresh token."""
    store.save_access_token('valid-access')
    store.save_access_token_expiry(clock() + 3600)
    store.save_refresh_token('refresh-1')
    return store


@pytest.fixture
def make_app(test_config, store, http, clock, capture):
    """Factory building an AppContainer wired to the fakes above."""
    def _make(credentials: CredentialStore | None = None) -> AppContainer:
        return AppContainer.from_config(
            load_typed_config(test_config),
            store=credentials or store,
            http=http,  # type: ignore[arg-type]
            clock=clock,
            capture=capture,
        )
    return _make


@pytest.fixture
def app(make_app, signed_in_store) -> AppContainer:
    return make_app(signed_in_store)
