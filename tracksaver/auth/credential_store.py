"""Credential store for Spotify tokens.

Three string fields are kept: access token, refresh token and the access token
expiry (POSIX seconds). Values live in two scopes:

- shared: visible to every execution context (CLI, shortcut runner, background
  jobs); this is the scope reads prefer.
- private: fallback used when the shared scope is unavailable or denied.

Writes and deletes are attempted on both scopes so that no stale copy is left
behind in the scope that was not preferred.
"""

from __future__ import annotations
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ..errors import CredentialStoreError, ScopeUnavailable

logger = logging.getLogger(__name__)

ACCESS_TOKEN = "access_token"
REFRESH_TOKEN = "refresh_token"
ACCESS_TOKEN_EXPIRY = "access_token_expiry"
FIELDS = (ACCESS_TOKEN, REFRESH_TOKEN, ACCESS_TOKEN_EXPIRY)


class CredentialScope(ABC):
    """One backing location for credential fields.

    Implementations raise :class:`ScopeUnavailable` when the backend cannot be
    used at all; a missing field is reported as ``None``.
    """

    name = "scope"

    @abstractmethod
    def read(self, field: str) -> Optional[str]:
        pass

    @abstractmethod
    def write(self, field: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, field: str) -> None:
        pass


class KeyringScope(CredentialScope):
    """Scope backed by the OS keyring (Keychain, Secret Service, Credential Locker)."""

    def __init__(self, service: str):
        self.service = service
        self.name = f"keyring:{service}"

    def read(self, field: str) -> Optional[str]:
        try:
            return keyring.get_password(self.service, field)
        except KeyringError as e:
            raise ScopeUnavailable(f"{self.name} read failed: {e}") from e

    def write(self, field: str, value: str) -> None:
        try:
            keyring.set_password(self.service, field, value)
        except KeyringError as e:
            raise ScopeUnavailable(f"{self.name} write failed: {e}") from e

    def delete(self, field: str) -> None:
        try:
            keyring.delete_password(self.service, field)
        except PasswordDeleteError:
            # Nothing stored under this field
            pass
        except KeyringError as e:
            raise ScopeUnavailable(f"{self.name} delete failed: {e}") from e


class FileScope(CredentialScope):
    """Scope backed by a JSON file readable only by the current user."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.name = f"file:{self.path}"

    def _load(self) -> Dict[str, str]:
        try:
            text = self.path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError:
            logger.warning(f"Ignoring credential file with invalid encoding {self.path}")
            return {}
        except OSError as e:
            raise ScopeUnavailable(f"{self.name} read failed: {e}") from e
        try:
            data = json.loads(text)
        except ValueError:
            logger.warning(f"Ignoring unreadable credential file {self.path}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed credential file {self.path}")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".credentials-", suffix=".tmp")
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                    json.dump(data, fh)
                os.chmod(tmp, 0o600)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise ScopeUnavailable(f"{self.name} write failed: {e}") from e

    def read(self, field: str) -> Optional[str]:
        return self._load().get(field)

    def write(self, field: str, value: str) -> None:
        data = self._load()
        data[field] = value
        self._save(data)

    def delete(self, field: str) -> None:
        data = self._load()
        if field in data:
            del data[field]
            self._save(data)


class CredentialStore:
    """Dual-scope credential store.

    Callers depend only on this interface and never learn which scope served
    a value.
    """

    def __init__(self, shared: CredentialScope, private: CredentialScope):
        self.shared = shared
        self.private = private
        self._lock = threading.RLock()

    # ---------------- Field API -----------------
    def read(self, field: str) -> Optional[str]:
        with self._lock:
            for scope in (self.shared, self.private):
                try:
                    value = scope.read(field)
                except ScopeUnavailable as e:
                    logger.debug(f"Credential read fell through: {e}")
                    continue
                if value is not None:
                    return value
            return None

    def write(self, field: str, value: str) -> None:
        with self._lock:
            written = []
            for scope in (self.shared, self.private):
                try:
                    scope.write(field, value)
                    written.append(scope.name)
                except ScopeUnavailable as e:
                    logger.warning(f"Credential write skipped scope: {e}")
            if not written:
                raise CredentialStoreError(f"Could not store '{field}' in any credential scope")

    def delete(self, field: str) -> None:
        with self._lock:
            for scope in (self.shared, self.private):
                try:
                    scope.delete(field)
                except ScopeUnavailable as e:
                    logger.warning(f"Credential delete skipped scope: {e}")

    def delete_all(self) -> None:
        with self._lock:
            for field in FIELDS:
                self.delete(field)
        logger.info("Stored Spotify credentials removed")

    def migrate_legacy_tokens(self) -> bool:
        """Copy tokens from the private scope into an empty shared scope.

        Returns True when something was copied. Safe to call on every start.
        """
        with self._lock:
            try:
                if self.shared.read(ACCESS_TOKEN) is not None or self.shared.read(REFRESH_TOKEN) is not None:
                    return False
            except ScopeUnavailable as e:
                logger.debug(f"Skipping credential migration: {e}")
                return False
            copied = False
            for field in FIELDS:
                try:
                    value = self.private.read(field)
                except ScopeUnavailable:
                    return copied
                if value is None:
                    continue
                try:
                    self.shared.write(field, value)
                except ScopeUnavailable as e:
                    logger.warning(f"Credential migration aborted: {e}")
                    return copied
                copied = True
            if copied:
                logger.info("Migrated Spotify credentials into the shared scope")
            return copied

    # ---------------- Typed helpers -----------------
    def read_access_token(self) -> Optional[str]:
        return self.read(ACCESS_TOKEN)

    def read_refresh_token(self) -> Optional[str]:
        return self.read(REFRESH_TOKEN)

    def read_access_token_expiry(self) -> Optional[float]:
        raw = self.read(ACCESS_TOKEN_EXPIRY)
        if raw is None:
            return None
        try:
            return float(raw)
        except ValueError:
            logger.warning(f"Ignoring unparseable token expiry: {raw!r}")
            return None

    def save_access_token(self, token: str) -> None:
        self.write(ACCESS_TOKEN, token)

    def save_refresh_token(self, token: str) -> None:
        self.write(REFRESH_TOKEN, token)

    def save_access_token_expiry(self, expires_at: float) -> None:
        self.write(ACCESS_TOKEN_EXPIRY, repr(float(expires_at)))

    def delete_access_token(self) -> None:
        """Forget the access token and its expiry; the refresh token stays."""
        with self._lock:
            self.delete(ACCESS_TOKEN)
            self.delete(ACCESS_TOKEN_EXPIRY)

    def has_credentials(self) -> bool:
        return self.read_access_token() is not None or self.read_refresh_token() is not None


def build_credential_store(storage_cfg: Dict) -> CredentialStore:
    """Create the store described by the ``storage`` config section."""
    backend = storage_cfg.get('backend', 'keyring')
    private = FileScope(storage_cfg.get('private_file', 'data/credentials.json'))
    if backend == 'keyring':
        shared: CredentialScope = KeyringScope(storage_cfg.get('shared_service', 'tracksaver.shared'))
    elif backend == 'file':
        shared = FileScope(storage_cfg.get('shared_file', 'data/shared/credentials.json'))
    else:
        raise ValueError(f"Invalid storage backend: {backend}. Must be 'keyring' or 'file'")
    store = CredentialStore(shared, private)
    logger.debug(f"Credential store: shared={shared.name} private={private.name}")
    return store


__all__ = [
    "CredentialScope",
    "KeyringScope",
    "FileScope",
    "CredentialStore",
    "build_credential_store",
    "ACCESS_TOKEN",
    "REFRESH_TOKEN",
    "ACCESS_TOKEN_EXPIRY",
    "FIELDS",
]
