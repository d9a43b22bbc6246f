"""Typed configuration dataclasses for tracksaver.

Provides strongly-typed configuration objects that can be used throughout
the application for better type safety and IDE support.
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict, fields
from typing import List, Dict, Any


def _known(cls, data: Dict[str, Any] | None) -> Dict[str, Any]:
    """Keep only keys the dataclass declares (unknown env keys are ignored)."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (data or {}).items() if k in names}


@dataclass
class SpotifyConfig:
    """Spotify OAuth and API configuration."""
    client_id: str | None = None
    redirect_scheme: str = "http"
    redirect_host: str = "127.0.0.1"
    redirect_port: int = 9876
    redirect_path: str = "/callback"
    scope: str = (
        "user-read-currently-playing user-read-playback-state "
        "playlist-read-private playlist-read-collaborative "
        "playlist-modify-private playlist-modify-public"
    )
    api_base: str = "https://api.spotify.com/v1"
    accounts_base: str = "https://accounts.spotify.com"
    timeout_seconds: int = 300  # interactive login wait
    request_timeout_seconds: int = 30
    refresh_leeway_seconds: int = 60

    @property
    def redirect_uri(self) -> str:
        path = self.redirect_path if self.redirect_path.startswith('/') else '/' + self.redirect_path
        return f"{self.redirect_scheme}://{self.redirect_host}:{self.redirect_port}{path}"

    @property
    def authorize_url(self) -> str:
        return f"{self.accounts_base.rstrip('/')}/authorize"

    @property
    def token_url(self) -> str:
        return f"{self.accounts_base.rstrip('/')}/api/token"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for backward compatibility."""
        return asdict(self)


@dataclass
class StorageConfig:
    """Credential storage configuration."""
    backend: str = "keyring"  # "keyring" or "file"
    shared_service: str = "tracksaver.shared"
    shared_file: str = "data/shared/credentials.json"
    private_file: str = "data/credentials.json"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SelectionConfig:
    """Playlist slot configuration."""
    file: str = "data/selection.json"
    slot_start_hours: List[float] = field(default_factory=lambda: [0, 8, 16])
    boundary_belongs_to: str = "next"  # "next" or "previous"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class HistoryConfig:
    directory: str = "data/history"
    max_entries: int = 200

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AppConfig:
    """Root application configuration with all subsections."""
    log_level: str = "INFO"
    spotify: SpotifyConfig = field(default_factory=SpotifyConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "log_level": self.log_level,
            "spotify": self.spotify.to_dict(),
            "storage": self.storage.to_dict(),
            "selection": self.selection.to_dict(),
            "history": self.history.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Create AppConfig from a configuration dictionary."""
        return cls(
            log_level=data.get("log_level", "INFO"),
            spotify=SpotifyConfig(**_known(SpotifyConfig, data.get("spotify"))),
            storage=StorageConfig(**_known(StorageConfig, data.get("storage"))),
            selection=SelectionConfig(**_known(SelectionConfig, data.get("selection"))),
            history=HistoryConfig(**_known(HistoryConfig, data.get("history"))),
        )


__all__ = [
    "SpotifyConfig",
    "StorageConfig",
    "SelectionConfig",
    "HistoryConfig",
    "AppConfig",
]
