"""Spotify API client.

Every call goes through :meth:`SpotifyAPIClient._dispatch`, which obtains a
bearer token from the refresh policy, executes the request and classifies the
outcome. A 401 answer removes the cached access token (the refresh token is
kept) so the next call refreshes instead of reusing a known-bad token.
"""

from __future__ import annotations
import logging
import threading
import time
from typing import Any, Dict, Iterator, List, Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_random_exponential

from ..auth.credential_store import CredentialStore
from ..auth.token_policy import TokenRefreshPolicy
from ..errors import (
    DecodingFailed,
    DuplicateTrack,
    HttpStatus,
    NoCurrentTrack,
    TransportFailed,
    Unauthorized,
)
from .models import AddTrackResult, CurrentTrack, Identity, Page, Playlist

logger = logging.getLogger(__name__)
API_BASE = "https://api.spotify.com/v1"
PLAYLIST_PAGE_SIZE = 50
TRACK_PAGE_SIZE = 100
MAX_RETRY_AFTER_SECONDS = 30


class RateLimited(HttpStatus):
    """HTTP 429; retried before it reaches callers as a plain HttpStatus."""

    def __init__(self, retry_after: float):
        super().__init__(429)
        self.retry_after = retry_after


class SpotifyAPIClient:
    """Spotify Web API client bound to one credential store.

    One instance is meant to be shared by all callers of a process.
    """

    def __init__(
        self,
        tokens: TokenRefreshPolicy,
        store: CredentialStore,
        http: requests.Session | None = None,
        api_base: str = API_BASE,
        timeout: float = 30,
    ):
        self.tokens = tokens
        self.store = store
        self.http = http or requests.Session()
        self.api_base = api_base.rstrip('/')
        self.timeout = timeout
        self._playlist_locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ---------------- Low-level -----------------
    def _url(self, path_or_url: str) -> str:
        if path_or_url.startswith("http://") or path_or_url.startswith("https://"):
            return path_or_url
        return self.api_base + path_or_url

    @retry(
        retry=retry_if_exception_type(RateLimited),
        stop=stop_after_attempt(5),
        wait=wait_random_exponential(multiplier=1, max=30),
        reraise=True,
    )
    def _send(
        self,
        method: str,
        url: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        token = self.tokens.ensure_access_token()
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        try:
            r = self.http.request(method, url, headers=headers, params=params, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportFailed(e) from e
        if r.status_code == 429:
            # Spotify returns Retry-After header
            try:
                ra = float(r.headers.get("Retry-After", "1"))
            except ValueError:
                ra = 1.0
            logger.warning(f"Rate limited on {method} {url}; retrying after {ra}s")
            time.sleep(min(ra, MAX_RETRY_AFTER_SECONDS))
            raise RateLimited(ra)
        return r

    def _dispatch(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        """Execute an authorized request; raise on anything but 2xx."""
        url = self._url(path)
        r = self._send(method, url, params=params, json=json)
        if r.status_code == 401:
            logger.warning(f"{method} {url} answered 401; dropping cached access token")
            self.store.delete_access_token()
            raise Unauthorized()
        if not 200 <= r.status_code < 300:
            logger.debug(f"{method} {url} answered {r.status_code}")
            raise HttpStatus(r.status_code)
        return r

    @staticmethod
    def _json(r: requests.Response) -> Any:
        try:
            return r.json()
        except ValueError as e:
            raise DecodingFailed(e) from e

    def _pages(self, path: str, params: Dict[str, Any]) -> Iterator[Page]:
        """Follow ``next`` cursors until exhausted. Pages are fetched sequentially."""
        url: Optional[str] = path
        query: Dict[str, Any] | None = params
        while url:
            page = Page.from_dict(self._json(self._dispatch("GET", url, params=query)))
            yield page
            url = page.next
            query = None  # the cursor URL already carries the query

    # ---------------- Public endpoints -----------------
    def fetch_identity(self) -> Identity:
        return Identity.from_dict(self._json(self._dispatch("GET", "/me")))

    def fetch_playlists(self) -> List[Playlist]:
        """Fetch every playlist of the current user (all pages)."""
        playlists: List[Playlist] = []
        for page in self._pages("/me/playlists", {"limit": PLAYLIST_PAGE_SIZE}):
            playlists.extend(Playlist.from_dict(item) for item in page.items)
            logger.debug(f"Fetched {len(page.items)} playlists (total={len(playlists)})")
        return playlists

    def fetch_editable_playlists(self, user_id: str | None = None) -> List[Playlist]:
        """Playlists the user owns or that are collaborative."""
        if user_id is None:
            user_id = self.fetch_identity().id
        return [pl for pl in self.fetch_playlists() if pl.editable_by(user_id)]

    def fetch_current_track(self) -> CurrentTrack:
        r = self._dispatch("GET", "/me/player/currently-playing")
        if r.status_code == 204 or not r.content:
            raise NoCurrentTrack()
        data = self._json(r)
        if not isinstance(data, dict):
            raise DecodingFailed(TypeError("currently-playing payload must be an object"))
        item = data.get("item")
        if not item:
            raise NoCurrentTrack()
        track = CurrentTrack.from_item(item)
        if track is None:
            raise NoCurrentTrack()
        return track

    def playlist_contains_track(self, playlist_id: str, track_id: str) -> bool:
        params = {"limit": TRACK_PAGE_SIZE, "fields": "items(track(id)),next"}
        for page in self._pages(f"/playlists/{playlist_id}/tracks", params):
            for item in page.items:
                if not isinstance(item, dict):
                    raise DecodingFailed(TypeError(f"playlist item is {type(item).__name__}, not an object"))
                track = item.get("track")
                # Removed or unavailable tracks come back as null
                if track is None:
                    continue
                if not isinstance(track, dict):
                    raise DecodingFailed(TypeError(f"playlist track is {type(track).__name__}, not an object"))
                if track.get("id") == track_id:
                    return True
        return False

    def _playlist_lock(self, playlist_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._playlist_locks.setdefault(playlist_id, threading.Lock())

    def add_current_track(self, playlist_id: str) -> AddTrackResult:
        """Append the currently playing track unless the playlist already has it.

        Raises:
            NoCurrentTrack: nothing playing / no playable URI
            DuplicateTrack: track already present; playlist untouched
            Unauthorized, HttpStatus, DecodingFailed, TransportFailed
        """
        track = self.fetch_current_track()
        # Scan and add must not interleave with another save into the same playlist
        with self._playlist_lock(playlist_id):
            if track.id and self.playlist_contains_track(playlist_id, track.id):
                logger.info(f"'{track.display_name}' already in playlist {playlist_id}")
                raise DuplicateTrack(track.display_name, track.artist_name, track.artwork_url)
            self._dispatch("POST", f"/playlists/{playlist_id}/tracks", json={"uris": [track.uri]})
        logger.info(f"Added '{track.display_name}' by {track.artist_name} to playlist {playlist_id}")
        return AddTrackResult(
            track_id=track.id or "unknown",
            track_name=track.display_name,
            artist_name=track.artist_name,
            artwork_url=track.artwork_url,
        )


__all__ = ["SpotifyAPIClient", "RateLimited", "API_BASE"]
