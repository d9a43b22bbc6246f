"""Outcome taxonomy shared by every tracksaver caller.

All remote and parse failures are translated into these exceptions at the API
client boundary, so callers never see raw ``requests`` exceptions. Two members
are not faults at all: :class:`NoCurrentTrack` and :class:`DuplicateTrack` are
informational outcomes that callers present as messages.
"""

from __future__ import annotations


class TrackSaverError(Exception):
    """Base class for all tracksaver errors."""

    message = "Unexpected tracksaver error."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


# ---------------- API client -----------------

class SpotifyAPIError(TrackSaverError):
    message = "Spotify request failed."


class Unauthorized(SpotifyAPIError):
    message = "Not authorized (401). Please sign in again."


class MissingAccessToken(SpotifyAPIError):
    message = "Access token is missing. Please sign in."


class MissingRefreshToken(MissingAccessToken):
    message = "Refresh token is missing. Please sign in."


class InvalidResponse(SpotifyAPIError):
    message = "Invalid Spotify response."


class TransportFailed(SpotifyAPIError):
    message = "Could not reach Spotify."

    def __init__(self, cause: BaseException | None = None):
        detail = f"{self.message} ({cause})" if cause else None
        super().__init__(detail)
        self.cause = cause


class HttpStatus(SpotifyAPIError):
    def __init__(self, status_code: int):
        super().__init__(f"Spotify responded with status code {status_code}.")
        self.status_code = status_code


class DecodingFailed(SpotifyAPIError):
    def __init__(self, cause: BaseException):
        super().__init__(f"Decoding failed: {cause}")
        self.cause = cause


class NoCurrentTrack(SpotifyAPIError):
    message = "No track is currently playing."


class DuplicateTrack(SpotifyAPIError):
    """The track is already in the target playlist; nothing was changed."""

    message = "Track is already in the playlist."

    def __init__(self, track_name: str, artist_name: str, artwork_url: str | None = None):
        super().__init__()
        self.track_name = track_name
        self.artist_name = artist_name
        self.artwork_url = artwork_url


# ---------------- Interactive login -----------------

class AuthError(TrackSaverError):
    message = "Spotify login failed."


class InvalidConfig(AuthError):
    message = "Spotify configuration is invalid."


class MissingAuthCode(AuthError):
    message = "Authorization code is missing."


class MissingCallbackURL(AuthError):
    message = "Callback URL is missing."


class SessionFailed(AuthError):
    message = "Login session could not be completed."


# ---------------- Local state -----------------

class CredentialStoreError(TrackSaverError):
    message = "Credential storage is unavailable."


class ScopeUnavailable(CredentialStoreError):
    """A single storage scope refused the operation."""


class SessionStateError(TrackSaverError):
    message = "Invalid session state transition."


__all__ = [
    "TrackSaverError",
    "SpotifyAPIError",
    "Unauthorized",
    "MissingAccessToken",
    "MissingRefreshToken",
    "InvalidResponse",
    "TransportFailed",
    "HttpStatus",
    "DecodingFailed",
    "NoCurrentTrack",
    "DuplicateTrack",
    "AuthError",
    "InvalidConfig",
    "MissingAuthCode",
    "MissingCallbackURL",
    "SessionFailed",
    "CredentialStoreError",
    "ScopeUnavailable",
    "SessionStateError",
]
