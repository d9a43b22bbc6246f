"""Spotify Web API package.

- client.py: authorized request pipeline and endpoints
- models.py: payload models decoded from Spotify JSON
"""

from .client import SpotifyAPIClient
from .models import AddTrackResult, CurrentTrack, Identity, Playlist

__all__ = [
    "SpotifyAPIClient",
    "AddTrackResult",
    "CurrentTrack",
    "Identity",
    "Playlist",
]
