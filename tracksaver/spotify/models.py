"""Spotify Web API payload models.

Every field Spotify may omit is optional here. Decoding problems raise
:class:`DecodingFailed`; values are never guessed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import DecodingFailed


def _decode(cls_name: str, fn):
    try:
        return fn()
    except DecodingFailed:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DecodingFailed(ValueError(f"{cls_name}: {e!r}")) from e


def _image_urls(images: Any) -> List[str]:
    if images is None:
        return []
    return [img["url"] for img in images if img and img.get("url")]


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


@dataclass
class Identity:
    id: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Identity":
        def build():
            urls = _image_urls(data.get("images"))
            return cls(
                id=_require_str(data, "id"),
                display_name=data.get("display_name"),
                avatar_url=urls[0] if urls else None,
            )
        return _decode("Identity", build)


@dataclass
class Playlist:
    id: str
    name: str
    owner_id: Optional[str]
    description: Optional[str] = None
    image_urls: List[str] = field(default_factory=list)
    is_collaborative: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Playlist":
        def build():
            owner = data.get("owner") or {}
            return cls(
                id=_require_str(data, "id"),
                name=_require_str(data, "name"),
                owner_id=owner.get("id"),
                description=data.get("description"),
                image_urls=_image_urls(data.get("images")),
                is_collaborative=data.get("collaborative"),
            )
        return _decode("Playlist", build)

    def editable_by(self, user_id: str) -> bool:
        return self.owner_id == user_id or self.is_collaborative is True


@dataclass
class Page:
    """One page of a cursor-paginated listing."""
    items: List[Dict[str, Any]]
    next: Optional[str]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Page":
        def build():
            items = data["items"]
            if not isinstance(items, list):
                raise TypeError("items must be a list")
            next_url = data.get("next") or None
            if next_url is not None and not isinstance(next_url, str):
                raise TypeError("next must be a URL string")
            return cls(items=items, next=next_url)
        return _decode("Page", build)


@dataclass
class CurrentTrack:
    uri: str
    artist_name: str
    id: Optional[str] = None
    name: Optional[str] = None
    artwork_url: Optional[str] = None

    UNKNOWN_TRACK = "Unknown track"
    UNKNOWN_ARTIST = "Unknown artist"

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> Optional["CurrentTrack"]:
        """Build a snapshot from a currently-playing ``item``.

        Returns None when the item has no playable URI.
        """
        def build():
            uri = item.get("uri")
            if not uri:
                return None
            artists = item.get("artists") or []
            artist_name = artists[0]["name"] if artists else cls.UNKNOWN_ARTIST
            album = item.get("album") or {}
            # Episodes carry images on the item itself
            urls = _image_urls(album.get("images")) or _image_urls(item.get("images"))
            return cls(
                uri=uri,
                artist_name=artist_name,
                id=item.get("id") or None,
                name=item.get("name"),
                artwork_url=urls[0] if urls else None,
            )
        return _decode("CurrentTrack", build)

    @property
    def display_name(self) -> str:
        return self.name or self.UNKNOWN_TRACK


@dataclass
class AddTrackResult:
    track_id: str
    track_name: str
    artist_name: str
    artwork_url: Optional[str] = None


__all__ = ["Identity", "Playlist", "Page", "CurrentTrack", "AddTrackResult"]
