"""Save-current-track operations for interactive and automation callers.

Automation callers (shortcuts, widget buttons, schedulers) get a compact
delimited string so the host can branch on the outcome without parsing
exceptions:

    success: ``<track name>~success~<track id>``
    failure: ``~~~<message>``

Nothing raised by the core escapes :func:`run_shortcut`.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..container import AppContainer
from ..errors import DuplicateTrack, NoCurrentTrack, TrackSaverError, Unauthorized
from ..history import HistoryItem
from ..spotify.models import AddTrackResult

logger = logging.getLogger(__name__)

SEPARATOR = "~"


def encode_segment(value: str) -> str:
    return value.replace(SEPARATOR, "-").replace("\r", " ").replace("\n", " ")


def encode_success(track_name: str, track_id: str) -> str:
    return f"{encode_segment(track_name)}~success~{encode_segment(track_id)}"


def encode_failure(message: str) -> str:
    return f"~~~{encode_segment(message)}"


@dataclass
class SaveOutcome:
    """Result of one save attempt, in a form every caller can present."""
    ok: bool
    message: str
    result: Optional[AddTrackResult] = None
    duplicate: Optional[DuplicateTrack] = None
    # Nothing playing / already present: shown as a message, not a failure
    informational: bool = False

    def to_compact(self) -> str:
        if self.ok and self.result is not None:
            return encode_success(self.result.track_name, self.result.track_id)
        return encode_failure(self.message)


def save_current_track(app: AppContainer, playlist_id: str) -> SaveOutcome:
    """Add the playing track to ``playlist_id`` and translate the outcome.

    ``Unauthorized`` signs the session out (credentials are wiped) so the next
    interactive action asks for a login.
    """
    try:
        result = app.client.add_current_track(playlist_id)
    except Unauthorized:
        app.auth.invalidate()
        return SaveOutcome(False, "Not authorized")
    except NoCurrentTrack:
        return SaveOutcome(False, "No track playing", informational=True)
    except DuplicateTrack as dup:
        return SaveOutcome(False, "Already in playlist", duplicate=dup, informational=True)
    except TrackSaverError as e:
        logger.warning(f"Saving current track failed: {e}")
        return SaveOutcome(False, str(e))
    return SaveOutcome(True, f"Added {result.track_name} by {result.artist_name}", result=result)


def run_shortcut(app: AppContainer, slot: int | None = None, now: datetime | None = None) -> str:
    """Automation entry point: always returns a compact outcome string."""
    try:
        playlist_id = app.selection.resolve(slot, now=now)
        if not playlist_id:
            return encode_failure("No playlist selected")
        if not app.store.has_credentials():
            return encode_failure("Not signed in")
        return save_current_track(app, playlist_id).to_compact()
    except (TrackSaverError, ValueError, OSError) as e:
        logger.warning(f"Shortcut failed: {e}")
        return encode_failure(str(e))


def record_history(app: AppContainer, user_id: str, outcome: SaveOutcome, playlist_name: str | None = None) -> None:
    """Append an interactive save attempt to the user's history.

    Informational outcomes (nothing playing, duplicate) are not recorded.
    """
    if outcome.ok and outcome.result is not None:
        item = HistoryItem.success(
            outcome.result.track_name,
            outcome.result.artist_name,
            artwork_url=outcome.result.artwork_url,
            playlist_name=playlist_name,
        )
    elif outcome.informational:
        return
    else:
        item = HistoryItem.failure(playlist_name=playlist_name)
    app.history.add(user_id, item)


__all__ = [
    "SaveOutcome",
    "save_current_track",
    "run_shortcut",
    "record_history",
    "encode_success",
    "encode_failure",
    "encode_segment",
]
