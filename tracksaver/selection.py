"""Selected-playlist configuration.

Maps a logical slot to a playlist id. The ``default`` slot is used by
interactive saves; numbered shortcut slots (``1..slot_count``) split the day
into segments, each starting at an hour from ``slot_start_hours``. A slot
without a playlist falls back to the default playlist.

Which segment a time exactly on a boundary belongs to is configurable:
``boundary_belongs_to='next'`` (segment that starts there) or ``'previous'``
(segment that ends there).
"""

from __future__ import annotations
import json
import logging
import threading
from bisect import bisect_left, bisect_right
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Sequence

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "default"


class PlaylistSelection:
    def __init__(
        self,
        path: str | Path,
        slot_start_hours: Sequence[float] = (0, 8, 16),
        boundary_belongs_to: str = "next",
    ):
        starts = [float(h) for h in slot_start_hours]
        if not starts:
            raise ValueError("slot_start_hours must contain at least one hour")
        if any(h < 0 or h >= 24 for h in starts):
            raise ValueError(f"slot_start_hours must be within [0, 24): {list(slot_start_hours)}")
        if any(b <= a for a, b in zip(starts, starts[1:])):
            raise ValueError(f"slot_start_hours must be strictly increasing: {list(slot_start_hours)}")
        if boundary_belongs_to not in ("next", "previous"):
            raise ValueError(f"Invalid boundary_belongs_to: {boundary_belongs_to}. Must be 'next' or 'previous'")
        self.path = Path(path)
        self.slot_start_hours: List[float] = starts
        self.boundary_belongs_to = boundary_belongs_to
        self._lock = threading.Lock()

    @property
    def slot_count(self) -> int:
        return len(self.slot_start_hours)

    def _key(self, slot: int | None) -> str:
        if slot is None:
            return DEFAULT_SLOT
        if not 1 <= slot <= self.slot_count:
            raise ValueError(f"Invalid slot {slot}. Must be between 1 and {self.slot_count}")
        return str(slot)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable selection file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str) and v}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding='utf-8')

    def all(self) -> Dict[str, str]:
        with self._lock:
            return self._load()

    def get(self, slot: int | None = None) -> str:
        """Playlist id configured for ``slot`` (None = default); '' when unset."""
        key = self._key(slot)
        with self._lock:
            return self._load().get(key, "")

    def set(self, playlist_id: str, slot: int | None = None) -> None:
        if not playlist_id:
            raise ValueError("playlist_id must not be empty")
        key = self._key(slot)
        with self._lock:
            data = self._load()
            data[key] = playlist_id
            self._save(data)
        logger.debug(f"Selected playlist {playlist_id} for slot {key}")

    def clear(self, slot: int | None = None) -> None:
        key = self._key(slot)
        with self._lock:
            data = self._load()
            if data.pop(key, None) is not None:
                self._save(data)

    def active_slot(self, now: datetime) -> int:
        """1-based slot whose time-of-day segment contains ``now``."""
        t = now.hour + now.minute / 60 + now.second / 3600 + now.microsecond / 3_600_000_000
        if self.boundary_belongs_to == "previous":
            idx = bisect_left(self.slot_start_hours, t) - 1
        else:
            idx = bisect_right(self.slot_start_hours, t) - 1
        # Before the first start hour we are still in the last segment of the previous day
        return idx % self.slot_count + 1

    def resolve(self, slot: int | None = None, now: datetime | None = None) -> str:
        """Playlist id for an automation save; '' when nothing is configured.

        An explicit slot is used as given; otherwise the slot active at ``now``.
        """
        if slot is None:
            slot = self.active_slot(now or datetime.now())
        data = self.all()
        return data.get(self._key(slot)) or data.get(DEFAULT_SLOT, "")


__all__ = ["PlaylistSelection", "DEFAULT_SLOT"]
