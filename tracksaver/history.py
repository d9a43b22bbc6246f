"""Per-identity history of save attempts, newest first."""

from __future__ import annotations
import json
import logging
import re
import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_FAIL = "fail"


@dataclass
class HistoryItem:
    track_name: str
    artist_name: str
    date: str
    status: str
    artwork_url: Optional[str] = None
    playlist_name: Optional[str] = None

    @classmethod
    def success(cls, track_name: str, artist_name: str, artwork_url: str | None = None,
                playlist_name: str | None = None, when: datetime | None = None) -> "HistoryItem":
        return cls(
            track_name=track_name,
            artist_name=artist_name,
            date=(when or datetime.now()).isoformat(timespec='seconds'),
            status=STATUS_SUCCESS,
            artwork_url=artwork_url,
            playlist_name=playlist_name,
        )

    @classmethod
    def failure(cls, playlist_name: str | None = None, when: datetime | None = None) -> "HistoryItem":
        return cls(
            track_name="—",
            artist_name="—",
            date=(when or datetime.now()).isoformat(timespec='seconds'),
            status=STATUS_FAIL,
            playlist_name=playlist_name,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryItem":
        return cls(
            track_name=data["track_name"],
            artist_name=data["artist_name"],
            date=data["date"],
            status=data["status"],
            artwork_url=data.get("artwork_url"),
            playlist_name=data.get("playlist_name"),
        )


class HistoryStore:
    def __init__(self, directory: str | Path, max_entries: int = 200):
        self.directory = Path(directory)
        self.max_entries = max_entries
        self._lock = threading.Lock()

    def path_for(self, user_id: str) -> Path:
        safe = re.sub(r'[^A-Za-z0-9_.-]', '_', user_id)
        return self.directory / f"history_{safe}.json"

    def _load(self, user_id: str) -> List[HistoryItem]:
        path = self.path_for(user_id)
        if not path.exists():
            return []
        try:
            raw = json.loads(path.read_text(encoding='utf-8'))
            return [HistoryItem.from_dict(entry) for entry in raw]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable history file {path}: {e}")
            return []

    def _save(self, user_id: str, items: List[HistoryItem]) -> None:
        path = self.path_for(user_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps([i.to_dict() for i in items], indent=2, ensure_ascii=False), encoding='utf-8')

    def load(self, user_id: str) -> List[HistoryItem]:
        with self._lock:
            return self._load(user_id)

    def add(self, user_id: str, item: HistoryItem) -> None:
        with self._lock:
            items = self._load(user_id)
            items.insert(0, item)
            del items[self.max_entries:]
            self._save(user_id, items)

    def delete(self, user_id: str, index: int) -> bool:
        with self._lock:
            items = self._load(user_id)
            if not 0 <= index < len(items):
                return False
            items.pop(index)
            self._save(user_id, items)
            return True

    def clear(self, user_id: str) -> None:
        with self._lock:
            path = self.path_for(user_id)
            if path.exists():
                path.unlink()


__all__ = ["HistoryItem", "HistoryStore", "STATUS_SUCCESS", "STATUS_FAIL"]
