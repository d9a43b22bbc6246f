"""Account overview: identity plus the playlists the user can add to."""

from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from ..container import AppContainer
from ..spotify.models import Identity, Playlist

logger = logging.getLogger(__name__)


@dataclass
class AccountOverview:
    identity: Identity
    playlists: List[Playlist] = field(default_factory=list)
    selected_id: Optional[str] = None

    @property
    def selected(self) -> Optional[Playlist]:
        return next((pl for pl in self.playlists if pl.id == self.selected_id), None)

    def playlist_name(self, playlist_id: str) -> Optional[str]:
        return next((pl.name for pl in self.playlists if pl.id == playlist_id), None)


def filter_editable(playlists: List[Playlist], user_id: str) -> List[Playlist]:
    """Only playlists the user owns or that are collaborative."""
    return [pl for pl in playlists if pl.editable_by(user_id)]


def choose_selected(all_playlists: List[Playlist], editable: List[Playlist], default_id: str) -> Optional[str]:
    """Configured default when it still exists, else the first editable playlist."""
    if default_id and any(pl.id == default_id for pl in all_playlists):
        return default_id
    return editable[0].id if editable else None


def load_account_overview(app: AppContainer) -> AccountOverview:
    """Fetch identity and playlists in parallel.

    Both requests may find an expired token at the same time; the refresh
    policy collapses them into a single refresh.
    """
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="overview") as pool:
        me_call = pool.submit(app.client.fetch_identity)
        playlists_call = pool.submit(app.client.fetch_playlists)
        identity = me_call.result()
        all_playlists = playlists_call.result()
    editable = filter_editable(all_playlists, identity.id)
    selected = choose_selected(all_playlists, editable, app.selection.get())
    logger.debug(f"{len(editable)} of {len(all_playlists)} playlists are editable")
    return AccountOverview(identity=identity, playlists=editable, selected_id=selected)


__all__ = ["AccountOverview", "filter_editable", "choose_selected", "load_account_overview"]
