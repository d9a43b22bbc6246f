"""Service layer shared by the CLI and automation entry points."""

from .playlist_service import AccountOverview, load_account_overview
from .save_track_service import SaveOutcome, record_history, run_shortcut, save_current_track

__all__ = [
    "AccountOverview",
    "load_account_overview",
    "SaveOutcome",
    "record_history",
    "run_shortcut",
    "save_current_track",
]
