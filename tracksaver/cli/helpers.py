from __future__ import annotations
import copy
from contextlib import contextmanager
from typing import Iterator

import click

from ..config import load_typed_config
from ..container import AppContainer
from ..errors import MissingAccessToken, TrackSaverError, Unauthorized
from ..version import __version__


def redact_config(cfg: dict) -> dict:
    result = copy.deepcopy(cfg)
    spotify = result.get('spotify', {})
    if isinstance(spotify, dict) and spotify.get('client_id'):
        spotify['client_id'] = '*** redacted ***'
    return result


@click.group()
@click.version_option(version=__version__, prog_name="tracksaver")
@click.pass_context
def cli(ctx: click.Context):
    """Save the song playing on Spotify into a playlist, without duplicates.

    \b
    TYPICAL WORKFLOWS:

    \b
    Initial Setup:
      tracksaver login                 # Authenticate with Spotify (browser)
      tracksaver playlists             # List playlists you can add to
      tracksaver select PLAYLIST_ID    # Choose the default playlist

    \b
    Saving:
      tracksaver save                  # Save the current track (interactive)
      tracksaver shortcut              # Same, compact output for automations
      tracksaver shortcut --slot 2     # Use the playlist of shortcut slot 2

    \b
    Maintenance:
      tracksaver status                # Sign-in state and token expiry
      tracksaver history               # Recent saves
      tracksaver logout                # Forget stored credentials
    """
    # Tests (and embedding hosts) may pass a ready AppContainer or a config dict
    if not isinstance(ctx.obj, (AppContainer, dict)):
        ctx.obj = None


def get_app(ctx: click.Context) -> AppContainer:
    """Return the process-wide container, building it on first use."""
    root = ctx.find_root()
    if isinstance(root.obj, AppContainer):
        return root.obj
    overrides = root.obj if isinstance(root.obj, dict) else None
    app = AppContainer.from_config(load_typed_config(overrides))
    root.obj = app
    return app


@contextmanager
def api_errors(app: AppContainer) -> Iterator[None]:
    """Translate core errors into CLI errors with a hint on what to do next."""
    try:
        yield
    except Unauthorized:
        app.auth.invalidate()
        raise click.ClickException("Spotify rejected the session. Run 'tracksaver login' again.")
    except MissingAccessToken:
        raise click.ClickException("Not signed in. Run 'tracksaver login' first.")
    except TrackSaverError as e:
        raise click.ClickException(str(e))


__all__ = ["cli", "get_app", "api_errors", "redact_config"]
