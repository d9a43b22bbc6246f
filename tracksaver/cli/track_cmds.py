"""Track commands: save, shortcut, history."""

from __future__ import annotations

import click

from ..errors import TrackSaverError
from ..history import STATUS_SUCCESS
from ..services.playlist_service import load_account_overview
from ..services.save_track_service import encode_failure, record_history, run_shortcut, save_current_track
from ..utils.output import error, info, section_header, success, warning
from .helpers import api_errors, cli, get_app


@cli.command()
@click.option('--slot', type=int, default=None, help='Save to the playlist of this shortcut slot')
@click.pass_context
def save(ctx: click.Context, slot: int | None):
    """Save the currently playing track to the selected playlist."""
    app = get_app(ctx)
    try:
        playlist_id = app.selection.resolve(slot) if slot is not None else app.selection.get()
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--slot')
    if not playlist_id:
        raise click.ClickException("No playlist selected. Run 'tracksaver select PLAYLIST_ID' first.")
    with api_errors(app):
        overview = load_account_overview(app)
    outcome = save_current_track(app, playlist_id)
    playlist_name = overview.playlist_name(playlist_id)
    record_history(app, overview.identity.id, outcome, playlist_name=playlist_name)
    if outcome.ok and outcome.result is not None:
        r = outcome.result
        click.echo(success(f"Added {r.track_name} by {r.artist_name} to {playlist_name or playlist_id}"))
        return
    if outcome.duplicate is not None:
        dup = outcome.duplicate
        click.echo(warning(f"{dup.track_name} by {dup.artist_name} is already in {playlist_name or playlist_id}"))
        return
    if outcome.informational:
        click.echo(warning(outcome.message))
        return
    click.echo(error(outcome.message))
    ctx.exit(1)


@cli.command()
@click.option('--slot', type=int, default=None, help='Shortcut slot; defaults to the slot active now')
@click.pass_context
def shortcut(ctx: click.Context, slot: int | None):
    """Save the current track and print a compact outcome for automations.

    \b
    Output:
      <track name>~success~<track id>
      ~~~<message>
    """
    try:
        app = get_app(ctx)
    except (TrackSaverError, ValueError, OSError) as e:
        click.echo(encode_failure(str(e)))
        return
    click.echo(run_shortcut(app, slot))


@cli.command()
@click.option('--delete', 'delete_index', type=int, default=None, help='Remove the entry at this index')
@click.option('--clear', is_flag=True, help='Remove all entries')
@click.pass_context
def history(ctx: click.Context, delete_index: int | None, clear: bool):
    """Show (or edit) the history of saves for the signed-in account."""
    app = get_app(ctx)
    with api_errors(app):
        user_id = app.client.fetch_identity().id
    if clear:
        app.history.clear(user_id)
        click.echo(success("History cleared"))
        return
    if delete_index is not None:
        if not app.history.delete(user_id, delete_index):
            raise click.BadParameter(f"No history entry at index {delete_index}", param_hint='--delete')
        click.echo(success(f"Deleted entry {delete_index}"))
        return
    items = app.history.load(user_id)
    click.echo(section_header(f"History ({len(items)})"))
    if not items:
        click.echo("  Nothing saved yet.")
        return
    for idx, item in enumerate(items):
        mark = click.style("✓", fg='green') if item.status == STATUS_SUCCESS else click.style("✗", fg='red')
        where = f" -> {item.playlist_name}" if item.playlist_name else ""
        click.echo(f"{idx:>3} {mark} {item.date}  {item.track_name} - {item.artist_name}{where}")
    click.echo(info("Use --delete INDEX to remove an entry"))


__all__ = ["save", "shortcut", "history"]
