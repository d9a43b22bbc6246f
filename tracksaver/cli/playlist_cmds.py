from __future__ import annotations
from datetime import datetime

import click

from ..selection import DEFAULT_SLOT
from ..services.playlist_service import filter_editable, load_account_overview
from ..utils.output import info, playlist_line, section_header, success
from .helpers import api_errors, cli, get_app


def _hhmm(hour: float) -> str:
    minutes = int(round(hour * 60))
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _slot_option(f):
    return click.option(
        '--slot', type=int, default=None,
        help='Shortcut slot (1-based). Omit for the default playlist.',
    )(f)


@cli.command()
@click.pass_context
def whoami(ctx: click.Context):
    """Show the signed-in Spotify account."""
    app = get_app(ctx)
    with api_errors(app):
        me = app.client.fetch_identity()
    click.echo(f"{me.display_name or me.id} ({me.id})")
    if me.avatar_url:
        click.echo(info(f"Avatar: {me.avatar_url}"))


@cli.command()
@click.option('--all', 'show_all', is_flag=True, help='Include playlists you cannot add to')
@click.pass_context
def playlists(ctx: click.Context, show_all: bool):
    """List playlists you can add tracks to."""
    app = get_app(ctx)
    with api_errors(app):
        if show_all:
            me = app.client.fetch_identity()
            items = app.client.fetch_playlists()
            selected_id = app.selection.get()
        else:
            overview = load_account_overview(app)
            me, items, selected_id = overview.identity, overview.playlists, overview.selected_id
    editable_ids = {pl.id for pl in filter_editable(items, me.id)}
    click.echo(section_header(f"Playlists for {me.display_name or me.id} ({len(items)})"))
    if not items:
        click.echo("  No playlists found.")
        return
    for pl in items:
        marker = "*" if pl.id == selected_id else ""
        if show_all and pl.id not in editable_ids:
            marker = (marker + " read-only").strip()
        click.echo(playlist_line(pl.name, pl.id, marker))


@cli.command()
@click.argument('playlist_id')
@_slot_option
@click.pass_context
def select(ctx: click.Context, playlist_id: str, slot: int | None):
    """Choose the playlist saves go to."""
    app = get_app(ctx)
    try:
        app.selection.set(playlist_id, slot)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--slot')
    target = f"slot {slot}" if slot is not None else "default"
    click.echo(success(f"Selected {playlist_id} for {target}"))


@cli.command()
@_slot_option
@click.pass_context
def unselect(ctx: click.Context, slot: int | None):
    """Remove a playlist selection."""
    app = get_app(ctx)
    try:
        app.selection.clear(slot)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--slot')
    click.echo(success(f"Cleared {'slot ' + str(slot) if slot is not None else 'default'} selection"))


@cli.command()
@click.pass_context
def selection(ctx: click.Context):
    """Show the selected playlists and the slot active right now."""
    app = get_app(ctx)
    sel = app.selection
    data = sel.all()
    click.echo(f"{DEFAULT_SLOT}: {data.get(DEFAULT_SLOT) or '(none)'}")
    hours = sel.slot_start_hours
    for idx, start in enumerate(hours, start=1):
        end = hours[idx % len(hours)]
        own = data.get(str(idx))
        shown = own or (f"{data[DEFAULT_SLOT]} (default)" if data.get(DEFAULT_SLOT) else "(none)")
        click.echo(f"slot {idx} [{_hhmm(start)}-{_hhmm(end)}): {shown}")
    click.echo(info(f"Active slot now: {sel.active_slot(datetime.now())}"))


__all__ = ["whoami", "playlists", "select", "unselect", "selection"]
