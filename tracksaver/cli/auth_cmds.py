"""Authentication commands: login, logout, status, redirect-uri."""

from __future__ import annotations
import json as _json
import time

import click

from ..errors import TrackSaverError
from ..utils.output import error, info, success, warning
from .helpers import cli, get_app, redact_config


@cli.command()
@click.option('--force', is_flag=True, help='Sign out first if already signed in')
@click.pass_context
def login(ctx: click.Context, force: bool):
    """Sign in with Spotify in the browser (PKCE, no client secret)."""
    app = get_app(ctx)
    if app.auth.signed_in:
        if not force:
            click.echo(warning("Already signed in. Use --force to sign in again."))
            return
        app.auth.logout()
    click.echo(info(f"Redirect URI: {app.config.spotify.redirect_uri}"))
    try:
        app.auth.login()
    except KeyboardInterrupt:
        click.echo(error("Login cancelled."))
        ctx.exit(1)
    except TrackSaverError as e:
        raise click.ClickException(str(e))
    click.echo(success("Signed in to Spotify."))


@cli.command()
@click.pass_context
def logout(ctx: click.Context):
    """Forget stored Spotify credentials."""
    app = get_app(ctx)
    if not app.auth.signed_in:
        click.echo("Not signed in.")
        return
    app.auth.logout()
    click.echo(success("Signed out."))


@cli.command()
@click.pass_context
def status(ctx: click.Context):
    """Show sign-in state and access token expiry."""
    app = get_app(ctx)
    click.echo(f"Session: {app.auth.state.value}")
    exp = app.store.read_access_token_expiry()
    if app.store.read_access_token() and exp:
        remaining = int(exp - time.time())
        click.echo(
            f"Access token expires at: {time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(exp))} (in {remaining}s)"
        )
    else:
        click.echo("Access token: none cached")
    click.echo(f"Refresh token: {'present' if app.store.read_refresh_token() else 'missing'}")


@cli.command(name="redirect-uri")
@click.pass_context
def redirect_uri(ctx: click.Context):
    """Show OAuth redirect URI for Spotify app configuration."""
    sp = get_app(ctx).config.spotify
    uri = sp.redirect_uri
    click.echo(uri)
    click.echo("\nValidation checklist:")
    for line in [
        f"1. Spotify Dashboard has EXACT entry: {uri}",
        f"2. Port matches (expected {sp.redirect_port})",
        f"3. Path matches (expected {sp.redirect_path})",
        "4. Client ID corresponds to the app whose dashboard you edited",
    ]:
        click.echo(f" - {line}")


@cli.command(name="config")
@click.option("--section", "-s", help="Only show a specific top-level section (e.g. spotify, storage).")
@click.option("--redact", is_flag=True, help="Redact sensitive values like client_id.")
@click.pass_context
def show_config(ctx: click.Context, section: str | None, redact: bool):
    """Show current configuration settings."""
    data = get_app(ctx).config.to_dict()
    if section:
        section = section.lower()
        if section not in data:
            raise click.UsageError(f"Unknown section '{section}'. Available: {', '.join(sorted(data.keys()))}")
        data = {section: data[section]}
    if redact:
        data = redact_config(data)
    click.echo(_json.dumps(data, indent=2, sort_keys=True))


__all__ = ["login", "logout", "status", "redirect_uri", "show_config"]
