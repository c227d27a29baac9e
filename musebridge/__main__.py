"""
Interactive command line for checking a provider connection.

    python -m musebridge spotify authorize [--open-browser]
    python -m musebridge spotify albums
    python -m musebridge spotify playlists
    python -m musebridge spotify status
    python -m musebridge spotify deauthorize
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

import click
from rich.table import Table

from musebridge import __version__
from musebridge.errors import MusicBridgeError
from musebridge.logger import console, get_logger
from musebridge.sources.base import Album, Playlist
from musebridge.sources.consent import ConsoleConsentFlow
from musebridge.sources.spotify import SpotifyProvider

logger = get_logger(__name__)

T = TypeVar("T")


def albums_table(albums: Sequence[Album], provider: SpotifyProvider) -> Table:
    table = Table(title=f"Saved albums ({len(albums)})")
    table.add_column("Title")
    table.add_column("Artist")
    table.add_column("Released")
    table.add_column("Tracks", justify="right")
    table.add_column("Link")
    for album in sorted(albums):
        table.add_row(
            album.title,
            album.artist_name,
            album.release_date.isoformat() if album.release_date else "",
            str(album.track_count) if album.track_count is not None else "",
            provider.get_deep_link(album) or "",
        )
    return table


def playlists_table(playlists: Sequence[Playlist], provider: SpotifyProvider) -> Table:
    table = Table(title=f"Playlists ({len(playlists)})")
    table.add_column("Name")
    table.add_column("Curator")
    table.add_column("Tracks", justify="right")
    table.add_column("Link")
    for playlist in sorted(playlists):
        table.add_row(
            playlist.name,
            playlist.curator_name or "",
            str(playlist.track_count) if playlist.track_count is not None else "",
            provider.get_deep_link(playlist) or "",
        )
    return table


def run_or_exit(ctx: click.Context, call: Callable[[SpotifyProvider], Awaitable[T]], **provider_kwargs) -> T:
    """Build the provider, run ``call`` on it and exit with status 1 on a library error."""
    try:
        provider = SpotifyProvider(**provider_kwargs)
        return asyncio.run(call(provider))
    except MusicBridgeError as e:
        console.print(str(e), style="red", markup=False)
        if e.recovery_suggestion:
            console.print(e.recovery_suggestion, markup=False)
        logger.debug("Command failed", exc_info=True)
        ctx.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="musebridge")
def cli():
    """Inspect a music library connection."""


@cli.group()
def spotify():
    """Spotify Web API (configured through SPOTIFY_* environment variables or .env)."""


@spotify.command()
@click.option("--open-browser", is_flag=True, help="Open the authorization URL in a browser")
@click.pass_context
def authorize(ctx: click.Context, open_browser: bool):
    """Run the PKCE flow and store the tokens."""
    run_or_exit(ctx, lambda p: p.authorize(), consent=ConsoleConsentFlow(open_browser=open_browser))
    console.print("[green]Authorized.[/green]")


@spotify.command()
@click.pass_context
def status(ctx: click.Context):
    """Show whether a usable token is stored."""
    authorized = run_or_exit(ctx, lambda p: p.is_authorized())
    console.print("Authorized." if authorized else "Not authorized.")


@spotify.command()
@click.pass_context
def deauthorize(ctx: click.Context):
    """Remove the stored tokens."""
    run_or_exit(ctx, lambda p: p.deauthorize())
    console.print("Stored tokens removed.")


@spotify.command()
@click.pass_context
def albums(ctx: click.Context):
    """List saved albums."""

    async def fetch(provider: SpotifyProvider) -> Table:
        return albums_table(await provider.fetch_albums(), provider)

    console.print(run_or_exit(ctx, fetch))


@spotify.command()
@click.pass_context
def playlists(ctx: click.Context):
    """List library playlists."""

    async def fetch(provider: SpotifyProvider) -> Table:
        return playlists_table(await provider.fetch_playlists(), provider)

    console.print(run_or_exit(ctx, fetch))


if __name__ == "__main__":
    cli()
