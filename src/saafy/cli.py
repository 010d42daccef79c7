"""
Saafy CLI - entry point.

Search the song API, browse discovery buckets, play songs through mpv,
serve the web API, and run the offline CSV harvesting tools.
"""

import argparse
import asyncio
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from rich.table import Table

from saafy.context import AppContext, create_audio_backend
from saafy.core.config import Config, get_data_dir, load_config
from saafy.core.output import get_console, log, set_quiet, setup_loguru
from saafy.domain.catalog.exceptions import CatalogError
from saafy.domain.catalog.models import SearchPage, Song
from saafy.domain.discovery.engine import Bucket
from saafy.domain.playback.audio import NullAudioBackend
from saafy.domain.playback.engine import PlaybackEngine
from saafy.domain.playback.state import PlayerStatus

SEARCH_TYPES = ("all", "songs", "albums", "artists", "playlists")


def _format_duration(seconds: float) -> str:
    if not seconds or seconds <= 0:
        return "-"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def _song_table(title: str, songs: list[Song]) -> Table:
    table = Table(title=title, title_justify="left")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title")
    table.add_column("Artist", style="cyan")
    table.add_column("Album", style="magenta")
    table.add_column("Time", justify="right")
    table.add_column("ID", style="dim")
    for i, song in enumerate(songs, 1):
        table.add_row(
            str(i),
            song.name,
            song.primary_artists,
            song.album.name,
            _format_duration(song.duration),
            song.id,
        )
    return table


def _named_table(title: str, items: tuple) -> Table:
    table = Table(title=title, title_justify="left")
    table.add_column("Name")
    table.add_column("ID", style="dim")
    for item in items:
        table.add_row(item.name, item.id)
    return table


def _print_bucket(bucket: Bucket) -> None:
    console = get_console()
    if bucket.error and not bucket.songs:
        console.print(f"[yellow]{bucket.title}: {bucket.error}[/yellow]")
        return
    console.print(_song_table(bucket.title, list(bucket.songs)))


def _finished(player: PlaybackEngine) -> bool:
    if player.status == PlayerStatus.ENDED:
        return True
    return player.status == PlayerStatus.ERROR and not player.has_next()


def _create_context(config: Config, with_audio: bool = False) -> AppContext:
    audio = create_audio_backend(config) if with_audio else NullAudioBackend()
    return AppContext.create(config, audio=audio)


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------


async def run_search(config: Config, query: str, kind: str, page: int, limit: int) -> int:
    ctx = _create_context(config)
    console = get_console()
    try:
        if kind == "all":
            results = await ctx.catalog.search_all(query)
            console.print(_song_table("Songs", list(results.songs)))
            console.print(_named_table("Albums", results.albums))
            console.print(_named_table("Artists", results.artists))
            console.print(_named_table("Playlists", results.playlists))
            return 0

        search = getattr(ctx.catalog, f"search_{kind}")
        result: SearchPage = await search(query, page, limit)
        title = f"{kind.capitalize()} ({result.total} total)"
        if kind == "songs":
            console.print(_song_table(title, list(result.results)))
        else:
            console.print(_named_table(title, result.results))
        return 0
    finally:
        await ctx.aclose()


async def run_discover(
    config: Config, keys: list[str], themes: bool, limit: Optional[int]
) -> int:
    ctx = _create_context(config)
    discovery = ctx.discovery
    try:
        if not keys:
            if themes:
                await discovery.get_all_themed_content(limit, on_bucket=_print_bucket)
            else:
                await discovery.get_all_discovery_content(limit, on_bucket=_print_bucket)
            return 0

        for key in keys:
            if key in discovery.available_languages():
                _print_bucket(await discovery.get_discovery_songs(key, limit))
            elif key in discovery.available_themes():
                _print_bucket(await discovery.get_themed_songs(key, limit))
            else:
                valid = ", ".join(discovery.available_languages() + discovery.available_themes())
                log(f"Unknown bucket '{key}'. Valid buckets: {valid}", level="error")
                return 1
        return 0
    finally:
        await ctx.aclose()


async def run_for_you(config: Config, limit: Optional[int]) -> int:
    ctx = _create_context(config)
    try:
        _print_bucket(await ctx.discovery.get_for_you_mix(limit))
        return 0
    finally:
        await ctx.aclose()


async def run_play(config: Config, query: str, by_id: bool) -> int:
    """Play the best match for `query` (or song id) and keep going through the results."""
    ctx = _create_context(config, with_audio=True)
    player = ctx.player
    try:
        if isinstance(player.audio, NullAudioBackend):
            log("No audio backend available. Install mpv to play from the terminal.", level="error")
            return 1

        if by_id:
            song = await ctx.catalog.get_song(query)
            if song is None:
                log(f"Song {query} not found", level="error")
                return 1
            songs = [song]
        else:
            songs = list((await ctx.catalog.search_songs(query, 0, 20)).results)
            if not songs:
                log(f"No songs found for '{query}'", level="warning")
                return 1

        player.events.on("track", lambda s: log(f"Now playing: {s.name} - {s.primary_artists}"))
        if not await player.play_song(songs[0], songs):
            return 1

        while not _finished(player):
            await asyncio.sleep(config.player.poll_interval_seconds)
        return 0
    finally:
        await ctx.aclose()


def run_history(config: Config, clear: bool) -> int:
    ctx = AppContext.create(config, audio=NullAudioBackend())
    try:
        if clear:
            ctx.history.clear()
            log("Listening history cleared", level="success")
            return 0
        entries = ctx.history.entries()
        if not entries:
            log("No listening history yet")
            return 0
        get_console().print(_song_table("Recently played", entries))
        return 0
    finally:
        asyncio.run(ctx.aclose())


def run_theme(config: Config, theme: Optional[str]) -> int:
    ctx = AppContext.create(config, audio=NullAudioBackend())
    try:
        prefs = ctx.preferences
        if theme == "toggle":
            prefs.toggle_theme()
        elif theme:
            try:
                prefs.set_theme(theme)
            except ValueError as e:
                log(str(e), level="error")
                return 1
        log(f"Theme: {prefs.theme}")
        return 0
    finally:
        asyncio.run(ctx.aclose())


def run_serve(config: Config, host: Optional[str], port: Optional[int]) -> int:
    import uvicorn

    from saafy.web import create_app

    host = host or config.web.host
    port = port or config.web.port
    log(f"Serving Saafy web API on http://{host}:{port}")
    uvicorn.run(create_app(config=config), host=host, port=port, log_level="warning")
    return 0


def run_fetch_songs(
    config: Config,
    output: Optional[Path],
    english_target: Optional[int],
    marathi_target: Optional[int],
) -> int:
    from saafy.harvest import fetch_songs

    harvest = config.harvest
    if english_target is not None:
        harvest = replace(harvest, english_target=english_target)
    if marathi_target is not None:
        harvest = replace(harvest, marathi_target=marathi_target)

    output = output or get_data_dir() / "harvest" / "jiosaavn_songs.csv"
    fetch_songs(harvest, output)
    return 0


def run_scrape_songs(
    config: Config, output: Optional[Path], start_year: Optional[int], end_year: Optional[int]
) -> int:
    from saafy.harvest import ScraperBlockedError, scrape_songs

    start = start_year if start_year is not None else config.harvest.scrape_start_year
    end = end_year if end_year is not None else config.harvest.scrape_end_year
    output = output or get_data_dir() / "harvest" / f"songs_{start}_{end}.csv"

    try:
        scrape_songs(config.harvest, output, start, end)
    except ScraperBlockedError as e:
        log(f"{e}. The site is blocking automated requests; try again later.", level="error")
        return 2
    except ValueError as e:
        log(str(e), level="error")
        return 1
    return 0


# ----------------------------------------------------------------------
# Entry point
# ----------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="saafy",
        description="Saafy - music streaming from the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=Path, help="Path to config.toml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print results")

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    search_parser = subparsers.add_parser("search", help="Search the song API")
    search_parser.add_argument("query", nargs="+", help="Search text")
    search_parser.add_argument("-t", "--type", choices=SEARCH_TYPES, default="songs")
    search_parser.add_argument("-p", "--page", type=int, default=0)
    search_parser.add_argument("-n", "--limit", type=int, default=10)

    discover_parser = subparsers.add_parser("discover", help="Show discovery buckets")
    discover_parser.add_argument("keys", nargs="*", help="Languages or themes (default: all languages)")
    discover_parser.add_argument("--themes", action="store_true", help="Show every theme bucket")
    discover_parser.add_argument("-n", "--limit", type=int)

    for_you_parser = subparsers.add_parser("for-you", help="Show the For You mix")
    for_you_parser.add_argument("-n", "--limit", type=int)

    play_parser = subparsers.add_parser("play", help="Play songs through mpv")
    play_parser.add_argument("query", nargs="+", help="Search text, or a song id with --id")
    play_parser.add_argument("--id", action="store_true", dest="by_id", help="Treat query as a song id")

    history_parser = subparsers.add_parser("history", help="Show recently played songs")
    history_parser.add_argument("--clear", action="store_true")

    theme_parser = subparsers.add_parser("theme", help="Show or change the theme")
    theme_parser.add_argument("theme", nargs="?", choices=["light", "dark", "toggle"])

    serve_parser = subparsers.add_parser("serve", help="Run the web API")
    serve_parser.add_argument("--host")
    serve_parser.add_argument("--port", type=int)

    fetch_parser = subparsers.add_parser("fetch-songs", help="Harvest English and Marathi songs to CSV")
    fetch_parser.add_argument("-o", "--output", type=Path)
    fetch_parser.add_argument("--english-target", type=int)
    fetch_parser.add_argument("--marathi-target", type=int)

    scrape_parser = subparsers.add_parser("scrape-songs", help="Scrape album listings per year to CSV")
    scrape_parser.add_argument("-o", "--output", type=Path)
    scrape_parser.add_argument("--start-year", type=int)
    scrape_parser.add_argument("--end-year", type=int)

    return parser


def run(args: argparse.Namespace, config: Config) -> int:
    """Dispatch a parsed command. Returns the exit code."""
    command = args.subcommand
    try:
        if command == "search":
            return asyncio.run(run_search(config, " ".join(args.query), args.type, args.page, args.limit))
        elif command == "discover":
            return asyncio.run(run_discover(config, args.keys, args.themes, args.limit))
        elif command == "for-you":
            return asyncio.run(run_for_you(config, args.limit))
        elif command == "play":
            return asyncio.run(run_play(config, " ".join(args.query), args.by_id))
        elif command == "history":
            return run_history(config, args.clear)
        elif command == "theme":
            return run_theme(config, args.theme)
        elif command == "serve":
            return run_serve(config, args.host, args.port)
        elif command == "fetch-songs":
            return run_fetch_songs(config, args.output, args.english_target, args.marathi_target)
        elif command == "scrape-songs":
            return run_scrape_songs(config, args.output, args.start_year, args.end_year)
    except CatalogError as e:
        log(f"Error: {e.message}", level="error")
        return 1
    except KeyboardInterrupt:
        log("Interrupted", level="warning")
        return 130
    return 2


def main() -> None:
    """Main entry point for the saafy command."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.subcommand:
        parser.print_help()
        sys.exit(2)

    config = load_config(args.config)
    if args.verbose:
        config.logging.level = "DEBUG"
    log_file = Path(config.logging.log_file) if config.logging.log_file else get_data_dir() / "saafy.log"
    setup_loguru(
        log_file,
        level=config.logging.level,
        rotation=config.logging.rotation,
        retention=config.logging.retention,
        console_output=config.logging.console_output,
    )
    set_quiet(args.quiet)

    sys.exit(run(args, config))


if __name__ == "__main__":
    main()
