"""CLI entry point for dom314."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dom314.cli_browse import browse
from dom314.config.logging import setup_logging
from dom314.config.manager import ConfigManager
from dom314.feeds.aggregator import FailurePolicy, GroupEpisodes
from dom314.feeds.models import Episode, Podcast
from dom314.feeds.ordering import SortOrder
from dom314.player import listen
from dom314.session import Session
from dom314.state.store import Group
from dom314.utils.display import episodes_table, truncate_text, truncate_url
from dom314.utils.errors import AggregationError, Dom314Error

app = typer.Typer(
    name="dom314",
    help="Track podcast subscriptions and listened episodes",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable verbose (DEBUG) logging")
    ] = False,
    log_file: Annotated[
        Path | None, typer.Option("--log-file", help="Write logs to file")
    ] = None,
) -> None:
    """dom314 - a personal podcast tracker."""
    level = "WARNING"
    try:
        level = ConfigManager().load_config().log_level
    except Dom314Error:
        # Reported by the command itself when it loads the config
        pass
    setup_logging(verbose=verbose, log_file=log_file, level=level)


def _open_session() -> Session:
    return Session.open()


def _fail(error: Dom314Error) -> None:
    console.print(f"[red]✗[/red] Error: {escape(str(error))}")
    sys.exit(1)


def _episode_dict(episode: Episode, listened: set[str]) -> dict:
    return {
        "podcast": episode.podcast,
        "title": episode.title,
        "published_at": episode.published_at.isoformat(),
        "audio_url": episode.audio_url,
        "listened": episode.audio_url in listened,
    }


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from dom314 import __version__

    console.print(f"[bold cyan]dom314[/bold cyan] v{__version__}")


@app.command("group")
def group_command(
    name: Annotated[str, typer.Argument(help="Group: beloved or timekilling")],
    order: Annotated[
        SortOrder, typer.Option("--order", "-o", help="Sort direction")
    ] = SortOrder.NEWEST_FIRST,
    show_all: Annotated[
        bool, typer.Option("--all", "-a", help="Include listened episodes")
    ] = False,
    partial: Annotated[
        bool | None,
        typer.Option(
            "--partial/--strict",
            help="Show fetched episodes even if some feeds fail",
            show_default=False,
        ),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show the episodes of every feed in a group.

    Examples:
        dom314 group beloved

        dom314 group timekilling --all --partial
    """
    try:
        session = _open_session()
        group = Group.parse(name)
        policy = None
        if partial is not None:
            policy = FailurePolicy.PARTIAL if partial else FailurePolicy.STRICT

        try:
            result: GroupEpisodes = asyncio.run(
                session.aggregator.episodes_for_group(group, order=order, policy=policy)
            )
        except AggregationError as e:
            if json_output:
                output = {
                    "group": group.value,
                    "error": str(e),
                    "failed": [
                        {"feed_url": f.feed_url, "backend": f.backend, "error": f.message}
                        for f in e.failures
                    ],
                }
                print(json.dumps(output, indent=2))
                sys.exit(1)
            console.print(f"[red]✗[/red] Could not load group '{group.value}':")
            for failure in e.failures:
                console.print(f"  • {escape(failure.feed_url)}: {escape(failure.message)}")
            console.print("[dim]  Retry, or use --partial to show the other feeds[/dim]")
            sys.exit(1)

        listened = session.store.listened_urls()
        include_listened = show_all or session.config.show_listened
        episodes = [
            ep for ep in result.episodes if include_listened or ep.audio_url not in listened
        ]

        if json_output:
            output = {
                "group": result.group,
                "episodes": [_episode_dict(ep, listened) for ep in episodes],
                "feeds": result.feed_count,
                "failed": [
                    {"feed_url": f.feed_url, "backend": f.backend, "error": f.message}
                    for f in result.failures
                ],
            }
            print(json.dumps(output, indent=2))
            return

        if result.feed_count == 0:
            console.print(f"[yellow]No subscriptions in '{group.value}' yet.[/yellow]")
            console.print(
                f"\nSubscribe: [cyan]dom314 subscribe {group.value} <feed-url>[/cyan]"
            )
            return

        console.print(
            episodes_table(
                episodes,
                title=f"[bold]{group.value}[/bold]",
                listened=listened,
                show_markers=include_listened,
            )
        )
        for failure in result.failures:
            console.print(
                f"[yellow]⚠[/yellow] {escape(failure.feed_url)}: {escape(failure.message)}"
            )
        console.print(f"\n[dim]{len(episodes)} episode(s) from {result.feed_count} feed(s)[/dim]")

    except Dom314Error as e:
        _fail(e)


@app.command("podcast")
def podcast_command(
    feed_url: Annotated[str, typer.Argument(help="Feed URL")],
    backend: Annotated[str, typer.Option("--backend", "-b", help="Fetching backend")] = "rss",
    order: Annotated[
        SortOrder, typer.Option("--order", "-o", help="Sort direction")
    ] = SortOrder.OLDEST_FIRST,
) -> None:
    """Show all episodes of one feed and its group memberships."""
    try:
        session = _open_session()
        podcast = Podcast(backend=backend, feed_url=feed_url, title=feed_url)
        episodes = asyncio.run(session.aggregator.episodes_for_podcast(podcast, order=order))

        title = episodes[0].podcast if episodes else feed_url
        console.print(
            episodes_table(
                episodes,
                title=f"[bold]{escape(title)}[/bold]",
                listened=session.store.listened_urls(),
            )
        )

        groups = session.store.groups_for(feed_url)
        membership = ", ".join(g.value for g in groups) if groups else "none"
        console.print(f"\n[dim]Groups: {membership}[/dim]")

    except Dom314Error as e:
        _fail(e)


@app.command("discover")
def discover_command(
    backend: Annotated[
        str | None, typer.Argument(help="Discovery backend (omit to list backends)")
    ] = None,
    search: Annotated[
        str | None, typer.Option("--search", "-s", help="Only podcasts containing this text")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Browse podcasts offered by a discovery backend.

    Examples:
        dom314 discover

        dom314 discover picks --search games
    """
    try:
        session = _open_session()
        registry = session.backends.discovery

        if backend is None:
            table = Table(title="[bold]Discovery Backends[/bold]")
            table.add_column("Name", style="cyan", no_wrap=True)
            table.add_column("Label")
            table.add_column("Description", style="dim")
            for name, plugin in registry.get_enabled():
                table.add_row(name, escape(plugin.label), escape(plugin.DESCRIPTION))
            console.print(table)
            return

        plugin = registry.get(backend)
        if search is not None:
            podcasts = asyncio.run(plugin.search(search))
        else:
            podcasts = asyncio.run(plugin.discovery())

        if json_output:
            print(json.dumps({"podcasts": [p.model_dump() for p in podcasts]}, indent=2))
            return

        if not podcasts:
            console.print("[yellow]No podcasts found.[/yellow]")
            return

        table = Table(title=f"[bold]{escape(plugin.label)}[/bold]")
        table.add_column("Title", style="cyan")
        table.add_column("Feed URL", style="blue")
        table.add_column("Groups", style="green")
        table.add_column("Description", style="dim", max_width=50)
        for podcast in podcasts:
            groups = session.store.groups_for(podcast.feed_url)
            table.add_row(
                escape(podcast.title),
                truncate_url(podcast.feed_url),
                ", ".join(g.value for g in groups) or "-",
                escape(truncate_text(podcast.description, 50)),
            )
        console.print(table)

    except Dom314Error as e:
        _fail(e)


@app.command("backends")
def backends_command() -> None:
    """List registered backends and their status."""
    try:
        session = _open_session()

        table = Table(title="[bold]Backends[/bold]")
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Type")
        table.add_column("Status")
        table.add_column("Source", style="dim")

        for kind, registry in (
            ("fetching", session.backends.fetching),
            ("discovery", session.backends.discovery),
        ):
            for entry in registry.all_entries():
                status = {
                    "loaded": "[green]loaded[/green]",
                    "disabled": "[yellow]disabled[/yellow]",
                    "broken": f"[red]broken[/red] {escape(entry.error or '')}",
                }[entry.status]
                table.add_row(entry.name, kind, status, escape(entry.source))

        console.print(table)

    except Dom314Error as e:
        _fail(e)


@app.command("subscriptions")
def subscriptions_command(
    name: Annotated[str, typer.Argument(help="Group: beloved or timekilling")],
) -> None:
    """List the feeds subscribed in a group."""
    try:
        session = _open_session()
        group = Group.parse(name)
        subscriptions = sorted(session.store.list_subscriptions(group))

        if not subscriptions:
            console.print(f"[yellow]No subscriptions in '{group.value}' yet.[/yellow]")
            return

        table = Table(title=f"[bold]{group.value}[/bold]")
        table.add_column("Feed URL", style="blue")
        table.add_column("Backend", style="cyan")
        for feed_url, backend in subscriptions:
            table.add_row(escape(feed_url), escape(backend))
        console.print(table)
        console.print(f"\n[dim]Total: {len(subscriptions)} feed(s)[/dim]")

    except Dom314Error as e:
        _fail(e)


@app.command("subscribe")
def subscribe_command(
    name: Annotated[str, typer.Argument(help="Group: beloved or timekilling")],
    feed_url: Annotated[str, typer.Argument(help="Feed URL")],
    backend: Annotated[str, typer.Option("--backend", "-b", help="Fetching backend")] = "rss",
) -> None:
    """Add a feed to a group."""
    try:
        session = _open_session()
        group = Group.parse(name)
        session.backends.fetching.get(backend)
        session.store.set_subscription(group, feed_url, backend, True)
        console.print(f"[green]✓[/green] Subscribed to {escape(feed_url)} in '{group.value}'")

    except Dom314Error as e:
        _fail(e)


@app.command("unsubscribe")
def unsubscribe_command(
    name: Annotated[str, typer.Argument(help="Group: beloved or timekilling")],
    feed_url: Annotated[str, typer.Argument(help="Feed URL")],
) -> None:
    """Remove a feed from a group."""
    try:
        session = _open_session()
        group = Group.parse(name)
        if not session.store.is_subscribed(group, feed_url):
            console.print(f"[yellow]Not subscribed to {escape(feed_url)} in '{group.value}'[/yellow]")
            return
        session.store.set_subscription(group, feed_url, "", False)
        console.print(f"[green]✓[/green] Unsubscribed from {escape(feed_url)} in '{group.value}'")

    except Dom314Error as e:
        _fail(e)


@app.command("mark")
def mark_command(
    audio_url: Annotated[str, typer.Argument(help="Episode audio URL")],
    unlistened: Annotated[
        bool, typer.Option("--unlistened", "-u", help="Mark as not listened instead")
    ] = False,
) -> None:
    """Mark an episode as listened (or not)."""
    try:
        session = _open_session()
        session.store.set_listened(audio_url, not unlistened)
        state = "unlistened" if unlistened else "listened"
        console.print(f"[green]✓[/green] Marked {escape(audio_url)} as {state}")

    except Dom314Error as e:
        _fail(e)


@app.command("play")
def play_command(
    audio_url: Annotated[str, typer.Argument(help="Episode audio URL")],
) -> None:
    """Play an episode with the configured player and mark it listened."""
    try:
        session = _open_session()
        listen(session.store, audio_url, session.config.player)
        console.print(f"[green]✓[/green] Playing {escape(audio_url)}")

    except Dom314Error as e:
        _fail(e)


@app.command("browse")
def browse_command() -> None:
    """Browse groups and discovery backends interactively."""
    try:
        session = _open_session()
        try:
            browse(session, console)
        finally:
            session.close()

    except Dom314Error as e:
        _fail(e)


@app.command("config")
def config_command(
    action: Annotated[str, typer.Argument(help="Action: show or set <key> <value>")],
    key: Annotated[str | None, typer.Argument(help="Config key (for 'set' action)")] = None,
    value: Annotated[str | None, typer.Argument(help="Config value (for 'set' action)")] = None,
) -> None:
    """Manage dom314 configuration.

    Examples:
        dom314 config show

        dom314 config set failure_policy partial

        dom314 config set player.command vlc
    """
    try:
        manager = ConfigManager()

        if action == "show":
            config = manager.load_config()

            console.print("\n[bold]dom314 Configuration[/bold]\n")

            table = Table(show_header=False, box=None)
            table.add_column("Key", style="cyan")
            table.add_column("Value", style="white")

            table.add_row("Config file", str(manager.config_file))
            table.add_row("Database", str(config.database_path or "default"))
            table.add_row("", "")
            table.add_row("Log level", config.log_level)
            table.add_row("Fetch timeout", f"{config.fetch_timeout_seconds}s")
            table.add_row("Max concurrent feeds", str(config.max_concurrent_feeds))
            table.add_row("Failure policy", config.failure_policy)
            table.add_row("Show listened", "✓" if config.show_listened else "✗")
            table.add_row("Player", config.player.command)

            console.print(table)

        elif action == "set":
            if not key or value is None:
                console.print("[red]✗[/red] Usage: dom314 config set <key> <value>")
                sys.exit(1)

            manager.set_value(key, value)
            console.print(f"[green]✓[/green] Set [cyan]{key}[/cyan] = [yellow]{escape(value)}[/yellow]")

        else:
            console.print(f"[red]✗[/red] Unknown action: {escape(action)}")
            console.print("Valid actions: show, set")
            sys.exit(1)

    except Dom314Error as e:
        _fail(e)


if __name__ == "__main__":
    app()
