"""Interactive browser for groups and discovery backends.

One FeedCache lives for the whole browsing session, so reopening a group
or podcast is served from memory until the cache is wiped.

Commands inside episode lists:
    <n>    play episode n and mark it listened
    r <n>  mark episode n as listened
    R <n>  mark episode n as not listened
    a      toggle listened episodes (group views)
    b      go back
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt

from dom314.feeds.models import Episode, Podcast
from dom314.feeds.ordering import SortOrder
from dom314.player import listen
from dom314.state.store import Group
from dom314.utils.display import episodes_table
from dom314.utils.errors import AggregationError, Dom314Error

if TYPE_CHECKING:
    from dom314.plugins.types import DiscoveryBackend
    from dom314.session import Session

logger = logging.getLogger(__name__)

BACK = "b"


def browse(session: Session, console: Console) -> None:
    """Run the main menu until the user exits."""
    while True:
        console.print(
            Panel(
                "[cyan]1[/cyan] Beloved\n"
                "[cyan]2[/cyan] Timekilling\n"
                "[cyan]3[/cyan] Undiscovered\n"
                "[cyan]w[/cyan] Wipe cache\n"
                "[cyan]q[/cyan] Exit",
                title="Main menu",
                expand=False,
            )
        )
        choice = Prompt.ask("Choose", choices=["1", "2", "3", "w", "q"], console=console)

        if choice == "1":
            group_view(session, console, Group.BELOVED)
        elif choice == "2":
            group_view(session, console, Group.TIMEKILLING)
        elif choice == "3":
            discovery_view(session, console)
        elif choice == "w":
            count = session.cache.wipe()
            console.print(f"[green]✓[/green] Wiped {count} cached feed(s)")
        else:
            return


def _parse_command(text: str, size: int) -> tuple[str, int | None]:
    """Split "r 3" style input into an action and a 0-based index.

    Returns ("", None) for input that is not understood.
    """
    parts = text.split()
    if not parts:
        return "", None
    if len(parts) == 1 and parts[0].isdigit():
        action, number = "play", parts[0]
    elif len(parts) == 2 and parts[0] in ("r", "R") and parts[1].isdigit():
        action, number = parts[0], parts[1]
    elif len(parts) == 1:
        return parts[0], None
    else:
        return "", None

    index = int(number) - 1
    if not 0 <= index < size:
        return "", None
    return action, index


def _episode_action(
    session: Session,
    console: Console,
    action: str,
    episode: Episode,
) -> None:
    try:
        if action == "play":
            listen(session.store, episode.audio_url, session.config.player)
            console.print(f"[green]✓[/green] Playing {escape(episode.title)}")
        elif action == "r":
            session.store.set_listened(episode.audio_url, True)
        elif action == "R":
            session.store.set_listened(episode.audio_url, False)
    except Dom314Error as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")


def group_view(session: Session, console: Console, group: Group) -> None:
    """Show a group's unlistened episodes, newest first."""
    show_listened = session.config.show_listened

    while True:
        try:
            result = asyncio.run(
                session.aggregator.episodes_for_group(group, order=SortOrder.NEWEST_FIRST)
            )
        except AggregationError as e:
            console.print(f"[red]✗[/red] Could not load '{group.value}':")
            for failure in e.failures:
                console.print(f"  • {escape(failure.feed_url)}: {escape(failure.message)}")
            return
        except Dom314Error as e:
            console.print(f"[red]✗[/red] {escape(str(e))}")
            return

        listened = session.store.listened_urls()
        episodes = [
            ep for ep in result.episodes if show_listened or ep.audio_url not in listened
        ]
        console.print(
            episodes_table(
                episodes,
                title=f"[bold]{group.value}[/bold]",
                listened=listened,
                numbered=True,
                show_markers=show_listened,
            )
        )
        for failure in result.failures:
            console.print(
                f"[yellow]⚠[/yellow] {escape(failure.feed_url)}: {escape(failure.message)}"
            )

        text = Prompt.ask("[dim]<n> play, r/R <n> mark, a all, b back[/dim]", console=console)
        action, index = _parse_command(text.strip(), len(episodes))
        if action == BACK:
            return
        if action == "a":
            show_listened = not show_listened
        elif index is not None:
            _episode_action(session, console, action, episodes[index])


def podcast_view(session: Session, console: Console, podcast: Podcast) -> None:
    """Show a podcast's description, episodes and group toggles."""
    while True:
        try:
            episodes = asyncio.run(
                session.aggregator.episodes_for_podcast(podcast, order=SortOrder.OLDEST_FIRST)
            )
        except Dom314Error as e:
            console.print(f"[red]✗[/red] {escape(str(e))}")
            return

        console.print(Panel(escape(podcast.description), title=escape(podcast.title)))
        console.print(
            episodes_table(
                episodes,
                title="Episodes",
                listened=session.store.listened_urls(),
                numbered=True,
            )
        )

        toggles = {}
        for group in Group:
            subscribed = session.store.is_subscribed(group, podcast.feed_url)
            toggles[f"{'-' if subscribed else '+'}{group.value}"] = (group, not subscribed)
        console.print("  ".join(f"[cyan]{label}[/cyan]" for label in toggles))

        text = Prompt.ask("[dim]<n> play, r/R <n> mark, ±group, b back[/dim]", console=console)
        text = text.strip()
        if text in toggles:
            group, subscribe = toggles[text]
            try:
                session.store.set_subscription(
                    group, podcast.feed_url, podcast.backend, subscribe
                )
            except Dom314Error as e:
                console.print(f"[red]✗[/red] {escape(str(e))}")
            continue

        action, index = _parse_command(text, len(episodes))
        if action == BACK:
            return
        if index is not None:
            _episode_action(session, console, action, episodes[index])


def _choose(console: Console, title: str, labels: list[str]) -> int | None:
    """Let the user pick one of labels; None means back."""
    lines = [f"[cyan]{i}[/cyan] {escape(label)}" for i, label in enumerate(labels, 1)]
    lines.append(f"[cyan]{BACK}[/cyan] Go back")
    console.print(Panel("\n".join(lines), title=title, expand=False))
    choices = [str(i) for i in range(1, len(labels) + 1)] + [BACK]
    choice = Prompt.ask("Choose", choices=choices, console=console)
    if choice == BACK:
        return None
    return int(choice) - 1


def discovery_view(session: Session, console: Console) -> None:
    """Pick a discovery backend, then a podcast from its catalog."""
    backends: list[tuple[str, DiscoveryBackend]] = session.backends.discovery.get_enabled()
    if not backends:
        console.print("[yellow]No discovery backends available.[/yellow]")
        return

    while True:
        index = _choose(console, "Discovery backends", [b.label for _, b in backends])
        if index is None:
            return
        _, backend = backends[index]

        try:
            podcasts = asyncio.run(backend.discovery())
        except Dom314Error as e:
            console.print(f"[red]✗[/red] {escape(str(e))}")
            continue

        while True:
            choice = _choose(console, "New podcasts", [p.title for p in podcasts])
            if choice is None:
                break
            podcast_view(session, console, podcasts[choice])
