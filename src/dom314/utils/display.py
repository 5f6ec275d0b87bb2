"""Display helpers shared by the CLI views."""

from rich.markup import escape
from rich.table import Table

from dom314.feeds.models import Episode

UNLISTENED_MARKER = "[*]"


def truncate_text(text: str, max_length: int) -> str:
    """Shorten text to max_length characters, ending with an ellipsis."""
    text = " ".join(text.split())
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def truncate_url(url: str, max_length: int = 50) -> str:
    """Shorten a URL by cutting out its middle."""
    if len(url) <= max_length:
        return url
    keep = (max_length - 1) // 2
    return f"{url[:keep]}…{url[-keep:]}"


def episodes_table(
    episodes: list[Episode],
    title: str,
    listened: set[str],
    numbered: bool = False,
    show_markers: bool = True,
) -> Table:
    """Build a table of episodes.

    Args:
        episodes: Episodes in display order.
        title: Table title.
        listened: Audio URLs marked as listened.
        numbered: Add a column with 1-based row numbers.
        show_markers: Add the unlistened marker column.
    """
    table = Table(title=title)
    if numbered:
        table.add_column("#", style="dim", width=4)
    if show_markers:
        table.add_column("", style="yellow", width=3, no_wrap=True)
    table.add_column("Date", style="green", width=10)
    table.add_column("Podcast", style="cyan", max_width=24)
    table.add_column("Title", max_width=60)

    for index, episode in enumerate(episodes, 1):
        row = []
        if numbered:
            row.append(str(index))
        if show_markers:
            row.append(
                "" if episode.audio_url in listened else escape(UNLISTENED_MARKER)
            )
        row.extend(
            [
                episode.published_date,
                escape(truncate_text(episode.podcast, 24)),
                escape(truncate_text(episode.title, 60)),
            ]
        )
        table.add_row(*row)
    return table
