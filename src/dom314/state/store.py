"""Durable listened and subscription state.

State lives in a single SQLite database organized into named trees. Every
tree is a string-to-string map stored in one table keyed by (tree, key):

- "listened": audio URL -> "" (presence marker)
- one tree per subscription group: feed URL -> backend identifier

Each operation runs in its own transaction on its own connection, which
makes single-key updates atomic across threads and processes. There are
no cross-key transactions.
"""

import logging
import sqlite3
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import TypeVar

from dom314.utils.errors import StorageError, UnknownGroupError
from dom314.utils.paths import get_database_file
from dom314.utils.retry import with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")

LISTENED_TREE = "listened"
LISTENED_MARKER = ""


class Group(str, Enum):
    """Fixed subscription groups."""

    BELOVED = "beloved"
    TIMEKILLING = "timekilling"

    @classmethod
    def parse(cls, name: "str | Group") -> "Group":
        """Resolve a group from its name.

        Raises:
            UnknownGroupError: If name is not a known group.
        """
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(g.value for g in cls)
            raise UnknownGroupError(f"Unknown group: '{name}' (valid: {valid})") from None


class Tree:
    """A named string-to-string collection inside the state database.

    Example:
        >>> tree = store.open_tree("listened")
        >>> tree.insert("https://example.com/ep1.mp3", "")
        >>> tree.contains("https://example.com/ep1.mp3")
        True
    """

    def __init__(self, store: "StateStore", name: str) -> None:
        self.store = store
        self.name = name

    def contains(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None."""

        def operation(conn: sqlite3.Connection) -> str | None:
            row = conn.execute(
                "SELECT value FROM trees WHERE tree = ? AND key = ?",
                (self.name, key),
            ).fetchone()
            return row[0] if row else None

        return self.store.execute(operation)

    def insert(self, key: str, value: str) -> str | None:
        """Store value under key.

        Returns:
            The previous value, or None.
        """
        return self.update(key, lambda _: value)

    def remove(self, key: str) -> str | None:
        """Delete key.

        Returns:
            The removed value, or None if the key was absent.
        """
        return self.update(key, lambda _: None)

    def update(self, key: str, func: Callable[[str | None], str | None]) -> str | None:
        """Atomically replace the value under key.

        func receives the current value (None when absent) and returns the
        new one; returning None deletes the key.

        Returns:
            The previous value, or None.
        """

        def operation(conn: sqlite3.Connection) -> str | None:
            row = conn.execute(
                "SELECT value FROM trees WHERE tree = ? AND key = ?",
                (self.name, key),
            ).fetchone()
            previous = row[0] if row else None
            new_value = func(previous)
            if new_value is None:
                conn.execute(
                    "DELETE FROM trees WHERE tree = ? AND key = ?",
                    (self.name, key),
                )
            else:
                conn.execute(
                    """
                    INSERT INTO trees (tree, key, value) VALUES (?, ?, ?)
                    ON CONFLICT (tree, key) DO UPDATE SET value = excluded.value
                    """,
                    (self.name, key, new_value),
                )
            return previous

        return self.store.execute(operation, write=True)

    def items(self) -> list[tuple[str, str]]:
        """Return every (key, value) pair of the tree."""

        def operation(conn: sqlite3.Connection) -> list[tuple[str, str]]:
            rows = conn.execute(
                "SELECT key, value FROM trees WHERE tree = ?",
                (self.name,),
            ).fetchall()
            return [(key, value) for key, value in rows]

        return self.store.execute(operation)

    def __len__(self) -> int:
        def operation(conn: sqlite3.Connection) -> int:
            return conn.execute(
                "SELECT COUNT(*) FROM trees WHERE tree = ?", (self.name,)
            ).fetchone()[0]

        return self.store.execute(operation)


class StateStore:
    """Listened markers and group subscriptions backed by SQLite.

    Example:
        >>> store = StateStore()
        >>> store.set_subscription(Group.BELOVED, feed_url, "rss", True)
        >>> store.list_subscriptions(Group.BELOVED)
        [('https://example.com/feed.xml', 'rss')]
    """

    def __init__(self, db_path: Path | None = None, busy_timeout: float = 5.0) -> None:
        """Open (and if needed create) the state database.

        Args:
            db_path: Database file (defaults to the user data directory).
            busy_timeout: Seconds to wait for another writer's lock.

        Raises:
            StorageError: If the database cannot be opened or initialized.
        """
        self.db_path = db_path if db_path is not None else get_database_file()
        self.busy_timeout = busy_timeout
        self._ensure_database_exists()

    def _ensure_database_exists(self) -> None:
        """Create database and schema if not exists."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.db_path.parent}: {e}") from e

        def operation(conn: sqlite3.Connection) -> None:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS trees (
                    tree TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    PRIMARY KEY (tree, key)
                )
                """
            )

        self.execute(operation, write=True)
        logger.debug(f"Opened state database: {self.db_path}")

    def execute(self, operation: Callable[[sqlite3.Connection], T], write: bool = False) -> T:
        """Run operation inside a single transaction.

        Raises:
            StorageError: If SQLite reports an error.
        """
        try:
            return self._run_transaction(operation, write)
        except sqlite3.Error as e:
            logger.error(f"State database error: {e}")
            raise StorageError(f"State database error ({self.db_path}): {e}") from e

    @with_retry()
    def _run_transaction(self, operation: Callable[[sqlite3.Connection], T], write: bool) -> T:
        conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout, isolation_level=None)
        try:
            if write:
                conn.execute("PRAGMA journal_mode = WAL")
                conn.execute("PRAGMA synchronous = FULL")
                conn.execute("BEGIN IMMEDIATE")
            else:
                conn.execute("BEGIN")
            try:
                result = operation(conn)
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
            return result
        finally:
            conn.close()

    def open_tree(self, name: str) -> Tree:
        return Tree(self, name)

    def _group_tree(self, group: "str | Group") -> Tree:
        return self.open_tree(Group.parse(group).value)

    # Listened ----------------------------------------------------------------

    def is_listened(self, audio_url: str) -> bool:
        return self.open_tree(LISTENED_TREE).contains(audio_url)

    def set_listened(self, audio_url: str, listened: bool) -> None:
        """Mark or unmark an episode as listened. Idempotent."""
        value = LISTENED_MARKER if listened else None
        self.open_tree(LISTENED_TREE).update(audio_url, lambda _: value)
        logger.debug(f"Set listened={listened} for {audio_url}")

    def listened_urls(self) -> set[str]:
        """All audio URLs currently marked as listened."""
        return {key for key, _ in self.open_tree(LISTENED_TREE).items()}

    # Subscriptions -----------------------------------------------------------

    def is_subscribed(self, group: "str | Group", feed_url: str) -> bool:
        return self._group_tree(group).contains(feed_url)

    def set_subscription(
        self,
        group: "str | Group",
        feed_url: str,
        backend: str,
        subscribed: bool,
    ) -> None:
        """Subscribe or unsubscribe a feed within one group.

        Subscribing twice keeps the most recent backend identifier.

        Raises:
            UnknownGroupError: If group is not a known group.
            StorageError: If the database write fails.
        """
        value = backend if subscribed else None
        self._group_tree(group).update(feed_url, lambda _: value)
        logger.info(
            f"{'Subscribed' if subscribed else 'Unsubscribed'} {feed_url} "
            f"{'to' if subscribed else 'from'} {Group.parse(group).value}"
        )

    def list_subscriptions(self, group: "str | Group") -> list[tuple[str, str]]:
        """Return (feed_url, backend) pairs of a group, in no particular order."""
        return self._group_tree(group).items()

    def groups_for(self, feed_url: str) -> list[Group]:
        """Groups the feed is subscribed to."""
        return [group for group in Group if self.is_subscribed(group, feed_url)]
