"""Custom exceptions for dom314."""


class Dom314Error(Exception):
    """Base exception for all dom314 errors."""

    pass


class ConfigError(Dom314Error):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration data."""

    pass


class FetchError(Dom314Error):
    """A backend failed to fetch or parse a feed.

    Fetch errors are never cached; the next request for the same feed
    retries the fetch.
    """

    def __init__(self, message: str, feed_url: str | None = None) -> None:
        self.feed_url = feed_url
        super().__init__(message)


class FetchTimeoutError(FetchError):
    """A feed fetch did not finish in time."""

    pass


class UnknownBackendError(Dom314Error):
    """No backend is registered under the requested identifier."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = available or []
        message = f"Unknown backend: '{name}'"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class StorageError(Dom314Error):
    """The state database could not be read or written."""

    pass


class UnknownGroupError(Dom314Error):
    """Subscription group name is not one of the fixed groups."""

    pass


class AggregationError(Dom314Error):
    """One or more feeds of a group could not be fetched.

    Attributes:
        group: Group whose feeds were being fetched.
        failures: The individual feed failures.
    """

    def __init__(self, group: str, failures: list) -> None:
        self.group = group
        self.failures = failures
        urls = ", ".join(f.feed_url for f in failures)
        super().__init__(f"{len(failures)} feed(s) in '{group}' failed: {urls}")


class PlayerError(Dom314Error):
    """The media player could not be started."""

    pass
