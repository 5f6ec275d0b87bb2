"""Wiring of the long-lived objects used by every command."""

import logging
from dataclasses import dataclass

from dom314.config.manager import ConfigManager
from dom314.config.schema import GlobalConfig
from dom314.feeds.aggregator import FailurePolicy, GroupAggregator
from dom314.feeds.cache import FeedCache
from dom314.plugins.loader import Backends, cleanup_backends, load_backends
from dom314.state.store import StateStore

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Configuration, state store, backends and the shared feed cache."""

    config: GlobalConfig
    store: StateStore
    backends: Backends
    cache: FeedCache
    aggregator: GroupAggregator

    @classmethod
    def open(cls, config: GlobalConfig | None = None) -> "Session":
        """Load configuration and build all components.

        Raises:
            InvalidConfigError: If the configuration file is invalid.
            StorageError: If the state database cannot be opened.
            PluginConflictError: If two backends share an identifier.
        """
        if config is None:
            config = ConfigManager().load_config()

        store = StateStore(db_path=config.database_path)
        backends = load_backends(config.backend_settings())
        cache = FeedCache(backends.fetching, timeout=config.fetch_timeout_seconds)
        aggregator = GroupAggregator(
            store,
            cache,
            max_concurrency=config.max_concurrent_feeds,
            policy=FailurePolicy(config.failure_policy),
        )
        logger.debug(
            f"Session ready: fetching={backends.fetching.names()} "
            f"discovery={backends.discovery.names()}"
        )
        return cls(
            config=config,
            store=store,
            backends=backends,
            cache=cache,
            aggregator=aggregator,
        )

    def close(self) -> None:
        cleanup_backends(self.backends)
