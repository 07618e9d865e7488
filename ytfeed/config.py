"""Contains the ConfigStore class which owns the preferences of the FeedTracker."""

__all__ = ["ConfigStore"]

import logging
from dataclasses import replace
from typing import Any

from ytfeed.models import FeedConfig
from ytfeed.persistence import (
    CONFIG_KEY,
    CONFIG_VERSION,
    VersionedStore,
    migrate_config,
)


class ConfigStore:
    """Holds the single instance of FeedConfig and persists every change."""

    def __init__(
        self, store: VersionedStore, *, default: FeedConfig | None = None
    ) -> None:
        """Set up the ConfigStore instance. Call :meth:`load` before using it.

        :param store: The store to persist the preferences in.
        :param default: The preferences to use when nothing is stored.
            If not provided, the defaults of FeedConfig are used.
        """
        self._logger = logging.getLogger(self.__class__.__name__)
        self._store = store
        self._default = default or FeedConfig()
        self._config = self._default

    @property
    def config(self) -> FeedConfig:
        """Get the current preferences.

        :return: The current preferences.
        """
        return self._config

    async def load(self) -> FeedConfig:
        """Load the persisted preferences, migrating older versions.

        :return: The loaded preferences, or the defaults if nothing usable is stored.
        """
        data = await self._store.load(CONFIG_KEY, CONFIG_VERSION, migrate_config)

        self._config = self._default
        if isinstance(data, dict):
            try:
                self._config = FeedConfig.from_dict(data)
            except (TypeError, ValueError):
                self._logger.warning("Ignoring corrupt config: %s", data)

        return self._config

    async def update(self, **changes: Any) -> FeedConfig:
        """Change some of the preferences and persist them.

        :param changes: The preferences to change, by attribute name of FeedConfig.
        :return: The new preferences.
        :raises ValueError: If a value is out of range.
        :raises TypeError: If a name is not a preference.
        """
        config = replace(self._config, **changes)
        self._config = config

        self._logger.debug("Updated config: %s", changes)

        await self._store.save(CONFIG_KEY, CONFIG_VERSION, config.to_dict())

        return config
