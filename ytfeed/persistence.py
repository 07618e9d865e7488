"""Contains the versioned persistence layer and the migration of each dataset.

Every value is stored as an envelope ``{"version": ..., "data": ...}``. When the stored
version differs from the current one, the dataset's migration function converts the
stored data, and the result is written back right away so that a migration runs at most
once per version change.
"""

__all__ = [
    "CONFIG_KEY",
    "CONFIG_VERSION",
    "DEFAULTS_APPLIED_KEY",
    "DEFAULTS_APPLIED_VERSION",
    "DEFAULT_PROFILE_NAME",
    "PROFILES_KEY",
    "PROFILES_VERSION",
    "VersionedStore",
    "migrate_config",
    "migrate_defaults_applied",
    "migrate_profiles",
]

import json
import logging
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from ytfeed.errors import MigrationError
from ytfeed.models import (
    LOOKBACK_DAYS_RANGE,
    MAX_RESULTS_PER_CHANNEL_RANGE,
    REFRESH_INTERVAL_HOURS_RANGE,
    FeedConfig,
)
from ytfeed.models.storage import KeyValueStore
from ytfeed.types import JSON, Migration

PROFILES_KEY = "ytfeed.profiles"
PROFILES_VERSION = "2"

CONFIG_KEY = "ytfeed.config"
CONFIG_VERSION = "2"

DEFAULTS_APPLIED_KEY = "ytfeed.defaults_applied"
DEFAULTS_APPLIED_VERSION = "2"

DEFAULT_PROFILE_NAME = "Default"

_ENTRY_KEYS = frozenset(
    {"id", "title", "channelName", "channelId", "url", "publishedAt"}
)

_LEGACY_CONFIG_KEYS = {
    "daysBack": "lookback_days",
    "autoRefreshHours": "refresh_interval_hours",
    "maxResults": "max_results_per_channel",
    "minDuration": "min_duration_seconds",
    "debugLogging": "diagnostics_enabled",
    "theme": "theme",
}


class VersionedStore:
    """Stores JSON values tagged with a schema version on top of a KeyValueStore."""

    def __init__(self, store: KeyValueStore) -> None:
        """Create a new VersionedStore instance.

        :param store: The store to keep the envelopes in.
        """
        self._logger = logging.getLogger(self.__class__.__name__)
        self._store = store

    async def load(
        self,
        key: str,
        version: str,
        migrate: Migration,
        default: JSON = None,
    ) -> JSON:
        """Load the value of a key, migrating it first if it has an old version.

        :param key: The key to load.
        :param version: The current version of the dataset.
        :param migrate: The function converting data of an older version into the
            current shape. It receives the stored version (None if the value was
            stored without an envelope) and the stored data.
        :param default: The value to return if nothing usable is stored.
        :return: The stored data in its current shape, or the default.
        """
        raw = await self._store.get(key)
        if raw is None:
            return default

        try:
            envelope = json.loads(raw)
        except json.JSONDecodeError:
            self._logger.warning("Ignoring corrupt value of %s", key)
            return default

        if isinstance(envelope, dict) and "version" in envelope and "data" in envelope:
            stored_version, data = envelope["version"], envelope["data"]
        else:
            stored_version, data = None, envelope

        if stored_version == version:
            return data

        self._logger.info(
            "Migrating %s from version %s to %s", key, stored_version, version
        )

        try:
            data = migrate(stored_version, data)
        except MigrationError:
            self._logger.warning("Failed to migrate %s", key, exc_info=True)
            return default

        await self.save(key, version, data)

        return data

    async def save(self, key: str, version: str, value: JSON) -> None:
        """Store a value tagged with its version.

        :param key: The key to store the value under.
        :param version: The version of the value.
        :param value: The JSON-serializable value.
        """
        await self._store.set(key, json.dumps({"version": version, "data": value}))

    async def remove(self, key: str) -> None:
        """Remove the value of a key.

        :param key: The key to remove.
        """
        await self._store.remove(key)


def migrate_profiles(old_version: str | None, raw: JSON) -> dict[str, Any]:
    """Migrate a stored profile collection to the current version.

    Version None held a bare list of channels and version "1" held the channels and
    the feed of a single profile. Both become the only profile of a collection, named
    "Default". Channels are always kept; cached videos are kept only if they already
    have the current shape.

    :raises MigrationError: If the version or the shape is unknown.
    """
    if old_version is None and isinstance(raw, list):
        return _wrap_single_profile(raw, None)

    if old_version == "1" and isinstance(raw, dict):
        return _wrap_single_profile(raw.get("channels") or [], raw.get("feed"))

    raise MigrationError(f"Unknown version of profiles: {old_version}")


def _wrap_single_profile(channels: list[Any], feed: Any) -> dict[str, Any]:
    profile = {
        "id": uuid4().hex,
        "name": DEFAULT_PROFILE_NAME,
        "channels": [
            migrated
            for channel in channels
            if (migrated := _migrate_channel(channel)) is not None
        ],
        "feed": _migrate_feed(feed),
    }

    return {"activeProfileId": profile["id"], "profiles": [profile]}


def _migrate_channel(channel: Any) -> dict[str, Any] | None:
    if not isinstance(channel, dict) or not channel.get("id"):
        return None

    uploads_list_id = channel.get("uploadsListId") or channel.get("uploadsPlaylistId")
    if not uploads_list_id:
        return None

    return {
        "id": channel["id"],
        "name": channel.get("name") or channel["id"],
        "thumbnailUrl": channel.get("thumbnailUrl") or channel.get("thumbnail"),
        "uploadsListId": uploads_list_id,
    }


def _migrate_feed(feed: Any) -> dict[str, Any]:
    empty = {"entries": [], "lastFetchedAt": None, "lastError": None}
    if not isinstance(feed, dict):
        return empty

    entries = feed.get("entries") or []
    if not all(_has_current_shape(entry) for entry in entries):
        # Incompatible cache; drop it so the next load fetches again.
        return empty

    last_fetched_at = feed.get("lastFetchedAt")
    if isinstance(last_fetched_at, int | float):
        fetched_at = datetime.fromtimestamp(last_fetched_at / 1000, UTC)
        last_fetched_at = fetched_at.isoformat()

    return {
        "entries": entries,
        "lastFetchedAt": last_fetched_at,
        "lastError": feed.get("lastError"),
    }


def _has_current_shape(entry: Any) -> bool:
    if not isinstance(entry, dict) or not _ENTRY_KEYS.issubset(entry):
        return False

    try:
        datetime.fromisoformat(entry["publishedAt"])
    except (TypeError, ValueError):
        return False

    return all(
        entry.get(key) is None or isinstance(entry[key], int)
        for key in ("durationSeconds", "viewCount")
    ) and "duration" not in entry


def migrate_config(old_version: str | None, raw: JSON) -> dict[str, Any]:
    """Migrate stored preferences to the current version.

    Version "1" (and unversioned values) used camelCase keys. Missing values take
    their defaults, as do values that are not numbers. Out-of-range values are
    clamped.

    :raises MigrationError: If the version or the shape is unknown.
    """
    if old_version not in (None, "1") or not isinstance(raw, dict):
        raise MigrationError(f"Unknown version of config: {old_version}")

    default = FeedConfig().to_dict()
    config = dict(default)
    for old_key, new_key in _LEGACY_CONFIG_KEYS.items():
        if raw.get(old_key) is not None:
            config[new_key] = raw[old_key]

    for key, valid in (
        ("lookback_days", LOOKBACK_DAYS_RANGE),
        ("refresh_interval_hours", REFRESH_INTERVAL_HOURS_RANGE),
        ("max_results_per_channel", MAX_RESULTS_PER_CHANNEL_RANGE),
    ):
        value = _to_int(config[key], default[key])
        config[key] = min(max(value, valid.start), valid.stop - 1)

    config["min_duration_seconds"] = max(
        _to_int(config["min_duration_seconds"], default["min_duration_seconds"]), 0
    )
    config["diagnostics_enabled"] = bool(config["diagnostics_enabled"])
    if config["theme"] not in ("dark", "light"):
        config["theme"] = FeedConfig().theme.value

    return config


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def migrate_defaults_applied(old_version: str | None, raw: JSON) -> bool:
    """Migrate the stored flag telling whether the defaults were applied.

    Older versions stored the flag as the string "true".
    """
    if isinstance(raw, str):
        return raw.strip().lower() == "true"

    return bool(raw)
