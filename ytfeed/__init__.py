"""Contains the FeedTracker class which is used to track YouTube channels and keep a
merged feed of their recent uploads for each profile.
"""

__all__ = [
    "AsyncFeedTracker",
    "Channel",
    "Defaults",
    "Endpoint",
    "Feed",
    "FeedConfig",
    "FeedTracker",
    "FileStore",
    "InMemoryStore",
    "KeyValueStore",
    "Profile",
    "ProfileDefaults",
    "Theme",
    "VideoEntry",
    "YouTubeTransport",
    "filter_entries",
    "should_refresh",
]

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from datetime import UTC, datetime, timedelta
from typing import Any, Self

from ytfeed.aggregator import FeedAggregator
from ytfeed.config import ConfigStore
from ytfeed.enums import Endpoint, Theme
from ytfeed.errors import AuthError, YTFeedError
from ytfeed.filters import filter_entries
from ytfeed.models import Defaults, FeedConfig, ProfileDefaults
from ytfeed.models.profile import Feed, Profile
from ytfeed.models.storage import FileStore, InMemoryStore, KeyValueStore
from ytfeed.models.video import Channel, VideoEntry
from ytfeed.persistence import (
    DEFAULTS_APPLIED_KEY,
    DEFAULTS_APPLIED_VERSION,
    VersionedStore,
    migrate_defaults_applied,
)
from ytfeed.profiles import ProfileStore
from ytfeed.resolver import ChannelResolver
from ytfeed.scheduler import needs_seeding, should_refresh
from ytfeed.transport import YouTubeTransport
from ytfeed.types import Clock, T, Transport


class AsyncFeedTracker:
    """A class that encapsulates the functionality for tracking YouTube channels in
    profiles and fetching the recent uploads of their channels.
    """

    def __init__(
        self,
        *,
        transport: Transport,
        store: KeyValueStore | None = None,
        defaults: Defaults | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Set up the FeedTracker instance. Call :meth:`start` before using it.

        :param transport: The transport to send YouTube Data API requests with.
        :param store: The store to persist the state in. If not provided, a new
            instance of InMemoryStore will be created and used.
        :param defaults: The channels, profiles and preferences applied on the first
            run. If not provided, nothing is applied.
        :param clock: The function returning the current time.
            If not provided, the system clock in UTC is used.
        """
        self._logger = logging.getLogger(self.__class__.__name__)

        self._clock = clock or (lambda: datetime.now(UTC))
        self._defaults = defaults or Defaults()
        self._store = VersionedStore(store or InMemoryStore())
        self._resolver = ChannelResolver(transport)
        self._aggregator = FeedAggregator(transport, clock=self._clock)
        self._profiles = ProfileStore(self._store)
        self._config = ConfigStore(self._store, default=self._defaults.config)
        self._lock = asyncio.Lock()
        self._is_loading = False

    @property
    def profile(self) -> Profile:
        """Get the active profile.

        :return: The active profile.
        """
        return self._profiles.active

    @property
    def profiles(self) -> list[Profile]:
        """Get every profile in the order they were created.

        :return: The profiles.
        """
        return self._profiles.profiles

    @property
    def config(self) -> FeedConfig:
        """Get the current preferences.

        :return: The current preferences.
        """
        return self._config.config

    @property
    def is_loading(self) -> bool:
        """Check if videos are being fetched.

        :return: True if a scan is in progress, False otherwise.
        """
        return self._is_loading

    async def start(self) -> Self:
        """Load the persisted state and apply the defaults if this is the first run.

        :return: The current instance for method chaining.
        """
        await self._config.load()
        self._apply_diagnostics()
        await self._profiles.load()
        await self._seed_defaults()

        return self

    def feed(self, query: str = "") -> list[VideoEntry]:
        """Get the videos of the active profile, filtered by the minimum duration of the
        preferences and by text.

        :param query: Only keep videos whose title, description or channel name contains
            this text, ignoring case.
        :return: The videos, newest first.
        """
        return filter_entries(
            self.profile.feed.entries, self.config.min_duration_seconds, query
        )

    async def add_channel(self, query: str) -> Channel:
        """Resolve a channel and add it to the active profile.

        :param query: The channel ID, handle or name.
        :return: The added channel.
        :raises DuplicateChannelError: If the profile already tracks the channel.
        :raises NotFoundError: If no channel matches the query.
        :raises ResolutionIncompleteError: If the channel has no uploads list.
        :raises UpstreamError: If the request failed.
        """
        return await self._profiles.add_channel(self.profile.id, query, self._resolver)

    async def remove_channel(self, channel_id: str) -> None:
        """Stop tracking a channel in the active profile.

        :param channel_id: The ID of the channel.
        """
        await self._profiles.remove_channel(self.profile.id, channel_id)

    async def set_config(self, **changes: Any) -> FeedConfig:
        """Change some of the preferences.

        :param changes: The preferences to change, by attribute name of FeedConfig.
        :return: The new preferences.
        :raises ValueError: If a value is out of range.
        """
        config = await self._config.update(**changes)
        self._apply_diagnostics()

        return config

    async def create_profile(self, name: str) -> Profile:
        """Create an empty profile.

        :param name: The name of the profile.
        :return: The new profile.
        :raises ValueError: If the name is blank.
        """
        return await self._profiles.create_profile(name)

    async def delete_profile(self, profile_id: str) -> None:
        """Delete a profile.

        :param profile_id: The ID of the profile.
        :raises NotFoundError: If no profile has the ID.
        :raises LastProfileError: If it is the only profile.
        """
        await self._profiles.delete_profile(profile_id)

    async def switch_profile(self, profile_id: str) -> None:
        """Make a profile the active one.

        :param profile_id: The ID of the profile.
        :raises NotFoundError: If no profile has the ID.
        """
        await self._profiles.switch_active(profile_id)

    async def scan(self) -> list[VideoEntry]:
        """Fetch the recent videos of the active profile and replace its feed.
        On failure, the previous videos are kept and the error is recorded in the feed.

        :return: The new videos of the feed, unfiltered and newest first.
        :raises AuthError: If the credentials were rejected.
        :raises AggregationError: If the videos of every channel failed to be fetched.
        """
        return await self._scan()

    async def _scan(self) -> list[VideoEntry]:
        profile = self.profile
        if not profile.channels:
            return []

        async with self._lock:
            self._is_loading = True
            try:
                feed, error = await self._fetch_feed(profile)
                await self._profiles.replace_feeds({profile.id: feed})
            finally:
                self._is_loading = False

        if error is not None:
            raise error

        return feed.entries

    async def scan_all(self) -> dict[str, Feed]:
        """Fetch the recent videos of every profile concurrently, then replace all of
        their feeds in a single step. A profile that fails keeps its previous videos
        and records the error in its feed.

        :return: The new feed of each profile that has channels, by profile ID.
        :raises AuthError: If the credentials were rejected.
        """
        return await self._scan_all()

    async def _scan_all(self) -> dict[str, Feed]:
        profiles = [profile for profile in self.profiles if profile.channels]
        if not profiles:
            return {}

        async with self._lock:
            self._is_loading = True
            try:
                results = await asyncio.gather(
                    *(self._fetch_feed(profile) for profile in profiles)
                )
                feeds = {
                    profile.id: feed
                    for profile, (feed, _) in zip(profiles, results, strict=True)
                }
                await self._profiles.replace_feeds(feeds)
            finally:
                self._is_loading = False

        for _, error in results:
            if isinstance(error, AuthError):
                raise error

        return feeds

    async def refresh_if_stale(self, *, all_profiles: bool = False) -> bool:
        """Fetch the videos again if the feed of the active profile, or of any profile,
        has gone stale.

        :param all_profiles: Whether to check and fetch every profile.
        :return: True if videos were fetched, False otherwise.
        """
        return await self._refresh_if_stale(all_profiles=all_profiles)

    async def _refresh_if_stale(self, *, all_profiles: bool = False) -> bool:
        now = self._clock()
        profiles = self.profiles if all_profiles else [self.profile]
        is_stale = any(
            should_refresh(
                profile.feed.last_fetched_at,
                self.config.refresh_interval_hours,
                now,
                channel_count=len(profile.channels),
            )
            for profile in profiles
        )
        if not is_stale or self._is_loading:
            return False

        self._logger.debug("Feed is stale, fetching videos")

        if all_profiles:
            await self._scan_all()
        else:
            await self._scan()

        return True

    async def run_auto_refresh(
        self,
        *,
        interval: timedelta = timedelta(minutes=5),
        all_profiles: bool = False,
        predicate: Callable[[], bool] | None = None,
    ) -> None:
        """Check the feeds for staleness every interval and fetch them when stale.
        Failures are logged and the loop carries on.

        :param interval: How often to check the feeds.
        :param all_profiles: Whether to check and fetch every profile.
        :param predicate: An optional predicate function that returns True to continue.
        """

        async def task() -> None:
            await self._refresh_if_stale(all_profiles=all_profiles)

        await self._repeat_task(task, interval, predicate)

    async def seed_defaults(self) -> bool:
        """Resolve the default channels and profiles and add them, once.

        Channels that are already tracked are skipped, and channels that fail to
        resolve are logged and skipped. The defaults count as applied when something
        was resolved or nothing was missing, so a run that failed completely is retried
        on the next start.

        :return: True if the defaults were applied by this call, False otherwise.
        """
        return await self._seed_defaults()

    async def _seed_defaults(self) -> bool:
        applied = await self._store.load(
            DEFAULTS_APPLIED_KEY,
            DEFAULTS_APPLIED_VERSION,
            migrate_defaults_applied,
            default=False,
        )
        if not needs_seeding(bool(applied), self._defaults):
            return False

        targets = [(self.profiles[0], self._defaults.channels)]
        for profile_defaults in self._defaults.profiles:
            profile = next(
                (
                    profile
                    for profile in self.profiles
                    if profile.name.casefold() == profile_defaults.name.casefold()
                ),
                None,
            ) or await self._profiles.create_profile(profile_defaults.name)
            targets.append((profile, profile_defaults.channels))

        missing_count = 0
        resolved_count = 0
        for profile, queries in targets:
            missing = [
                query for query in queries if profile.find_channel(query) is None
            ]
            if not missing:
                continue

            missing_count += len(missing)
            channels = await self._resolver.resolve_many(missing)
            resolved_count += len(channels)
            await self._profiles.add_channels(profile.id, channels)

        if missing_count and not resolved_count:
            self._logger.warning("Failed to resolve any default channel")
            return False

        await self._store.save(DEFAULTS_APPLIED_KEY, DEFAULTS_APPLIED_VERSION, True)
        self._logger.info(
            "Applied defaults: %d of %d channels resolved",
            resolved_count,
            missing_count,
        )

        return True

    async def _fetch_feed(self, profile: Profile) -> tuple[Feed, YTFeedError | None]:
        """Fetch the recent videos of a profile.

        :param profile: The profile to fetch the videos of.
        :return: The new feed and the error that stopped the fetch, if any.
        """
        config = self.config

        try:
            entries = await self._aggregator.aggregate(
                profile.channels, config.lookback_days, config.max_results_per_channel
            )
        except YTFeedError as ex:
            self._logger.warning("Failed to scan profile %s: %s", profile.name, ex)
            return (
                Feed(
                    entries=profile.feed.entries,
                    last_fetched_at=profile.feed.last_fetched_at,
                    last_error=str(ex),
                ),
                ex,
            )

        return Feed(entries=entries, last_fetched_at=self._clock()), None

    async def _repeat_task(
        self,
        task: Callable[[], Awaitable[None]],
        interval: timedelta,
        predicate: Callable[[], bool] | None = None,
    ) -> None:
        """Repeatedly run a task every interval, even if the task fails.

        :param task: The function to repeat
        :param interval: The interval to repeat the task
        :param predicate: An optional predicate function
            that returns True to continue
        """
        while not predicate or predicate():
            try:
                await task()
            except Exception:
                self._logger.exception("Failed to repeat task")

            await asyncio.sleep(interval.total_seconds())

    def _apply_diagnostics(self) -> None:
        """Switch the loggers of the tracker between DEBUG and INFO."""
        level = logging.DEBUG if self.config.diagnostics_enabled else logging.INFO
        for component in (
            self,
            self._store,
            self._resolver,
            self._aggregator,
            self._profiles,
            self._config,
        ):
            logging.getLogger(component.__class__.__name__).setLevel(level)


class FeedTracker(AsyncFeedTracker):
    """A class that encapsulates the functionality for tracking YouTube channels in
    profiles, with blocking methods.
    """

    def __init__(
        self,
        *,
        transport: Transport,
        store: KeyValueStore | None = None,
        defaults: Defaults | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Create a new FeedTracker instance. Call :meth:`start` before using it.

        :param transport: The transport to send YouTube Data API requests with.
        :param store: The store to persist the state in. If not provided, a new
            instance of InMemoryStore will be created and used.
        :param defaults: The channels, profiles and preferences applied on the first
            run. If not provided, nothing is applied.
        :param clock: The function returning the current time.
            If not provided, the system clock in UTC is used.
        """
        super().__init__(
            transport=transport, store=store, defaults=defaults, clock=clock
        )
        self._loop = asyncio.new_event_loop()

    def start(self) -> Self:  # noqa: D102
        self._run_coroutine(super().start())
        return self

    def add_channel(self, query: str) -> Channel:  # noqa: D102
        return self._run_coroutine(super().add_channel(query))

    def remove_channel(self, channel_id: str) -> None:  # noqa: D102
        self._run_coroutine(super().remove_channel(channel_id))

    def set_config(self, **changes: Any) -> FeedConfig:  # noqa: D102
        return self._run_coroutine(super().set_config(**changes))

    def create_profile(self, name: str) -> Profile:  # noqa: D102
        return self._run_coroutine(super().create_profile(name))

    def delete_profile(self, profile_id: str) -> None:  # noqa: D102
        self._run_coroutine(super().delete_profile(profile_id))

    def switch_profile(self, profile_id: str) -> None:  # noqa: D102
        self._run_coroutine(super().switch_profile(profile_id))

    def scan(self) -> list[VideoEntry]:  # noqa: D102
        return self._run_coroutine(super().scan())

    def scan_all(self) -> dict[str, Feed]:  # noqa: D102
        return self._run_coroutine(super().scan_all())

    def refresh_if_stale(self, *, all_profiles: bool = False) -> bool:  # noqa: D102
        return self._run_coroutine(super().refresh_if_stale(all_profiles=all_profiles))

    def seed_defaults(self) -> bool:  # noqa: D102
        return self._run_coroutine(super().seed_defaults())

    def close(self) -> None:
        """Close the event loop of the tracker."""
        self._loop.close()

    def _run_coroutine(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run a coroutine in the event loop of the tracker.

        :param coro: The coroutine to run.
        :return: The result of the coroutine.
        """
        return self._loop.run_until_complete(coro)
