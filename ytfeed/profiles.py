"""Contains the ProfileStore class which owns the profiles, their channels and their
feeds.
"""

__all__ = ["ProfileStore"]

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any
from uuid import uuid4

from ytfeed.errors import DuplicateChannelError, LastProfileError, NotFoundError
from ytfeed.models.profile import Feed, Profile
from ytfeed.models.video import Channel
from ytfeed.persistence import (
    DEFAULT_PROFILE_NAME,
    PROFILES_KEY,
    PROFILES_VERSION,
    VersionedStore,
    migrate_profiles,
)
from ytfeed.resolver import ChannelResolver


class ProfileStore:
    """An ordered collection of profiles with one active profile.

    There is always at least one profile, and the active profile always exists. Every
    change rewrites the whole collection and persists it.
    """

    def __init__(self, store: VersionedStore) -> None:
        """Set up the ProfileStore instance. Call :meth:`load` before using it.

        :param store: The store to persist the profiles in.
        """
        self._logger = logging.getLogger(self.__class__.__name__)
        self._store = store
        self._profiles: list[Profile] = [self._new_profile(DEFAULT_PROFILE_NAME)]
        self._active_id = self._profiles[0].id

    @property
    def profiles(self) -> list[Profile]:
        """Get the profiles in the order they were created.

        :return: A copy of the list of profiles.
        """
        return list(self._profiles)

    @property
    def active(self) -> Profile:
        """Get the active profile.

        :return: The active profile.
        """
        return self.get(self._active_id)

    def get(self, profile_id: str) -> Profile:
        """Get a profile by its ID.

        :param profile_id: The ID of the profile.
        :return: The profile.
        :raises NotFoundError: If no profile has the ID.
        """
        for profile in self._profiles:
            if profile.id == profile_id:
                return profile

        raise NotFoundError(f"No profile found with ID: {profile_id}")

    async def load(self) -> None:
        """Load the persisted profiles, migrating older versions. If nothing usable is
        stored, a single empty profile is created.
        """
        data = await self._store.load(PROFILES_KEY, PROFILES_VERSION, migrate_profiles)

        profiles: list[Profile] = []
        active_id = None
        if isinstance(data, dict) and isinstance(data.get("profiles"), list):
            for item in data["profiles"]:
                profile = self._parse_profile(item)
                if profile is not None:
                    profiles.append(profile)
            active_id = data.get("activeProfileId")

        if not profiles:
            self._logger.info("Creating profile: %s", DEFAULT_PROFILE_NAME)
            profiles = [self._new_profile(DEFAULT_PROFILE_NAME)]

        self._profiles = profiles
        self._active_id = (
            active_id
            if any(profile.id == active_id for profile in profiles)
            else profiles[0].id
        )

        self._logger.debug("Loaded %d profiles", len(self._profiles))

        await self._save()

    async def create_profile(self, name: str) -> Profile:
        """Create an empty profile. The active profile does not change.

        :param name: The name of the profile.
        :return: The new profile.
        :raises ValueError: If the name is blank.
        """
        if not name.strip():
            raise ValueError("Profile name cannot be blank")

        profile = self._new_profile(name.strip())
        self._profiles = [*self._profiles, profile]
        self._logger.info("Created profile: %s", profile.name)

        await self._save()

        return profile

    async def delete_profile(self, profile_id: str) -> None:
        """Delete a profile. If it was active, the first remaining profile becomes
        active.

        :param profile_id: The ID of the profile.
        :raises NotFoundError: If no profile has the ID.
        :raises LastProfileError: If it is the only profile.
        """
        profile = self.get(profile_id)
        if len(self._profiles) == 1:
            raise LastProfileError("Cannot delete the last remaining profile")

        self._profiles = [item for item in self._profiles if item.id != profile_id]
        if self._active_id == profile_id:
            self._active_id = self._profiles[0].id

        self._logger.info("Deleted profile: %s", profile.name)

        await self._save()

    async def switch_active(self, profile_id: str) -> None:
        """Make a profile the active one.

        :param profile_id: The ID of the profile.
        :raises NotFoundError: If no profile has the ID.
        """
        profile = self.get(profile_id)
        self._active_id = profile.id

        self._logger.debug("Switched to profile: %s", profile.name)

        await self._save()

    async def add_channel(
        self, profile_id: str, query: str, resolver: ChannelResolver
    ) -> Channel:
        """Resolve a channel and add it to a profile.

        :param profile_id: The ID of the profile.
        :param query: The channel ID, handle or name.
        :param resolver: The resolver to resolve the query with.
        :return: The added channel.
        :raises NotFoundError: If no profile has the ID or no channel matches.
        :raises DuplicateChannelError: If the profile already tracks the channel.
        :raises ResolutionIncompleteError: If the channel has no uploads list.
        :raises UpstreamError: If the request failed.
        """
        if self.get(profile_id).find_channel(query) is not None:
            raise DuplicateChannelError(f"Channel already added: {query}")

        channel = await resolver.resolve(query)

        profile = self.get(profile_id)
        if (
            profile.find_channel(channel.id) is not None
            or profile.find_channel(channel.name) is not None
        ):
            raise DuplicateChannelError(f"Channel already added: {channel.name}")

        self._replace_profile(replace(profile, channels=[*profile.channels, channel]))
        self._logger.info("Added channel %s to profile %s", channel.name, profile.name)

        await self._save()

        return channel

    async def add_channels(
        self, profile_id: str, channels: Iterable[Channel]
    ) -> list[Channel]:
        """Add resolved channels to a profile, skipping the ones it already tracks.

        :param profile_id: The ID of the profile.
        :param channels: The channels to add.
        :return: The channels that were added.
        :raises NotFoundError: If no profile has the ID.
        """
        profile = self.get(profile_id)

        added: list[Channel] = []
        for channel in channels:
            tracked = [*profile.channels, *added]
            if any(
                item.id == channel.id or item.name.casefold() == channel.name.casefold()
                for item in tracked
            ):
                continue
            added.append(channel)

        if added:
            channels = [*profile.channels, *added]
            self._replace_profile(replace(profile, channels=channels))
            await self._save()

        return added

    async def remove_channel(self, profile_id: str, channel_id: str) -> None:
        """Stop tracking a channel. Removing an untracked channel does nothing.

        :param profile_id: The ID of the profile.
        :param channel_id: The ID of the channel.
        :raises NotFoundError: If no profile has the ID.
        """
        profile = self.get(profile_id)
        channels = [channel for channel in profile.channels if channel.id != channel_id]
        if len(channels) == len(profile.channels):
            return

        self._replace_profile(replace(profile, channels=channels))
        self._logger.info(
            "Removed channel %s from profile %s", channel_id, profile.name
        )

        await self._save()

    async def replace_feeds(self, feeds: Mapping[str, Feed]) -> None:
        """Replace the feeds of profiles in a single step.

        :param feeds: The new feed of each profile, by profile ID.
        :raises NotFoundError: If a profile ID is unknown. Nothing is replaced then.
        """
        for profile_id in feeds:
            self.get(profile_id)

        self._profiles = [
            replace(profile, feed=feeds[profile.id]) if profile.id in feeds else profile
            for profile in self._profiles
        ]

        await self._save()

    def _replace_profile(self, profile: Profile) -> None:
        self._profiles = [
            profile if item.id == profile.id else item for item in self._profiles
        ]

    async def _save(self) -> None:
        await self._store.save(
            PROFILES_KEY,
            PROFILES_VERSION,
            {
                "activeProfileId": self._active_id,
                "profiles": [profile.to_dict() for profile in self._profiles],
            },
        )

    @staticmethod
    def _new_profile(name: str) -> Profile:
        return Profile(id=uuid4().hex, name=name)


    def _parse_profile(self, data: Any) -> Profile | None:
        """Create a profile from its stored form, dropping the parts that are corrupt.

        A corrupt channel or a corrupt feed is dropped on its own, so the rest of the
        profile survives. The cached feed is fetched again on the next scan.

        :param data: The stored profile.
        :return: The profile, or None if its ID or its name is unusable.
        """
        try:
            profile = Profile.from_dict({**data, "channels": [], "feed": None})
        except (KeyError, TypeError, ValueError):
            self._logger.warning("Ignoring corrupt profile: %s", data, exc_info=True)
            return None

        stored_channels = data.get("channels")
        if not isinstance(stored_channels, list):
            stored_channels = []

        channels: list[Channel] = []
        for channel in stored_channels:
            try:
                channels.append(Channel.from_dict(channel))
            except (KeyError, TypeError):
                self._logger.warning(
                    "Ignoring corrupt channel of profile %s: %s", profile.name, channel
                )

        try:
            feed = Feed.from_dict(data.get("feed") or {})
        except (AttributeError, KeyError, TypeError, ValueError):
            self._logger.warning(
                "Dropping corrupt feed of profile: %s", profile.name, exc_info=True
            )
            feed = Feed()

        return replace(profile, channels=channels, feed=feed)
