"""Test the ProfileStore and ConfigStore classes."""

import json

import pytest

from tests import FakeTransport, channel_item, get_channel, get_entry
from ytfeed import Endpoint, Feed, FeedConfig, InMemoryStore, Profile, Theme
from ytfeed.config import ConfigStore
from ytfeed.errors import DuplicateChannelError, LastProfileError, NotFoundError
from ytfeed.persistence import (
    CONFIG_KEY,
    DEFAULT_PROFILE_NAME,
    PROFILES_KEY,
    VersionedStore,
)
from ytfeed.profiles import ProfileStore
from ytfeed.resolver import ChannelResolver

FIRST_ID = "UC" + "a" * 22
SECOND_ID = "UC" + "b" * 22


def get_resolver() -> tuple[ChannelResolver, FakeTransport]:
    """Create a resolver that knows two channels by ID and by name."""
    channels = {
        FIRST_ID: channel_item(FIRST_ID, "First", uploads="UU_first"),
        SECOND_ID: channel_item(SECOND_ID, "Second", uploads="UU_second"),
    }

    def handler(endpoint: Endpoint, params: dict) -> dict:
        if endpoint == Endpoint.SEARCH:
            handle = params["q"].lstrip("@").casefold()
            for channel_id, item in channels.items():
                if item["snippet"]["title"].casefold() == handle:
                    return {
                        "items": [
                            {"snippet": {"channelId": channel_id, **item["snippet"]}}
                        ]
                    }
            return {"items": []}
        return {"items": [channels[params["id"]]]}

    transport = FakeTransport(handler)
    return ChannelResolver(transport), transport


async def get_store(backend: InMemoryStore | None = None) -> ProfileStore:
    """Create a ProfileStore instance and load it."""
    store = ProfileStore(VersionedStore(backend or InMemoryStore()))
    await store.load()
    return store


@pytest.mark.asyncio
async def test_load_empty() -> None:
    """Test that a Default profile is created when nothing is stored."""
    backend = InMemoryStore()

    store = await get_store(backend)

    assert [profile.name for profile in store.profiles] == [DEFAULT_PROFILE_NAME]
    assert store.active == store.profiles[0]
    stored = json.loads(backend._values[PROFILES_KEY])
    assert stored["data"]["activeProfileId"] == store.active.id


@pytest.mark.asyncio
async def test_load_round_trip() -> None:
    """Test that profiles are restored as they were saved."""
    backend = InMemoryStore()
    store = await get_store(backend)
    work = await store.create_profile(" Work ")
    await store.add_channels(work.id, [get_channel("C1")])
    await store.replace_feeds({work.id: Feed(entries=[get_entry()])})
    await store.switch_active(work.id)

    restored = await get_store(backend)

    assert restored.profiles == store.profiles
    assert restored.active.id == work.id
    assert restored.active.name == "Work"


@pytest.mark.asyncio
async def test_load_unknown_active() -> None:
    """Test that the first profile becomes active if the active one is unknown."""
    store = await get_store()
    data = {
        "activeProfileId": "missing",
        "profiles": [profile.to_dict() for profile in store.profiles],
    }
    backend = InMemoryStore(
        values={PROFILES_KEY: json.dumps({"version": "2", "data": data})}
    )

    restored = await get_store(backend)

    assert restored.active.id == store.profiles[0].id


@pytest.mark.asyncio
async def test_load_corrupt_feed() -> None:
    """Test that a corrupt feed is dropped without losing the profiles."""
    bad_entry = {**get_entry("bad").to_dict(), "publishedAt": "not-a-date"}
    work = Profile(id="work", name="Work", channels=[get_channel("C1")])
    home = Profile(id="home", name="Home", channels=[get_channel("C2")])
    data = {
        "activeProfileId": "home",
        "profiles": [
            work.to_dict(),
            {**home.to_dict(), "feed": {"entries": [bad_entry]}},
            {"name": "No ID", "channels": []},
        ],
    }
    backend = InMemoryStore(
        values={PROFILES_KEY: json.dumps({"version": "2", "data": data})}
    )

    store = await get_store(backend)

    assert store.profiles == [work, home]
    assert store.active == home

    stored = json.loads(backend._values[PROFILES_KEY])["data"]
    assert [profile["name"] for profile in stored["profiles"]] == ["Work", "Home"]
    assert stored["profiles"][1]["channels"] == [get_channel("C2").to_dict()]


@pytest.mark.asyncio
async def test_load_corrupt_channel() -> None:
    """Test that a corrupt channel is dropped without losing the others."""
    profile = Profile(id="p1", name="Work", channels=[get_channel("C1")])
    stored = profile.to_dict()
    stored["channels"] = [{"id": "C0"}, "garbage", *stored["channels"]]
    data = {"activeProfileId": "p1", "profiles": [stored]}
    backend = InMemoryStore(
        values={PROFILES_KEY: json.dumps({"version": "2", "data": data})}
    )

    store = await get_store(backend)

    assert store.profiles == [profile]


@pytest.mark.asyncio
async def test_create_profile() -> None:
    """Test creating a profile."""
    store = await get_store()
    active = store.active

    profile = await store.create_profile("Music")

    assert profile.channels == []
    assert profile.feed == Feed()
    assert store.profiles[-1] == profile
    assert store.active == active

    with pytest.raises(ValueError, match="blank"):
        await store.create_profile("  ")


@pytest.mark.asyncio
async def test_delete_profile() -> None:
    """Test deleting profiles."""
    store = await get_store()
    default = store.active
    music = await store.create_profile("Music")
    await store.switch_active(music.id)

    await store.delete_profile(music.id)

    assert store.profiles == [default]
    assert store.active == default

    with pytest.raises(LastProfileError):
        await store.delete_profile(default.id)

    with pytest.raises(NotFoundError):
        await store.delete_profile("missing")


@pytest.mark.asyncio
async def test_delete_inactive_profile() -> None:
    """Test that deleting another profile keeps the active one."""
    store = await get_store()
    music = await store.create_profile("Music")
    news = await store.create_profile("News")
    await store.switch_active(news.id)

    await store.delete_profile(music.id)

    assert store.active == news
    assert len(store.profiles) == 2


@pytest.mark.asyncio
async def test_switch_active() -> None:
    """Test switching the active profile."""
    store = await get_store()
    music = await store.create_profile("Music")

    await store.switch_active(music.id)
    assert store.active == music

    with pytest.raises(NotFoundError):
        await store.switch_active("missing")

    assert store.active == music


@pytest.mark.asyncio
async def test_add_channel() -> None:
    """Test resolving and adding a channel."""
    store = await get_store()
    resolver, _ = get_resolver()

    channel = await store.add_channel(store.active.id, FIRST_ID, resolver)

    assert channel.name == "First"
    assert channel.uploads_list_id == "UU_first"
    assert store.active.channels == [channel]


@pytest.mark.asyncio
async def test_add_channel_duplicate() -> None:
    """Test that a channel cannot be added twice to a profile."""
    store = await get_store()
    resolver, transport = get_resolver()
    await store.add_channel(store.active.id, FIRST_ID, resolver)
    requests = len(transport.requests)

    # already tracked by ID or by name, so nothing is resolved
    for query in (FIRST_ID, "first"):
        with pytest.raises(DuplicateChannelError):
            await store.add_channel(store.active.id, query, resolver)
    assert len(transport.requests) == requests

    # the handle only matches after resolving
    with pytest.raises(DuplicateChannelError):
        await store.add_channel(store.active.id, "@first", resolver)

    assert [channel.id for channel in store.active.channels] == [FIRST_ID]


@pytest.mark.asyncio
async def test_add_channel_other_profile() -> None:
    """Test that profiles track channels independently."""
    store = await get_store()
    resolver, _ = get_resolver()
    music = await store.create_profile("Music")

    await store.add_channel(store.active.id, FIRST_ID, resolver)
    await store.add_channel(music.id, FIRST_ID, resolver)

    assert store.get(music.id).channels == store.active.channels


@pytest.mark.asyncio
async def test_add_channels() -> None:
    """Test adding resolved channels while skipping tracked ones."""
    store = await get_store()
    first = get_channel("C1", "First")
    await store.add_channels(store.active.id, [first])

    added = await store.add_channels(
        store.active.id,
        [get_channel("C1", "Renamed"), get_channel("C2", "FIRST"), get_channel("C3")],
    )

    assert [channel.id for channel in added] == ["C3"]
    assert [channel.id for channel in store.active.channels] == ["C1", "C3"]


@pytest.mark.asyncio
async def test_remove_channel() -> None:
    """Test removing a channel."""
    store = await get_store()
    await store.add_channels(store.active.id, [get_channel("C1"), get_channel("C2")])

    await store.remove_channel(store.active.id, "C1")
    assert [channel.id for channel in store.active.channels] == ["C2"]

    # it should be no-op if the channel is not tracked
    await store.remove_channel(store.active.id, "C1")
    assert [channel.id for channel in store.active.channels] == ["C2"]


@pytest.mark.asyncio
async def test_replace_feeds() -> None:
    """Test replacing the feeds of many profiles at once."""
    store = await get_store()
    default = store.active
    music = await store.create_profile("Music")
    feed = Feed(entries=[get_entry()])

    await store.replace_feeds({default.id: feed, music.id: Feed(last_error="Oops")})

    assert store.get(default.id).feed == feed
    assert store.get(music.id).feed.last_error == "Oops"

    with pytest.raises(NotFoundError):
        await store.replace_feeds({default.id: Feed(), "missing": Feed()})

    assert store.get(default.id).feed == feed


@pytest.mark.asyncio
async def test_config_store() -> None:
    """Test loading and updating the preferences."""
    backend = InMemoryStore()
    store = ConfigStore(VersionedStore(backend))

    assert await store.load() == FeedConfig()

    config = await store.update(lookback_days=7, theme=Theme.LIGHT)
    assert config.lookback_days == 7
    assert store.config == config

    with pytest.raises(ValueError):
        await store.update(lookback_days=0)
    assert store.config == config

    restored = ConfigStore(VersionedStore(backend))
    assert await restored.load() == config
    assert json.loads(backend._values[CONFIG_KEY])["data"]["theme"] == "light"


@pytest.mark.asyncio
async def test_config_store_default() -> None:
    """Test that the given default is used when nothing usable is stored."""
    default = FeedConfig(theme=Theme.LIGHT)
    backend = InMemoryStore(
        values={CONFIG_KEY: json.dumps({"version": "2", "data": {"lookback_days": 0}})}
    )

    store = ConfigStore(VersionedStore(backend), default=default)

    assert await store.load() == default
