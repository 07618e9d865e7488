"""Test the InMemoryStore class."""

import pytest

from ytfeed.models.storage import InMemoryStore


@pytest.fixture
def store() -> InMemoryStore:
    """Create an InMemoryStore instance."""
    return InMemoryStore(values={"existing": "value"})


@pytest.mark.asyncio
async def test_get(store: InMemoryStore) -> None:
    """Test the get method of the InMemoryStore class."""
    assert await store.get("existing") == "value"
    assert await store.get("missing") is None


@pytest.mark.asyncio
async def test_set(store: InMemoryStore) -> None:
    """Test the set method of the InMemoryStore class."""
    await store.set("key", "first")
    await store.set("key", "second")

    assert await store.get("key") == "second"
    assert store._values == {"existing": "value", "key": "second"}


@pytest.mark.asyncio
async def test_remove(store: InMemoryStore) -> None:
    """Test the remove method of the InMemoryStore class."""
    await store.remove("existing")
    assert await store.get("existing") is None

    # it should be no-op if the key is not stored
    await store.remove("existing")


def test_initial_values_copied() -> None:
    """Test that the initial values are copied into the store."""
    values = {"key": "value"}

    store = InMemoryStore(values=values)
    values["key"] = "changed"

    assert store._values == {"key": "value"}
