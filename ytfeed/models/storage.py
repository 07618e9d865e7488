"""
This module contains the key-value stores that hold the persisted state.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from urllib.parse import quote

import aiofiles
from aiofiles import os, ospath


class KeyValueStore(ABC):
    """
    Represents a durable mapping from string keys to string values.
    Implementations never raise on I/O failures; they log and carry on.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """
        Get the value of a key.

        :param key: The key to get.
        :return: The stored value, or None if the key is not stored.
        """

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing the previous value.

        :param key: The key to set.
        :param value: The value to store.
        """

    @abstractmethod
    async def remove(self, key: str) -> None:
        """
        Remove a key. Removing a key that is not stored does nothing.

        :param key: The key to remove.
        """


class InMemoryStore(KeyValueStore):
    """
    Represents a key-value store that lives only as long as the process.
    """

    def __init__(self, values: dict[str, str] | None = None) -> None:
        """
        Create a new InMemoryStore instance.

        :param values: The initial values of the store.
        """

        self._logger = logging.getLogger(self.__class__.__name__)
        self._values: dict[str, str] = dict(values or {})
        self._lock = Lock()

    async def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        with self._lock:
            self._logger.debug("Setting %s (%d bytes)", key, len(value))
            self._values[key] = value

    async def remove(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


class FileStore(KeyValueStore):
    """
    Represents a key-value store that keeps one file per key in a directory.
    """

    def __init__(self, *, dir_path: Path | str) -> None:
        """
        Create a new FileStore instance.

        :param dir_path: The path to the directory to store the files in. It is created
                         when the first value is stored.
        """

        self._logger = logging.getLogger(self.__class__.__name__)
        self._dir_path = Path(dir_path)
        self._lock = asyncio.Lock()

    def _get_path(self, key: str) -> Path:
        """
        Get the path to the file of a key.

        :param key: The key to get the file for.
        """

        return self._dir_path / f"{quote(key, safe='')}.json"

    async def get(self, key: str) -> str | None:
        path = self._get_path(key)

        async with self._lock:
            if not await ospath.exists(path):
                return None

            try:
                async with aiofiles.open(path, "r", encoding="utf-8") as file:
                    return await file.read()
            except (OSError, UnicodeDecodeError):
                self._logger.warning("Failed to read %s", path, exc_info=True)
                return None

    async def set(self, key: str, value: str) -> None:
        path = self._get_path(key)

        async with self._lock:
            try:
                await os.makedirs(self._dir_path, exist_ok=True)

                async with aiofiles.open(path, "w", encoding="utf-8") as file:
                    self._logger.debug("Writing %s to %s", key, path)
                    await file.write(value)
            except OSError:
                self._logger.warning("Failed to write %s", path, exc_info=True)

    async def remove(self, key: str) -> None:
        path = self._get_path(key)

        async with self._lock:
            if not await ospath.exists(path):
                return

            try:
                await os.remove(path)
            except OSError:
                self._logger.warning("Failed to remove %s", path, exc_info=True)
