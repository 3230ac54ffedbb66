"""Durable storage used to carry flow state across the redirect.

The handler only ever writes through ``set_for_user``. ``InMemoryStorage``
additionally implements the read and delete side so that the component
resuming the flow, and tests, can use the same object.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Protocol

from solid_authn.models.errors import StorageError

logger = logging.getLogger(__name__)

USER_KEY_PREFIX = "solidClientAuthenticationUser"


class StorageUtility(Protocol):
    """Protocol for the key/value storage the login flow writes to."""

    async def set_for_user(self, key: str, values: dict[str, str]) -> None:
        """Store a record of string fields under an opaque key.

        Args:
            key: OAuth state value or session id.
            values: Fields to store; merged into any existing record.
        """
        ...


class InMemoryStorage:
    """Process-local storage keeping user records as JSON strings.

    Records live under ``<prefix>:<key>`` so they cannot collide with raw
    keys set through ``set``.
    """

    def __init__(self, prefix: str = USER_KEY_PREFIX):
        self.prefix = prefix
        self._data: dict[str, str] = {}
        self._lock = asyncio.Lock()

    # ================================
    # Raw keys
    # ================================

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    # ================================
    # User records
    # ================================

    async def set_for_user(self, key: str, values: dict[str, str]) -> None:
        async with self._lock:
            record = await self._load(key)
            record.update(values)
            await self.set(self._user_key(key), json.dumps(record))
        logger.debug(f"Stored fields {sorted(values)} for {key}")

    async def get_for_user(self, key: str, field: str) -> str | None:
        record = await self._load(key)
        return record.get(field)

    async def get_all_for_user(self, key: str) -> dict[str, str]:
        return await self._load(key)

    async def delete_for_user(self, key: str, field: str) -> None:
        async with self._lock:
            record = await self._load(key)
            if field not in record:
                return
            del record[field]
            await self.set(self._user_key(key), json.dumps(record))

    async def delete_all_user_data(self, key: str) -> None:
        await self.delete(self._user_key(key))

    def _user_key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def _load(self, key: str) -> dict[str, str]:
        raw = await self.get(self._user_key(key))
        if raw is None:
            return {}
        try:
            record = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt record stored for {key}: {e}") from e
        if not isinstance(record, dict):
            raise StorageError(
                f"Corrupt record stored for {key}: expected an object, "
                f"got {type(record).__name__}"
            )
        return record
