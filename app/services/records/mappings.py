"""Shared item mapping cache with an explicit load lifecycle."""

import asyncio
from enum import StrEnum

from loguru import logger

from prices_client.prices import ItemMappingSchema, PricesClient


class MappingState(StrEnum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class MappingService:
    """Loads ``/mapping`` once and serves it to every caller.

    Callers arriving while a load is running await the same task. A failed
    load returns the service to ``uninitialized`` so the next call retries.
    """

    def __init__(self, client: PricesClient):
        self._client = client
        self._state = MappingState.UNINITIALIZED
        self._task: asyncio.Task | None = None
        self._mappings: list[ItemMappingSchema] = []
        self._by_id: dict[int, ItemMappingSchema] = {}
        self._by_name: dict[str, ItemMappingSchema] = {}

    @property
    def state(self) -> MappingState:
        return self._state

    async def _load(self) -> list[ItemMappingSchema]:
        try:
            raw = await self._client.mapping()
            mappings = [ItemMappingSchema.model_validate(m) for m in raw]
        except Exception as e:
            logger.error("Failed to load item mappings: {}", e)
            self._state = MappingState.UNINITIALIZED
            self._task = None
            raise

        self._mappings = mappings
        self._by_id = {m.id: m for m in mappings}
        self._by_name = {m.name.lower(): m for m in mappings}
        self._state = MappingState.READY
        logger.info("Loaded {} item mappings", len(mappings))
        return mappings

    async def get_all(self) -> list[ItemMappingSchema]:
        if self._state == MappingState.READY:
            return self._mappings
        if self._task is None:
            self._state = MappingState.LOADING
            self._task = asyncio.get_running_loop().create_task(self._load())
        # One impatient caller must not cancel the load for everyone else
        return await asyncio.shield(self._task)

    def get(self, item_id: int) -> ItemMappingSchema | None:
        return self._by_id.get(item_id)

    def find_by_name(self, name: str) -> ItemMappingSchema | None:
        """Case-insensitive lookup."""
        return self._by_name.get(name.lower())

    def reset(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._mappings, self._by_id, self._by_name = [], {}, {}
        self._state = MappingState.UNINITIALIZED
