"""Favorites store - favourite item ids over the key-value adapter."""

from loguru import logger

from app.repositories.storage import StorageAdapter
from settings import STORAGE_KEYS


class FavoritesStore:
    def __init__(self, storage: StorageAdapter):
        self._storage = storage
        self._key = STORAGE_KEYS["favorites"]

    async def load(self) -> set[int]:
        saved = await self._storage.get(self._key)
        return {int(i) for i in saved or []}

    async def save(self, ids: set[int]) -> None:
        await self._storage.set(self._key, sorted(ids))

    async def toggle(self, item_id: int) -> bool:
        """Flip an item's favourite flag; returns the new state."""
        ids = await self.load()
        if item_id in ids:
            ids.discard(item_id)
            favorite = False
        else:
            ids.add(item_id)
            favorite = True
        await self.save(ids)
        logger.debug("Favorite {} -> {}", item_id, favorite)
        return favorite
