"""Column store - saved column definitions over the key-value adapter."""

from typing import TYPE_CHECKING, Any

from loguru import logger

from app.errors import ColumnInUseError
from app.models import Column
from app.repositories.storage import StorageAdapter
from app.services.columns.presets import PRESET_COLUMNS
from settings import STORAGE_KEYS

if TYPE_CHECKING:
    from app.services.filters.storage import FilterStore


class ColumnStore:
    """Load, seed and mutate the saved column list."""

    def __init__(self, storage: StorageAdapter, filters: "FilterStore", presets: list[Column] | None = None):
        self._storage = storage
        self._filters = filters
        self._presets = PRESET_COLUMNS if presets is None else presets
        self._key = STORAGE_KEYS["columns"]

    async def load(self) -> list[Column]:
        """Saved columns; seeds presets on first load and merges presets added later."""
        saved = await self._storage.get(self._key)
        if not saved:
            logger.info("Seeding {} preset columns", len(self._presets))
            await self.save(self._presets)
            return [c.model_copy() for c in self._presets]

        columns = [Column.model_validate(c) for c in saved]
        known = {c.id for c in columns}
        new_presets = [c for c in self._presets if c.id not in known]
        if new_presets:
            logger.info("Merging {} new preset columns", len(new_presets))
            columns.extend(c.model_copy() for c in new_presets)
            await self.save(columns)
        return columns

    async def save(self, columns: list[Column]) -> None:
        await self._storage.set(self._key, [c.to_json() for c in columns])

    async def add(self, column: Column) -> list[Column]:
        columns = await self.load()
        columns.append(column)
        await self.save(columns)
        logger.info("Column added: {}", column.id)
        return columns

    async def update(self, column_id: str, updates: dict[str, Any]) -> list[Column]:
        columns = await self.load()
        columns = [c.model_copy(update=updates) if c.id == column_id else c for c in columns]
        await self.save(columns)
        return columns

    async def delete(self, column_id: str) -> list[Column]:
        """Delete a column unless a saved filter still references it."""
        dependents = await self._filters.referencing_column(column_id)
        if dependents:
            raise ColumnInUseError(column_id, [f.name for f in dependents])

        columns = [c for c in await self.load() if c.id != column_id]
        await self.save(columns)
        logger.info("Column deleted: {}", column_id)
        return columns

    async def toggle(self, column_id: str) -> list[Column]:
        columns = await self.load()
        columns = [c.model_copy(update={"enabled": not c.enabled}) if c.id == column_id else c for c in columns]
        await self.save(columns)
        return columns

    async def reorder(self, column_ids: list[str]) -> list[Column]:
        """Move the given ids to the front in that order; others keep their relative order."""
        columns = await self.load()
        by_id = {c.id: c for c in columns}
        ordered = [by_id[i] for i in column_ids if i in by_id]
        placed = {c.id for c in ordered}
        ordered.extend(c for c in columns if c.id not in placed)
        await self.save(ordered)
        return ordered
