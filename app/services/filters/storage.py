"""Filter store - saved filters over the key-value adapter."""

from typing import Any

from loguru import logger

from app.expressions import ExpressionSyntaxError, compile_expression, references
from app.models import Filter
from app.repositories.storage import StorageAdapter
from app.services.filters.presets import PRESET_FILTERS
from settings import STORAGE_KEYS


def uses_column(source: str | None, column_id: str) -> bool:
    """True if an expression reads ``columns.<column_id>``."""
    if not source:
        return False
    try:
        return column_id in references(compile_expression(source), "columns")
    except ExpressionSyntaxError:
        return f"columns.{column_id}" in source


class FilterStore:
    """Load, seed and mutate the saved filter list."""

    def __init__(self, storage: StorageAdapter, presets: list[Filter] | None = None):
        self._storage = storage
        self._presets = PRESET_FILTERS if presets is None else presets
        self._key = STORAGE_KEYS["filters"]

    async def load(self) -> list[Filter]:
        """Saved filters; seeds presets when nothing is stored yet."""
        saved = await self._storage.get(self._key)
        if saved is None:
            logger.info("Seeding {} preset filters", len(self._presets))
            await self.save(self._presets)
            return [f.model_copy(deep=True) for f in self._presets]

        # Older saves may lack the expressions list
        return [Filter.model_validate({**f, "expressions": f.get("expressions") or []}) for f in saved]

    async def save(self, filters: list[Filter]) -> None:
        await self._storage.set(self._key, [f.to_json() for f in filters])

    async def add(self, flt: Filter) -> list[Filter]:
        filters = await self.load()
        filters.append(flt)
        await self.save(filters)
        logger.info("Filter added: {}", flt.id)
        return filters

    async def update(self, filter_id: str, updates: dict[str, Any]) -> list[Filter]:
        filters = await self.load()
        filters = [f.model_copy(update=updates) if f.id == filter_id else f for f in filters]
        await self.save(filters)
        return filters

    async def delete(self, filter_id: str) -> list[Filter]:
        filters = [f for f in await self.load() if f.id != filter_id]
        await self.save(filters)
        logger.info("Filter deleted: {}", filter_id)
        return filters

    async def toggle(self, filter_id: str) -> list[Filter]:
        filters = await self.load()
        filters = [f.model_copy(update={"enabled": not f.enabled}) if f.id == filter_id else f for f in filters]
        await self.save(filters)
        return filters

    async def referencing_column(self, column_id: str) -> list[Filter]:
        """Saved filters whose code or highlight target reads the column."""
        return [
            f
            for f in await self.load()
            if any(uses_column(e.code, column_id) or uses_column(e.highlight_target, column_id) for e in f.expressions)
        ]
