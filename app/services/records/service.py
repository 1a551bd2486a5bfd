"""Record service - fetches the upstream maps and builds records."""

import asyncio

from loguru import logger

from app.models import Record
from app.services.favorites import FavoritesStore
from app.services.records.builder import build_records
from app.services.records.mappings import MappingService
from prices_client import safe_request
from prices_client.prices import PricesClient


class RecordService:
    """Assembles the full record universe for one refresh."""

    def __init__(self, client: PricesClient, mappings: MappingService, favorites: FavoritesStore):
        self._client = client
        self._mappings = mappings
        self._favorites = favorites

    async def load_records(self) -> list[Record]:
        """Fetch every map concurrently; empty list if prices or mappings are unavailable."""
        mapping, latest, five_minute, one_hour, six_hour, one_day, volumes, favorites = await asyncio.gather(
            safe_request(self._mappings.get_all(), []),
            safe_request(self._client.latest(), {}),
            safe_request(self._client.five_minute(), {}),
            safe_request(self._client.one_hour(), {}),
            safe_request(self._client.six_hour(), {}),
            safe_request(self._client.one_day(), {}),
            safe_request(self._client.volumes(), {}),
            self._favorites.load(),
        )

        if not mapping or not latest:
            logger.error("Failed to fetch mappings or latest prices, no records built")
            return []

        records = build_records(
            latest,
            mapping,
            five_minute,
            one_hour,
            volumes,
            favorites,
            six_hour=six_hour,
            one_day=one_day,
        )
        logger.info("Loaded {} records", len(records))
        return records
