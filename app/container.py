"""Dependency Injection container - initialized at app startup."""

from loguru import logger

from app.repositories import StorageRepository, TimeseriesRepository, close_db
from app.services.columns import ColumnStore
from app.services.favorites import FavoritesStore
from app.services.filters import FilterStore
from app.services.records import MappingService, RecordService
from app.services.timeseries import TimeseriesCache
from prices_client import set_api_config
from prices_client.prices import PricesClient
from settings import API_BASE_URL, API_TIMEOUT, DB_PATH, LOG_LEVEL, LOG_TO_FILE, MAX_CONCURRENT, USER_AGENT
from settings.logging import setup_logging


class Container:
    """Application DI container - holds all singleton instances."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def init(self, db_path: str = DB_PATH, configure_logging: bool = True) -> None:
        """Initialize all dependencies. Call once at app startup."""
        if self._initialized:
            return

        if configure_logging:
            setup_logging(level=LOG_LEVEL, to_file=LOG_TO_FILE)

        self._db_path = db_path
        set_api_config(API_BASE_URL, API_TIMEOUT, USER_AGENT)

        # Repositories (singletons)
        self._storage = StorageRepository(db_path)
        self._timeseries_repo = TimeseriesRepository(db_path)

        # Upstream client
        self.client = PricesClient(max_concurrent=MAX_CONCURRENT)

        # Stores (with injected storage)
        self.filters = FilterStore(self._storage)
        self.columns = ColumnStore(self._storage, self.filters)
        self.favorites = FavoritesStore(self._storage)

        # Services
        self.mappings = MappingService(self.client)
        self.records = RecordService(self.client, self.mappings, self.favorites)
        self.timeseries = TimeseriesCache(self.client.timeseries, self._timeseries_repo)

        self._initialized = True
        logger.info("Container initialized ({})", db_path)

    async def start(self) -> None:
        """Open the HTTP client and launch cache maintenance."""
        self.init()
        await self.client.open()
        self.timeseries.start()

    async def close(self) -> None:
        if not self._initialized:
            return
        await self.timeseries.close()
        await self.client.close()
        close_db(self._db_path)
        self._initialized = False
        logger.info("Container closed")


# Global container instance
container = Container()
