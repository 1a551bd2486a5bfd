"""Base repository class."""

import asyncio
from collections.abc import Callable
from typing import Any

from loguru import logger

from app.errors import ReadOnlyError
from app.repositories.db import db_lock, get_db, reconnect_db
from settings import DB_PATH


class BaseRepository:
    """Base repository with common functionality.

    DuckDB calls block, so async callers go through ``_run`` which hops to a
    worker thread. One lock shared by all repositories serialises use of the
    connection.
    """

    def __init__(self, path: str = DB_PATH, read_only: bool = False):
        self._path = path
        self._db = get_db(path)
        self._read_only = read_only
        logger.debug("{} initialized ({})", self.__class__.__name__, path)

    def refresh(self) -> None:
        """Reconnect to database."""
        with db_lock:
            self._db = reconnect_db(self._path)
        logger.info("Repository refreshed")

    def _check_writable(self) -> None:
        if self._read_only:
            raise ReadOnlyError(f"{self.__class__.__name__} is read-only")

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking repository call in a worker thread."""
        return await asyncio.to_thread(fn, *args)

    def execute(self, query: str, params: list | None = None) -> Any:
        """Execute SQL query."""
        with db_lock:
            if params:
                return self._db.execute(query, params)
            return self._db.execute(query)

    def fetchall(self, query: str, params: list | None = None) -> list:
        """Execute and fetch all rows."""
        with db_lock:
            cursor = self._db.execute(query, params) if params else self._db.execute(query)
            return cursor.fetchall()

    def fetchone(self, query: str, params: list | None = None) -> Any:
        """Execute and fetch one row."""
        with db_lock:
            cursor = self._db.execute(query, params) if params else self._db.execute(query)
            return cursor.fetchone()
