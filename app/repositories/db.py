"""DuckDB connection management."""

import threading
from pathlib import Path

import duckdb
from loguru import logger

from app.models import ALL_DDL
from settings import DB_PATH

_lock = threading.Lock()

# Serialises statements on shared connections; held by repositories and by close_db
db_lock = threading.RLock()
_connections: dict[str, duckdb.DuckDBPyConnection] = {}


def db_exists(path: str = DB_PATH) -> bool:
    """Check if database file exists."""
    return path == ":memory:" or Path(path).exists()


def init_tables(conn: duckdb.DuckDBPyConnection) -> None:
    """Initialize all tables from DDL statements (idempotent - uses IF NOT EXISTS)."""
    for ddl in ALL_DDL:
        conn.execute(ddl)
    logger.debug("DB tables initialized")


def get_db(path: str = DB_PATH) -> duckdb.DuckDBPyConnection:
    """Get the shared connection for a database path, creating tables on first use."""
    with _lock:
        conn = _connections.get(path)
        if conn is None:
            if not db_exists(path):
                logger.warning("DB not found: {}. Creating empty DB.", path)
            conn = duckdb.connect(path)
            init_tables(conn)
            _connections[path] = conn
            logger.debug("DB connected: {}", path)
        return conn


def close_db(path: str | None = None) -> None:
    """Close one connection, or all of them."""
    with db_lock, _lock:
        paths = [path] if path else list(_connections)
        for p in paths:
            conn = _connections.pop(p, None)
            if conn is not None:
                conn.close()
                logger.debug("DB connection closed: {}", p)


def reconnect_db(path: str = DB_PATH) -> duckdb.DuckDBPyConnection:
    """Force reconnect."""
    close_db(path)
    return get_db(path)
