"""Storage backend for settings and research history.

Two engines behind one small API:
- PostgreSQL when RESEARCH_DATABASE_URL is a postgres:// URL (psycopg2,
  pooled connections)
- SQLite otherwise, at RESEARCH_DB_PATH (default: research_agent.db)

Callers write SQL with %s placeholders. Tables are created on first use.
"""

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from functools import partial
from pathlib import Path
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)

DATABASE_URL = os.environ.get("RESEARCH_DATABASE_URL", "")
SQLITE_PATH = Path(os.environ.get("RESEARCH_DB_PATH", "research_agent.db"))

_schema_ready = False
_pool = None

SQLITE_SCHEMA = """
CREATE TABLE IF NOT EXISTS research_history (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    analysis_id TEXT NOT NULL,
    topic TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    status TEXT NOT NULL,
    artifact_count INTEGER DEFAULT 0
);
CREATE TABLE IF NOT EXISTS research_settings (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""

POSTGRES_SCHEMA = """
CREATE TABLE IF NOT EXISTS research_history (
    seq BIGSERIAL PRIMARY KEY,
    analysis_id VARCHAR(100) NOT NULL,
    topic TEXT NOT NULL,
    timestamp VARCHAR(40) NOT NULL,
    status VARCHAR(20) NOT NULL,
    artifact_count INTEGER DEFAULT 0
);
CREATE TABLE IF NOT EXISTS research_settings (
    key VARCHAR(100) PRIMARY KEY,
    value JSONB
);
"""


def configure(database_url: Optional[str] = None, sqlite_path: Optional[str] = None) -> None:
    """Switch databases. Arguments left as None keep their current value."""
    global DATABASE_URL, SQLITE_PATH, _schema_ready, _pool
    if database_url is not None:
        DATABASE_URL = database_url
    if sqlite_path is not None:
        SQLITE_PATH = Path(sqlite_path)
    if _pool is not None:
        _pool.closeall()
        _pool = None
    _schema_ready = False


def using_postgres() -> bool:
    return DATABASE_URL.startswith(("postgres://", "postgresql://"))


def _postgres_pool():
    global _pool
    if _pool is None:
        import psycopg2.pool

        _pool = psycopg2.pool.ThreadedConnectionPool(minconn=1, maxconn=5, dsn=DATABASE_URL)
        logger.info("Opened PostgreSQL pool (max 5 connections)")
    return _pool


@contextmanager
def transaction() -> Iterator[Any]:
    """Yield a cursor inside one transaction: commit on success, roll back on error."""
    if using_postgres():
        pool = _postgres_pool()
        conn = pool.getconn()
        release = partial(pool.putconn, conn)
    else:
        conn = sqlite3.connect(str(SQLITE_PATH), check_same_thread=False, timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        release = conn.close

    try:
        cursor = conn.cursor()
        yield cursor
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        release()


def _json_dumps(data: Any) -> str:
    return json.dumps({} if data is None else data, ensure_ascii=False, default=str)


def _json_loads(raw: Any) -> Any:
    # JSONB columns arrive already decoded
    if isinstance(raw, (dict, list)):
        return raw
    return json.loads(raw) if raw else {}


def adapt_sql(sql: str) -> str:
    return sql if using_postgres() else sql.replace("%s", "?")


def _as_dict(cursor, row) -> dict:
    if using_postgres():
        return {desc[0]: value for desc, value in zip(cursor.description, row)}
    return dict(row)


def execute(sql: str, params: tuple = (), fetch: str = "none") -> Any:
    """Run one statement.

    fetch="one" returns a dict or None, fetch="all" a list of dicts,
    anything else None.
    """
    init_db()
    with transaction() as cursor:
        cursor.execute(adapt_sql(sql), params)
        if fetch == "one":
            row = cursor.fetchone()
            return _as_dict(cursor, row) if row is not None else None
        if fetch == "all":
            return [_as_dict(cursor, row) for row in cursor.fetchall()]
        return None


def execute_many(statements: list[tuple[str, tuple]]) -> None:
    """Run (sql, params) pairs atomically."""
    init_db()
    with transaction() as cursor:
        for sql, params in statements:
            cursor.execute(adapt_sql(sql), params)


def init_db() -> None:
    """Create the research tables once per configured database."""
    global _schema_ready
    if _schema_ready:
        return

    if using_postgres():
        with transaction() as cursor:
            cursor.execute(POSTGRES_SCHEMA)
        where = "PostgreSQL"
    else:
        SQLITE_PATH.parent.mkdir(parents=True, exist_ok=True)
        with transaction() as cursor:
            cursor.executescript(SQLITE_SCHEMA)
        where = f"SQLite at {SQLITE_PATH}"

    _schema_ready = True
    logger.info(f"Research tables ready ({where})")
