"""Settings and analysis history persistence.

History is append-only and capped: after every append only the newest
`limit` rows (by insertion sequence) survive. Eviction is FIFO on insertion
order, never on access.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, Optional, Protocol

from research_agent.executor import db
from research_agent.executor.db import _json_dumps, _json_loads, execute, execute_many
from research_agent.executor.schemas import HistoryEntry

if TYPE_CHECKING:
    from research_agent.config import ResearchConfig

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class SessionStore(Protocol):
    """Storage boundary used by the pipeline and the API."""

    def get_settings(self) -> dict[str, Any]: ...

    def save_settings(self, settings: dict[str, Any]) -> None: ...

    def append_history(self, entry: HistoryEntry) -> None: ...

    def load_history(self) -> list[HistoryEntry]: ...


class SqlSessionStore:
    """SessionStore backed by the research database (SQLite or Postgres)."""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        self.limit = limit
        # Serializes append+evict across pipeline threads in this process
        self._append_lock = threading.Lock()

    def get_settings(self) -> dict[str, Any]:
        rows = execute("SELECT key, value FROM research_settings", fetch="all")
        return {row["key"]: _json_loads(row["value"]) for row in rows}

    def save_settings(self, settings: dict[str, Any]) -> None:
        """Upsert the given keys. Keys not mentioned are left untouched."""
        statements = [
            (
                """INSERT INTO research_settings (key, value) VALUES (%s, %s)
                   ON CONFLICT (key) DO UPDATE SET value = excluded.value""",
                (key, _json_dumps(value)),
            )
            for key, value in settings.items()
        ]
        if statements:
            execute_many(statements)
            logger.info(f"Saved settings: {sorted(settings)}")

    def append_history(self, entry: HistoryEntry) -> None:
        with self._append_lock:
            execute_many([
                (
                    """INSERT INTO research_history
                       (analysis_id, topic, timestamp, status, artifact_count)
                       VALUES (%s, %s, %s, %s, %s)""",
                    (entry.id, entry.topic, entry.timestamp, entry.status.value,
                     entry.artifact_count),
                ),
                (
                    """DELETE FROM research_history WHERE seq NOT IN (
                           SELECT seq FROM research_history
                           ORDER BY seq DESC LIMIT %s
                       )""",
                    (self.limit,),
                ),
            ])
        logger.info(f"History: appended {entry.id} ({entry.topic}, {entry.status.value})")

    def load_history(self, limit: Optional[int] = None) -> list[HistoryEntry]:
        """Most recent first, at most `limit` (default: the store's cap)."""
        rows = execute(
            """SELECT analysis_id, topic, timestamp, status, artifact_count
               FROM research_history ORDER BY seq DESC LIMIT %s""",
            (max(0, min(self.limit if limit is None else limit, self.limit)),),
            fetch="all",
        )
        return [
            HistoryEntry(
                id=row["analysis_id"],
                topic=row["topic"],
                timestamp=row["timestamp"],
                status=row["status"],
                artifact_count=row["artifact_count"] or 0,
            )
            for row in rows
        ]

    def clear_history(self) -> None:
        with self._append_lock:
            execute("DELETE FROM research_history")
        logger.info("History cleared")


_store: Optional[SqlSessionStore] = None


def get_session_store() -> SqlSessionStore:
    """Get the process-wide session store instance."""
    global _store
    if _store is None:
        _store = SqlSessionStore()
    return _store


def configure_store(config: "ResearchConfig") -> SqlSessionStore:
    """Point the database layer and the process-wide store at `config`."""
    global _store
    db.configure(database_url=config.database_url or None, sqlite_path=config.sqlite_path)
    _store = SqlSessionStore(limit=config.history_limit)
    return _store
