"""
audit/store.py -- SQLAlchemy Core persistence for audit log entries.

Pattern: Repository + Data Mapper. AuditStore is insert-and-read only; there
is no update or delete method.

payload is serialized with json.dumps on insert. A payload that is not
JSON-serializable raises TypeError here -- AuditLogger.record() catches it
along with any storage error.

Security: all queries use bound parameters. No f-strings in SQL.
"""

import json
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine

from audit.models import LogEntry

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_logs = Table(
    "logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    # No foreign key: entries outlive users and the user table lives in auth/.
    Column("user_id", Integer, index=True),
    Column("action", String(100), nullable=False, index=True),
    Column("entity", String(50)),
    Column("entity_id", Integer),
    Column("payload", Text),  # JSON document serialized as text
    Column("created_at", String(32), nullable=False, index=True),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AuditStore:
    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def create_entry(self, entry: LogEntry) -> int:
        """Insert a log entry and return its ID. created_at is always server-assigned."""
        payload = json.dumps(entry.payload) if entry.payload is not None else None
        with self.engine.connect() as conn:
            result = conn.execute(
                _logs.insert().values(
                    user_id=entry.user_id,
                    action=entry.action,
                    entity=entry.entity,
                    entity_id=entry.entity_id,
                    payload=payload,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def list_entries(self, take: int = 50, skip: int = 0) -> list[LogEntry]:
        """Return entries newest first. id breaks ties between equal timestamps."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _logs.select().order_by(_logs.c.created_at.desc(), _logs.c.id.desc()).limit(take).offset(skip)
            ).fetchall()
        return [_row_to_entry(r) for r in rows]

    def get_entry(self, entry_id: int) -> Optional[LogEntry]:
        with self.engine.connect() as conn:
            row = conn.execute(_logs.select().where(_logs.c.id == entry_id)).fetchone()
        return _row_to_entry(row) if row is not None else None

    def count(self, action: Optional[str] = None) -> int:
        """Return the number of entries, optionally only those with the given action."""
        stmt = select(func.count()).select_from(_logs)
        if action is not None:
            stmt = stmt.where(_logs.c.action == action)
        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar() or 0

    def close(self) -> None:
        self.engine.dispose()


def _row_to_entry(row) -> LogEntry:
    return LogEntry(
        id=row.id,
        user_id=row.user_id,
        action=row.action,
        entity=row.entity,
        entity_id=row.entity_id,
        payload=json.loads(row.payload) if row.payload is not None else None,
        created_at=row.created_at,
    )
