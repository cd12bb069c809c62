"""
audit/logger.py -- Best-effort audit recorder.

AuditLogger.record() is the only way route handlers write audit entries.
It never raises: any failure (database unavailable, payload that cannot be
serialized) is written to the "stocktrack.audit" logger with its traceback
and then dropped. The mutation the entry describes has already been decided
by the time record() runs, and nothing record() does can change that outcome.

Routes schedule record() through FastAPI BackgroundTasks:

    background_tasks.add_task(audit.record, user_id, "product.create", "product", product.id, payload)

so the write happens after the response has been produced.
"""

import logging
from typing import Any, Optional

from audit.models import LogEntry
from audit.store import AuditStore

logger = logging.getLogger("stocktrack.audit")


class AuditLogger:
    def __init__(self, store: AuditStore) -> None:
        self.store = store

    def record(
        self,
        actor_id: Optional[int],
        action: str,
        entity: Optional[str] = None,
        entity_id: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        entry = LogEntry(
            action=action,
            user_id=actor_id,
            entity=entity,
            entity_id=entity_id,
            payload=payload,
        )
        try:
            self.store.create_entry(entry)
        except Exception:
            logger.exception(
                "Audit write failed: action=%s entity=%s entity_id=%s user_id=%s",
                action,
                entity,
                entity_id,
                actor_id,
            )
