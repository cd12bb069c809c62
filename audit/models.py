"""
audit/models.py -- Domain dataclass for audit log entries.

Pure data container. Entries are immutable once written: the store only
inserts and reads, it never updates or deletes.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class LogEntry:
    """Who did what to which entity.

    user_id is None when the action could not be attributed to a user.
    entity / entity_id are None for actions that do not target a record.
    payload is any JSON-serializable value (usually the fields written).
    id and created_at are assigned by the store on insert.
    """

    action: str  # dot-namespaced, e.g. "product.create"
    user_id: Optional[int] = None
    entity: Optional[str] = None
    entity_id: Optional[int] = None
    payload: Any = None
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601
