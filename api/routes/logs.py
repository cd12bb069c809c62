"""
api/routes/logs.py -- Audit log read endpoint.

Routes:
  GET /api/logs?take=N&skip=M  -- newest entries first (requires auth)

take defaults to 50 and is clamped to 1..100; skip is clamped to >= 0 and
values past the SQLite integer range are rejected with 400.
Users are resolved with one batched lookup per page; entries whose actor is
absent or no longer exists report user = null.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from api.models import LogEntryResponse
from audit.store import AuditStore
from auth.dependencies import require_user_id
from auth.store import UserStore

router = APIRouter(dependencies=[Depends(require_user_id)])

_DEFAULT_TAKE = 50
_MAX_TAKE = 100
_MAX_SKIP = 2**63 - 1


@router.get("/logs", response_model=list[LogEntryResponse])
def list_logs(
    request: Request,
    take: int = _DEFAULT_TAKE,
    skip: int = Query(default=0, le=_MAX_SKIP),
) -> list[LogEntryResponse]:
    audit_store: AuditStore = request.app.state.audit_store
    user_store: UserStore = request.app.state.user_store

    take = min(max(take, 1), _MAX_TAKE)
    skip = max(skip, 0)
    entries = audit_store.list_entries(take=take, skip=skip)
    users = user_store.get_many({e.user_id for e in entries if e.user_id is not None})
    return [LogEntryResponse.from_entry(e, users.get(e.user_id)) for e in entries]
