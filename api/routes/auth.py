"""
api/routes/auth.py -- Registration, login and password reset endpoints.

Routes:
  POST /api/auth/register        -- create account; 201 {id, email, createdAt}
  POST /api/auth/login           -- password login; 200 {token, user:{id, email}}
  POST /api/auth/reset-password  -- replace password hash (disabled by default)
  GET  /api/auth/me              -- current user (requires auth)

Security:
  login and reset-password are rate-limited per IP (LOGIN_RATE_LIMIT).
  login returns the same 401 body for an unknown email and a wrong password.
  Cache-Control: no-store on responses that carry a token.

Errors raised by auth.service (AppError subclasses) are turned into the
standard error envelope by the handler in api/main.py.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_limit
from api.models import CredentialsRequest, LoginResponse, UserRef, UserSummary
from audit.logger import AuditLogger
from auth.dependencies import require_user_id
from auth.service import login_user, register_user, reset_password
from auth.store import UserStore

# Auth policy:
# - POST /api/auth/register:        public
# - POST /api/auth/login:           public, rate-limited
# - POST /api/auth/reset-password:  public, rate-limited, disabled unless PASSWORD_RESET_ENABLED
# - GET  /api/auth/me:              requires auth (require_user_id)
router = APIRouter()


@router.post("/auth/register", response_model=UserSummary, status_code=201)
def register(request: Request, body: CredentialsRequest, background_tasks: BackgroundTasks) -> UserSummary:
    """Create an account. The password hash is never returned."""
    user_store: UserStore = request.app.state.user_store
    audit: AuditLogger = request.app.state.audit
    user = register_user(user_store, body.email, body.password)
    background_tasks.add_task(audit.record, user.id, "auth.register", "user", user.id, {"email": user.email})
    return UserSummary.from_user(user)


@router.post("/auth/login", response_model=LoginResponse)
@limiter.limit(login_limit)
def login(request: Request, body: CredentialsRequest) -> JSONResponse:
    """Authenticate with email and password and return a bearer token."""
    user_store: UserStore = request.app.state.user_store
    token, user = login_user(user_store, body.email, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(token=token, user=UserRef(id=user.id, email=user.email)).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/reset-password", response_model=UserSummary)
@limiter.limit(login_limit)
def reset(request: Request, body: CredentialsRequest, background_tasks: BackgroundTasks) -> UserSummary:
    """Replace the password of an existing account (when enabled)."""
    user_store: UserStore = request.app.state.user_store
    audit: AuditLogger = request.app.state.audit
    user = reset_password(user_store, body.email, body.password)
    background_tasks.add_task(audit.record, user.id, "auth.password_reset", "user", user.id)
    return UserSummary.from_user(user)


@router.get("/auth/me", response_model=UserSummary)
def me(request: Request, user_id: int = Depends(require_user_id)) -> UserSummary:
    """Return the account behind the bearer token.

    A valid token for a user that no longer exists yields 401.
    """
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail={"code": "unauthorized", "message": "Unauthorized"})
    return UserSummary.from_user(user)
