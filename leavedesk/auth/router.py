"""Auth router — registration, login, logout, current user profile."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import extract_bearer, get_current_user
from leavedesk.auth.schemas import LoginRequest, RegisterRequest, TokenResponse
from leavedesk.auth.service import (
    authenticate,
    create_session,
    hash_token,
    register_employee,
    revoke_session,
)
from leavedesk.common.rate_limit import limiter
from leavedesk.config import settings
from leavedesk.database import get_db
from leavedesk.employees.models import Employee
from leavedesk.employees.schemas import EmployeeOut

router = APIRouter(prefix="", tags=["auth"])


def _client_meta(request: Request) -> tuple[str | None, str | None]:
    ip = request.client.host if request.client else None
    return ip, request.headers.get("user-agent")


# ── POST /register ──────────────────────────────────────────────────

@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """Create an account and sign it in. The first account becomes HR."""
    employee = await register_employee(db, body)
    ip, user_agent = _client_meta(request)
    access_token, expires_in = await create_session(db, employee, ip, user_agent)
    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        user=EmployeeOut.model_validate(employee),
    )


# ── POST /login ─────────────────────────────────────────────────────

@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    employee = await authenticate(db, body.email, body.password)
    ip, user_agent = _client_meta(request)
    access_token, expires_in = await create_session(db, employee, ip, user_agent)
    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        user=EmployeeOut.model_validate(employee),
    )


# ── POST /logout — Revoke current session ──────────────────────────

@router.post("/logout")
async def logout(
    request: Request,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await revoke_session(db, hash_token(extract_bearer(request)))
    return {"message": "Logged out successfully"}


# ── GET /me — Current user profile ─────────────────────────────────

@router.get("/me", response_model=EmployeeOut)
async def me(employee: Employee = Depends(get_current_user)):
    return employee
