"""Auth service — JWT management, session lifecycle, login and
self-registration with HR bootstrap."""

from __future__ import annotations

import hashlib
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.models import UserSession
from leavedesk.auth.security import verify_password
from leavedesk.common.constants import UserRole
from leavedesk.common.exceptions import UnauthorizedException
from leavedesk.config import settings
from leavedesk.employees.models import Employee
from leavedesk.employees.schemas import EmployeeBase
from leavedesk.employees.service import EmployeeService

logger = logging.getLogger(__name__)


# ── JWT helpers ─────────────────────────────────────────────────────

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _create_access_token(employee_id: uuid.UUID, role: UserRole) -> tuple[str, int]:
    """Return (encoded_jwt, expires_in_seconds)."""
    expires_in = settings.JWT_EXPIRY_HOURS * 3600
    payload = {
        "sub": str(employee_id),
        "role": role.value,
        "type": "access",
        "jti": uuid.uuid4().hex,  # distinct token per session
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_in


# ── Session management ──────────────────────────────────────────────

async def create_session(
    db: AsyncSession,
    employee: Employee,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> tuple[str, int]:
    """Issue an access token and persist its session. Returns (token, expires_in)."""
    access_token, expires_in = _create_access_token(employee.id, employee.role)

    session = UserSession(
        employee_id=employee.id,
        token_hash=hash_token(access_token),
        ip_address=ip,
        user_agent=user_agent,
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    )
    db.add(session)
    await db.flush()

    return access_token, expires_in


async def revoke_session(db: AsyncSession, token_hash: str) -> None:
    """Mark a session as revoked by its token hash."""
    result = await db.execute(
        select(UserSession).where(UserSession.token_hash == token_hash),
    )
    session = result.scalars().first()
    if session:
        session.is_revoked = True
        await db.flush()


# ── Registration / login ────────────────────────────────────────────

async def hr_exists(db: AsyncSession) -> bool:
    result = await db.execute(select(exists().where(Employee.role == UserRole.hr)))
    return bool(result.scalar())


async def register_employee(db: AsyncSession, data: EmployeeBase) -> Employee:
    """Self-register an employee.

    The first account created while no HR employee exists becomes ``hr``;
    every later self-registration is a plain ``employee``.
    """
    role = UserRole.employee if await hr_exists(db) else UserRole.hr
    employee = await EmployeeService.create_employee(db, data, role=role)
    if role == UserRole.hr:
        logger.info("Bootstrap HR account registered: %s", employee.id)
    else:
        logger.info("Employee self-registered: %s", employee.id)
    return employee


async def authenticate(db: AsyncSession, email: str, password: str) -> Employee:
    """Return the active employee matching the credentials, or raise 401."""
    result = await db.execute(
        select(Employee).where(
            Employee.email == email.strip().lower(),
            Employee.is_active.is_(True),
        ),
    )
    employee = result.scalars().first()
    if employee is None or not verify_password(password, employee.password_hash):
        raise UnauthorizedException("Invalid credentials")
    return employee
