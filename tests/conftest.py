"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Test settings must be in place before anything touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import hashlib
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leavedesk.auth.security import hash_password
from leavedesk.common.constants import Department, LeaveStatus, LeaveType, UserRole
from leavedesk.config import settings
from leavedesk.database import Base, get_db
from leavedesk.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import leavedesk.auth.models  # noqa: F401
import leavedesk.employees.models  # noqa: F401
import leavedesk.leave.models  # noqa: F401

DEFAULT_PASSWORD = "secret123"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from leavedesk.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_employee(
    *,
    email: str = "test.user@example.com",
    name: str = "Test User",
    role: UserRole = UserRole.employee,
    department: Department = Department.engineering,
    joining_date: date = date(2024, 1, 15),
    leave_balance: int = 20,
    is_active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        email=email,
        password_hash=hash_password(DEFAULT_PASSWORD),
        department=department,
        role=role,
        joining_date=joining_date,
        leave_balance=leave_balance,
        is_active=is_active,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


async def _seed_employee(db: AsyncSession, **kwargs):
    """Insert and commit an employee built by ``_make_employee``."""
    from leavedesk.employees.models import Employee

    emp = Employee(**_make_employee(**kwargs))
    db.add(emp)
    await db.commit()
    return emp


async def _seed_leave_request(
    db: AsyncSession,
    employee_id: uuid.UUID,
    start: date,
    end: date,
    *,
    status: LeaveStatus = LeaveStatus.pending,
    total_days: Optional[int] = None,
    leave_type: LeaveType = LeaveType.vacation,
    reviewed_by: Optional[uuid.UUID] = None,
    created_at: Optional[datetime] = None,
):
    """Insert a request directly, bypassing validation rules."""
    from leavedesk.leave.models import LeaveRequest
    from leavedesk.leave.service import LeaveService

    req = LeaveRequest(
        id=uuid.uuid4(),
        employee_id=employee_id,
        start_date=start,
        end_date=end,
        leave_type=leave_type,
        reason="Seeded request",
        status=status,
        total_days=(
            total_days if total_days is not None
            else LeaveService.count_working_days(start, end)
        ),
        reviewed_by=reviewed_by,
        reviewed_at=datetime.now(timezone.utc) if reviewed_by else None,
        created_at=created_at or datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )
    db.add(req)
    await db.commit()
    return req


def next_monday(weeks_ahead: int = 2) -> date:
    """A Monday strictly in the future, ``weeks_ahead`` weeks out."""
    today = date.today()
    return today + timedelta(days=7 - today.weekday() + 7 * (weeks_ahead - 1))


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    employee_id: uuid.UUID,
    role: UserRole = UserRole.employee,
    expired: bool = False,
) -> str:
    """Generate a JWT access token for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS)
    payload = {
        "sub": str(employee_id),
        "role": role.value,
        "type": "access",
        "jti": uuid.uuid4().hex,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


async def _auth_headers(db: AsyncSession, employee) -> dict[str, str]:
    """Return Bearer auth headers with a valid session persisted in the DB."""
    from leavedesk.auth.models import UserSession

    token = create_access_token(employee.id, employee.role)
    session = UserSession(
        id=uuid.uuid4(),
        employee_id=employee.id,
        token_hash=hashlib.sha256(token.encode()).hexdigest(),
        expires_at=datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
        is_revoked=False,
        created_at=datetime.now(timezone.utc),
    )
    db.add(session)
    await db.commit()

    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def test_employee(db):
    return await _seed_employee(db, email="worker@example.com", name="Worker Bee")


@pytest.fixture
async def hr_employee(db):
    return await _seed_employee(
        db, email="hr@example.com", name="Hannah Reyes",
        role=UserRole.hr, department=Department.hr,
    )


@pytest.fixture
async def auth_headers(db, test_employee) -> dict[str, str]:
    return await _auth_headers(db, test_employee)


@pytest.fixture
async def hr_headers(db, hr_employee) -> dict[str, str]:
    return await _auth_headers(db, hr_employee)
