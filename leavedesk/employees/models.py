"""Employee ORM model.

SQLAlchemy 2.0 async-compatible model with Mapped[] annotations.
``leave_balance`` is the static annual allocation; remaining balance is
always derived from approved leave requests, never stored here.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leavedesk.common.constants import REVIEWER_ROLES, Department, UserRole
from leavedesk.database import Base

if TYPE_CHECKING:
    from leavedesk.auth.models import UserSession
    from leavedesk.leave.models import LeaveRequest


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Employee(Base):
    """Employee record — owner of leave requests and caller identity."""

    __tablename__ = "employees"

    # ── Primary key ─────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # ── Identity ────────────────────────────────────────────────────
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        sa.String(255), unique=True, nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(sa.String(255), nullable=False)

    # ── Organisation ────────────────────────────────────────────────
    department: Mapped[Department] = mapped_column(
        sa.Enum(Department, name="department", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    role: Mapped[UserRole] = mapped_column(
        sa.Enum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.employee,
        server_default=UserRole.employee.value,
    )

    # ── Employment / entitlement ────────────────────────────────────
    joining_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    leave_balance: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=20, server_default=sa.text("20"),
    )

    # ── Status / Timestamps ─────────────────────────────────────────
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=True, server_default=sa.true(),
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow, server_default=sa.func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        server_default=sa.func.now(),
    )

    __table_args__ = (
        sa.CheckConstraint("leave_balance >= 0", name="ck_employee_leave_balance_non_negative"),
        sa.Index("ix_employees_role", "role"),
    )

    # ── Relationships ───────────────────────────────────────────────
    sessions: Mapped[list["UserSession"]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
    )
    leave_requests: Mapped[list["LeaveRequest"]] = relationship(
        back_populates="employee",
        foreign_keys="LeaveRequest.employee_id",
        cascade="all, delete-orphan",
    )

    @property
    def is_reviewer(self) -> bool:
        return self.role in REVIEWER_ROLES

    def __repr__(self) -> str:
        return f"<Employee {self.email} ({self.role.value})>"
