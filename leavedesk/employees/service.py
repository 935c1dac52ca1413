"""Employee service layer — creation, listing, balance and history views.

Uses:
  - ``paginate()`` from leavedesk.common.pagination
  - ``LeaveService`` for the derived balance ledger and leave history
  - ``NotFoundException / ForbiddenException / DuplicateException``
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.security import hash_password
from leavedesk.common.constants import UserRole
from leavedesk.common.exceptions import (
    DuplicateException,
    ForbiddenException,
    NotFoundException,
)
from leavedesk.common.pagination import PaginatedResponse, PaginationParams, paginate
from leavedesk.config import settings
from leavedesk.employees.models import Employee
from leavedesk.employees.schemas import EmployeeBase, EmployeeBrief, EmployeeOut
from leavedesk.leave.schemas import LeaveBalanceOut, LeaveRequestOut
from leavedesk.leave.service import LeaveService

logger = logging.getLogger(__name__)

# Path alias for the calling employee
SELF_ALIAS = "me"


# ═════════════════════════════════════════════════════════════════════
# EmployeeService
# ═════════════════════════════════════════════════════════════════════


class EmployeeService:
    """Async operations for employee records and their leave views."""

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def create_employee(
        db: AsyncSession,
        data: EmployeeBase,
        *,
        role: UserRole = UserRole.employee,
        leave_balance: Optional[int] = None,
    ) -> Employee:
        """Insert a new employee with a hashed password. Duplicate email → 409."""

        existing = await db.execute(
            select(Employee.id).where(Employee.email == data.email)
        )
        if existing.first() is not None:
            raise DuplicateException("email", data.email)

        employee = Employee(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            department=data.department,
            role=role,
            joining_date=data.joining_date,
            leave_balance=(
                settings.DEFAULT_LEAVE_ALLOCATION if leave_balance is None else leave_balance
            ),
        )
        db.add(employee)
        try:
            await db.flush()
        except IntegrityError as exc:
            await db.rollback()
            if "email" in str(exc.orig):
                raise DuplicateException("email", data.email)
            raise

        logger.info("Employee %s created with role %s", employee.id, role.value)
        return employee

    # ── List ────────────────────────────────────────────────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        pagination: PaginationParams,
    ) -> PaginatedResponse[EmployeeOut]:
        """Active employees, newest first."""

        query = (
            select(Employee)
            .where(Employee.is_active.is_(True))
            .order_by(Employee.created_at.desc())
        )
        page = await paginate(db, query, pagination, model=Employee)
        return PaginatedResponse[EmployeeOut](
            data=[EmployeeOut.model_validate(e) for e in page.data],
            meta=page.meta,
        )

    # ── Access resolution ───────────────────────────────────────────

    @staticmethod
    async def resolve_visible_employee(
        db: AsyncSession,
        caller: Employee,
        employee_ref: str,
    ) -> Employee:
        """Resolve ``"me"`` or an employee id the caller may view.

        Employees may only view themselves; HR may view anyone active.
        """
        if employee_ref == SELF_ALIAS:
            return caller

        try:
            employee_id = uuid.UUID(employee_ref)
        except ValueError:
            raise NotFoundException("Employee", employee_ref)

        if employee_id == caller.id:
            return caller
        if caller.role != UserRole.hr:
            raise ForbiddenException("You can only view your own leave data.")

        result = await db.execute(
            select(Employee).where(
                Employee.id == employee_id,
                Employee.is_active.is_(True),
            )
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", employee_ref)
        return employee

    # ── Balance ─────────────────────────────────────────────────────

    @staticmethod
    async def get_balance(
        db: AsyncSession,
        caller: Employee,
        employee_ref: str,
        *,
        year: Optional[int] = None,
        as_of: Optional[date] = None,
    ) -> LeaveBalanceOut:
        """Derived balance for the year plus the advisory accrual estimate."""

        employee = await EmployeeService.resolve_visible_employee(db, caller, employee_ref)
        as_of = as_of or date.today()

        balance = await LeaveService.available_balance(db, employee, year or as_of.year)
        balance.accrued = LeaveService.accrued_leave(employee, as_of)
        balance.employee = EmployeeBrief.model_validate(employee)
        return balance

    # ── Leave history ───────────────────────────────────────────────

    @staticmethod
    async def get_leave_history(
        db: AsyncSession,
        caller: Employee,
        employee_ref: str,
    ) -> list[LeaveRequestOut]:
        employee = await EmployeeService.resolve_visible_employee(db, caller, employee_ref)
        return await LeaveService.get_employee_history(db, employee.id)
