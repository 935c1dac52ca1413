"""Employees router — HR administration plus per-employee balance and history.

``{employee_ref}`` is an employee id or the literal ``me``.
"""


from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_user, require_role
from leavedesk.common.constants import UserRole
from leavedesk.common.pagination import PaginatedResponse, PaginationParams
from leavedesk.database import get_db
from leavedesk.employees.models import Employee
from leavedesk.employees.schemas import EmployeeCreate, EmployeeOut
from leavedesk.employees.service import EmployeeService
from leavedesk.leave.schemas import LeaveBalanceOut, LeaveRequestOut

router = APIRouter(prefix="", tags=["employees"])


# ── POST / — Add employee (HR) ──────────────────────────────────────

@router.post("", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
async def create_employee(
    body: EmployeeCreate,
    current_user: Employee = Depends(require_role(UserRole.hr)),
    db: AsyncSession = Depends(get_db),
):
    """Add an employee with an explicit role (default ``employee``)."""
    return await EmployeeService.create_employee(
        db, body, role=body.role, leave_balance=body.leave_balance,
    )


# ── GET / — List employees (HR) ─────────────────────────────────────

@router.get("", response_model=PaginatedResponse[EmployeeOut])
async def list_employees(
    pagination: PaginationParams = Depends(),
    current_user: Employee = Depends(require_role(UserRole.hr)),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.list_employees(db, pagination)


# ── GET /{employee_ref}/balance ─────────────────────────────────────

@router.get("/{employee_ref}/balance", response_model=LeaveBalanceOut)
async def get_balance(
    employee_ref: str,
    year: Optional[int] = Query(None, ge=1970, le=9999, description="Calendar year (default: current)"),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Allocated, used and available days for the year (self or HR)."""
    return await EmployeeService.get_balance(db, current_user, employee_ref, year=year)


# ── GET /{employee_ref}/leaves ──────────────────────────────────────

@router.get("/{employee_ref}/leaves", response_model=list[LeaveRequestOut])
async def get_leave_history(
    employee_ref: str,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Leave history, newest first (self or HR)."""
    return await EmployeeService.get_leave_history(db, current_user, employee_ref)
