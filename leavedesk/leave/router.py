"""Leave router — apply, list, approve/reject, withdraw.

All endpoints require authentication. Reviewer endpoints enforce role checks;
ownership rules live in LeaveService.
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_user, require_role
from leavedesk.common.constants import LeaveStatus, UserRole
from leavedesk.common.pagination import PaginatedResponse, PaginationParams
from leavedesk.database import get_db
from leavedesk.employees.models import Employee
from leavedesk.leave.schemas import (
    LeaveApproveRequest,
    LeaveRejectRequest,
    LeaveRequestCreate,
    LeaveRequestOut,
)
from leavedesk.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leave"])


# ── POST /apply ─────────────────────────────────────────────────────

@router.post("/apply", response_model=LeaveRequestOut, status_code=status.HTTP_201_CREATED)
async def apply_leave(
    body: LeaveRequestCreate,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Apply for leave. Validates dates, working days, balance and overlap."""
    return await LeaveService.apply_leave(db, employee, body)


# ── GET /requests ───────────────────────────────────────────────────

@router.get("/requests", response_model=PaginatedResponse[LeaveRequestOut])
async def list_requests(
    status: Optional[LeaveStatus] = Query(None),
    pagination: PaginationParams = Depends(),
    employee: Employee = Depends(require_role(UserRole.manager)),
    db: AsyncSession = Depends(get_db),
):
    """All leave requests, newest first (HR / manager)."""
    return await LeaveService.get_leave_requests(
        db, employee, pagination, status=status, scope="all",
    )


# ── GET /my-requests ────────────────────────────────────────────────

@router.get("/my-requests", response_model=PaginatedResponse[LeaveRequestOut])
async def my_requests(
    status: Optional[LeaveStatus] = Query(None),
    pagination: PaginationParams = Depends(),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The caller's own leave requests, newest first."""
    return await LeaveService.get_leave_requests(
        db, employee, pagination, status=status, scope="my",
    )


# ── PUT /{id}/approve ───────────────────────────────────────────────

@router.put("/{request_id}/approve", response_model=LeaveRequestOut)
async def approve_leave(
    request_id: uuid.UUID,
    body: Optional[LeaveApproveRequest] = None,
    employee: Employee = Depends(require_role(UserRole.manager)),
    db: AsyncSession = Depends(get_db),
):
    """Approve a pending request after re-checking the owner's balance."""
    return await LeaveService.approve_leave(
        db, request_id, employee, comment=body.comment if body else None,
    )


# ── PUT /{id}/reject ────────────────────────────────────────────────

@router.put("/{request_id}/reject", response_model=LeaveRequestOut)
async def reject_leave(
    request_id: uuid.UUID,
    body: LeaveRejectRequest,
    employee: Employee = Depends(require_role(UserRole.manager)),
    db: AsyncSession = Depends(get_db),
):
    """Reject a pending request. A comment is required."""
    return await LeaveService.reject_leave(db, request_id, employee, body.comment)


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{request_id}")
async def withdraw_leave(
    request_id: uuid.UUID,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Withdraw a pending request (owner or HR)."""
    await LeaveService.withdraw_leave(db, request_id, employee)
    return {"message": "Leave request cancelled successfully"}
