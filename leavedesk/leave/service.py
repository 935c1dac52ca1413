"""Leave service layer — working days, overlap, balance ledger, lifecycle.

Business logic:
  - Chargeable-day count for a date range (weekends excluded, no holidays)
  - Overlap detection against the employee's pending/approved requests
  - Balance derived on every read from approved history (never stored)
  - Apply / approve / reject / withdraw, each committing one record mutation
  - pending → approved/rejected and withdrawal are conditional writes keyed
    on status, so a concurrent decision turns the loser into a conflict
"""

from __future__ import annotations

import logging
import math
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.common.constants import (
    BLOCKING_STATUSES,
    WEEKEND_DAYS,
    LeaveStatus,
    UserRole,
)
from leavedesk.common.exceptions import (
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from leavedesk.common.filters import apply_filters
from leavedesk.common.pagination import PaginatedResponse, PaginationParams, paginate
from leavedesk.config import settings
from leavedesk.employees.models import Employee
from leavedesk.leave.models import LeaveRequest
from leavedesk.leave.schemas import (
    LeaveBalanceOut,
    LeaveRequestCreate,
    LeaveRequestOut,
)

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations: validation rules, balances, lifecycle."""

    # ─────────────────────────────────────────────────────────────────
    # Working days
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def count_working_days(start: date, end: date) -> int:
        """Count weekdays from *start* to *end*, both inclusive.

        Callers must ensure ``end >= start``; an inverted range counts 0.
        """
        days = 0
        current = start
        while current <= end:
            if current.weekday() not in WEEKEND_DAYS:
                days += 1
            current += timedelta(days=1)
        return days

    # ─────────────────────────────────────────────────────────────────
    # Overlap
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def has_overlap(
        db: AsyncSession,
        employee_id: uuid.UUID,
        start: date,
        end: date,
        exclude_request_id: Optional[uuid.UUID] = None,
    ) -> bool:
        """True if a pending/approved request of the employee shares any day
        with [start, end]. Touching endpoints count as overlap."""

        query = select(func.count()).select_from(LeaveRequest).where(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.status.in_(BLOCKING_STATUSES),
            LeaveRequest.start_date <= end,
            LeaveRequest.end_date >= start,
        )
        if exclude_request_id is not None:
            query = query.where(LeaveRequest.id != exclude_request_id)

        result = await db.execute(query)
        return result.scalar_one() > 0

    # ─────────────────────────────────────────────────────────────────
    # Balance ledger
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_used_days(
        db: AsyncSession,
        employee_id: uuid.UUID,
        year: int,
        exclude_request_id: Optional[uuid.UUID] = None,
    ) -> int:
        """Sum chargeable days of approved requests starting in *year*."""

        query = select(func.coalesce(func.sum(LeaveRequest.total_days), 0)).where(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.status == LeaveStatus.approved,
            LeaveRequest.start_date >= date(year, 1, 1),
            LeaveRequest.start_date <= date(year, 12, 31),
        )
        if exclude_request_id is not None:
            query = query.where(LeaveRequest.id != exclude_request_id)

        result = await db.execute(query)
        return int(result.scalar_one())

    @staticmethod
    async def available_balance(
        db: AsyncSession,
        employee: Employee,
        year: int,
        *,
        exclude_request_id: Optional[uuid.UUID] = None,
    ) -> LeaveBalanceOut:
        """Derive {total, used, available} for *employee* in *year*.

        Recomputed from the approved history on every call.
        """
        total = employee.leave_balance
        used = await LeaveService._get_used_days(
            db, employee.id, year, exclude_request_id,
        )
        return LeaveBalanceOut(
            employee_id=employee.id,
            year=year,
            total=total,
            used=used,
            available=max(0, total - used),
        )

    @staticmethod
    def accrued_leave(employee: Employee, as_of: Optional[date] = None) -> int:
        """Advisory prorated entitlement: whole months since joining times
        the monthly accrual rate, floored and capped at the allocation."""

        as_of = as_of or date.today()
        joining = employee.joining_date
        months = (as_of.year - joining.year) * 12 + (as_of.month - joining.month)
        if months <= 0:
            return 0
        earned = math.floor(Decimal(months) * Decimal(settings.ACCRUAL_DAYS_PER_MONTH))
        return min(earned, employee.leave_balance)

    # ─────────────────────────────────────────────────────────────────
    # Loading helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _with_relations(query):
        return query.options(
            selectinload(LeaveRequest.employee),
            selectinload(LeaveRequest.reviewer),
        )

    @staticmethod
    async def _load_request(
        db: AsyncSession,
        request_id: uuid.UUID,
    ) -> LeaveRequest:
        """Fetch a request with employee + reviewer, refreshing stale state."""

        result = await db.execute(
            LeaveService._with_relations(
                select(LeaveRequest).where(LeaveRequest.id == request_id)
            ).execution_options(populate_existing=True)
        )
        leave_req = result.scalars().first()
        if leave_req is None:
            raise NotFoundException("LeaveRequest", str(request_id))
        return leave_req

    @staticmethod
    async def _current_status(
        db: AsyncSession,
        request_id: uuid.UUID,
    ) -> LeaveStatus:
        result = await db.execute(
            select(LeaveRequest.status).where(LeaveRequest.id == request_id)
        )
        status = result.scalar()
        if status is None:
            raise NotFoundException("LeaveRequest", str(request_id))
        return status

    @staticmethod
    def _ensure_reviewer(reviewer: Employee, action: str) -> None:
        if not reviewer.is_reviewer:
            raise ForbiddenException(
                f"Only HR or managers can {action} leave requests."
            )

    # ─────────────────────────────────────────────────────────────────
    # Apply Leave
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def apply_leave(
        db: AsyncSession,
        employee: Employee,
        data: LeaveRequestCreate,
        *,
        today: Optional[date] = None,
    ) -> LeaveRequestOut:
        """Apply for leave. Guards run in order and the first failure aborts:
        - start not in the past (today itself is allowed)
        - end on or after start
        - start on or after the joining date
        - at least one chargeable day
        - enough available balance in the start date's year
        - no overlap with a pending/approved request
        """

        today = today or date.today()

        if data.start_date < today:
            raise ValidationException(
                {"start_date": ["Cannot apply for leave on past dates."]}
            )
        if data.end_date < data.start_date:
            raise ValidationException(
                {"end_date": ["End date must be after or equal to start date."]}
            )
        if data.start_date < employee.joining_date:
            raise ValidationException(
                {"start_date": ["Cannot apply for leave before joining date."]}
            )

        total_days = LeaveService.count_working_days(data.start_date, data.end_date)
        if total_days <= 0:
            raise ValidationException(
                {"dates": ["Leave request must include at least one working day."]}
            )

        balance = await LeaveService.available_balance(
            db, employee, data.start_date.year,
        )
        if total_days > balance.available:
            raise ValidationException(
                {"balance": [
                    f"Insufficient leave balance. You have {balance.available} days "
                    f"available, but requested {total_days} days."
                ]}
            )

        if await LeaveService.has_overlap(
            db, employee.id, data.start_date, data.end_date,
        ):
            raise ValidationException(
                {"dates": [
                    "You already have a pending or approved leave request "
                    "that overlaps with these dates."
                ]}
            )

        leave_request = LeaveRequest(
            employee_id=employee.id,
            start_date=data.start_date,
            end_date=data.end_date,
            leave_type=data.leave_type,
            reason=data.reason,
            status=LeaveStatus.pending,
            total_days=total_days,
        )
        db.add(leave_request)
        await db.flush()

        logger.info(
            "Leave request %s submitted by %s: %s..%s (%d days)",
            leave_request.id, employee.id, data.start_date, data.end_date, total_days,
        )

        leave_request = await LeaveService._load_request(db, leave_request.id)
        return LeaveRequestOut.model_validate(leave_request)

    # ─────────────────────────────────────────────────────────────────
    # Decide (approve / reject)
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _decide(
        db: AsyncSession,
        leave_req: LeaveRequest,
        reviewer: Employee,
        new_status: LeaveStatus,
        comment: Optional[str],
    ) -> LeaveRequestOut:
        """Move a pending request to a terminal status in one conditional write.

        The UPDATE only matches while the row is still pending; if another
        reviewer decided first, nothing is written and a conflict is raised.
        """
        now = datetime.now(timezone.utc)
        result = await db.execute(
            update(LeaveRequest)
            .where(
                LeaveRequest.id == leave_req.id,
                LeaveRequest.status == LeaveStatus.pending,
            )
            .values(
                status=new_status,
                reviewed_by=reviewer.id,
                reviewed_at=now,
                review_comment=comment,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            current = await LeaveService._current_status(db, leave_req.id)
            logger.warning(
                "Lost decision race on leave request %s: already %s",
                leave_req.id, current.value,
            )
            raise ConflictError(f"Leave request is already {current.value}.")

        logger.info(
            "Leave request %s %s by %s", leave_req.id, new_status.value, reviewer.id,
        )
        updated = await LeaveService._load_request(db, leave_req.id)
        return LeaveRequestOut.model_validate(updated)

    # ─────────────────────────────────────────────────────────────────
    # Approve Leave
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def approve_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        reviewer: Employee,
        *,
        comment: Optional[str] = None,
    ) -> LeaveRequestOut:
        """Approve a pending request after re-checking the owner's balance
        against the currently approved total for the request's year."""

        LeaveService._ensure_reviewer(reviewer, "approve")
        leave_req = await LeaveService._load_request(db, request_id)

        if not leave_req.is_pending:
            raise ConflictError(f"Leave request is already {leave_req.status.value}.")

        balance = await LeaveService.available_balance(
            db,
            leave_req.employee,
            leave_req.start_date.year,
            exclude_request_id=leave_req.id,
        )
        if leave_req.total_days > balance.available:
            raise ValidationException(
                {"balance": [
                    f"Cannot approve. Employee has only {balance.available} days "
                    f"available, but request is for {leave_req.total_days} days."
                ]}
            )

        comment = comment.strip() if comment else None
        return await LeaveService._decide(
            db, leave_req, reviewer, LeaveStatus.approved, comment or None,
        )

    # ─────────────────────────────────────────────────────────────────
    # Reject Leave
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def reject_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        reviewer: Employee,
        comment: Optional[str],
    ) -> LeaveRequestOut:
        """Reject a pending request. A rejection comment is mandatory."""

        LeaveService._ensure_reviewer(reviewer, "reject")

        comment = comment.strip() if comment else ""
        if not comment:
            raise ValidationException({"comment": ["Rejection comment is required."]})

        leave_req = await LeaveService._load_request(db, request_id)

        if not leave_req.is_pending:
            raise ConflictError(f"Leave request is already {leave_req.status.value}.")

        return await LeaveService._decide(
            db, leave_req, reviewer, LeaveStatus.rejected, comment,
        )

    # ─────────────────────────────────────────────────────────────────
    # Withdraw Leave
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def withdraw_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        caller: Employee,
    ) -> None:
        """Delete a pending request. Allowed for its owner or HR."""

        leave_req = await LeaveService._load_request(db, request_id)

        if leave_req.employee_id != caller.id and caller.role != UserRole.hr:
            raise ConflictError("You can only cancel your own leave requests.")

        if not leave_req.is_pending:
            raise ConflictError(f"Cannot cancel {leave_req.status.value} leave request.")

        result = await db.execute(
            delete(LeaveRequest)
            .where(
                LeaveRequest.id == leave_req.id,
                LeaveRequest.status == LeaveStatus.pending,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            current = await LeaveService._current_status(db, leave_req.id)
            raise ConflictError(f"Cannot cancel {current.value} leave request.")

        db.expunge(leave_req)
        logger.info("Leave request %s withdrawn by %s", request_id, caller.id)

    # ─────────────────────────────────────────────────────────────────
    # List Leave Requests
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_leave_requests(
        db: AsyncSession,
        caller: Employee,
        params: PaginationParams,
        *,
        status: Optional[LeaveStatus] = None,
        scope: str = "all",
    ) -> PaginatedResponse[LeaveRequestOut]:
        """List leave requests, newest first.

        Scopes:
          - my: the caller's own requests
          - all: every request (reviewers); employees fall back to their own
        """

        filters: dict = {"status": status}
        if scope == "my" or not caller.is_reviewer:
            filters["employee_id"] = caller.id

        query = apply_filters(
            LeaveService._with_relations(select(LeaveRequest)),
            LeaveRequest,
            filters,
        ).order_by(LeaveRequest.created_at.desc())

        page = await paginate(db, query, params, model=LeaveRequest)
        return PaginatedResponse[LeaveRequestOut](
            data=[LeaveRequestOut.model_validate(r) for r in page.data],
            meta=page.meta,
        )

    @staticmethod
    async def get_employee_history(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> list[LeaveRequestOut]:
        """Full leave history of one employee, newest first."""

        result = await db.execute(
            LeaveService._with_relations(
                select(LeaveRequest).where(LeaveRequest.employee_id == employee_id)
            ).order_by(LeaveRequest.created_at.desc())
        )
        return [LeaveRequestOut.model_validate(r) for r in result.scalars().all()]
