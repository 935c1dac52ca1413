"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Out                → response bodies (read)

Request bodies accept both snake_case and camelCase keys.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from leavedesk.common.constants import (
    REASON_MAX_LENGTH,
    REJECTION_COMMENT_MIN_LENGTH,
    REVIEW_COMMENT_MAX_LENGTH,
    LeaveStatus,
    LeaveType,
)
from leavedesk.employees.schemas import EmployeeBrief


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Create
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Payload for applying a leave request."""

    model_config = ConfigDict(populate_by_name=True)

    start_date: date = Field(
        ...,
        validation_alias=AliasChoices("start_date", "startDate"),
        description="Leave start date (inclusive)",
    )
    end_date: date = Field(
        ...,
        validation_alias=AliasChoices("end_date", "endDate"),
        description="Leave end date (inclusive)",
    )
    leave_type: LeaveType = Field(
        ..., validation_alias=AliasChoices("leave_type", "leaveType"),
    )
    reason: str = Field(..., max_length=REASON_MAX_LENGTH)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Reason is required.")
        return v

    @model_validator(mode="after")
    def validate_dates(self) -> "LeaveRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("End date must be after or equal to start date.")
        return self


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Response
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestOut(BaseModel):
    """Full leave request response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    start_date: date
    end_date: date
    leave_type: LeaveType
    reason: str
    status: LeaveStatus
    total_days: int
    reviewed_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None
    review_comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    employee: Optional[EmployeeBrief] = None
    reviewer: Optional[EmployeeBrief] = None


# ═════════════════════════════════════════════════════════════════════
# Leave Approve / Reject
# ═════════════════════════════════════════════════════════════════════


class LeaveApproveRequest(BaseModel):
    """Payload for approving a leave request."""

    comment: Optional[str] = Field(None, max_length=REVIEW_COMMENT_MAX_LENGTH)


class LeaveRejectRequest(BaseModel):
    """Payload for rejecting a leave request. The reason must be recorded."""

    comment: str = Field(
        ...,
        min_length=REJECTION_COMMENT_MIN_LENGTH,
        max_length=REVIEW_COMMENT_MAX_LENGTH,
    )

    @field_validator("comment")
    @classmethod
    def comment_long_enough(cls, v: str) -> str:
        v = v.strip()
        if len(v) < REJECTION_COMMENT_MIN_LENGTH:
            raise ValueError(
                f"Rejection comment must be at least {REJECTION_COMMENT_MIN_LENGTH} characters."
            )
        return v


# ═════════════════════════════════════════════════════════════════════
# Leave Balance
# ═════════════════════════════════════════════════════════════════════


class LeaveBalanceOut(BaseModel):
    """Derived balance for one employee and calendar year."""

    employee_id: uuid.UUID
    year: int
    total: int
    used: int
    available: int

    # Advisory prorated estimate; never used to gate applications
    accrued: Optional[int] = None
    employee: Optional[EmployeeBrief] = None
