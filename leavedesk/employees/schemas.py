"""Employee Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create      → request bodies (write)
  - *Out         → response bodies (read)
  - *Brief       → compact embedded representations
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)

from leavedesk.common.constants import Department, UserRole


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class EmployeeBrief(BaseModel):
    """Minimal employee info embedded in leave and balance responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    department: Department
    joining_date: Optional[date] = None


# ═════════════════════════════════════════════════════════════════════
# Employee — Create
# ═════════════════════════════════════════════════════════════════════


class EmployeeBase(BaseModel):
    """Fields shared by self-registration and HR-created employees."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    department: Department
    joining_date: date = Field(
        ..., validation_alias=AliasChoices("joining_date", "joiningDate"),
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters long.")
        return v

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("joining_date")
    @classmethod
    def joining_date_not_future(cls, v: date) -> date:
        if v > date.today():
            raise ValueError("Joining date cannot be in the future.")
        return v


class EmployeeCreate(EmployeeBase):
    """HR payload for adding an employee with an explicit role."""

    role: UserRole = UserRole.employee
    leave_balance: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("leave_balance", "leaveBalance"),
        description="Annual allocation in days; defaults to the configured allocation.",
    )


# ═════════════════════════════════════════════════════════════════════
# Employee — Response
# ═════════════════════════════════════════════════════════════════════


class EmployeeOut(BaseModel):
    """Full employee representation (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    department: Department
    role: UserRole
    joining_date: date
    leave_balance: int
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
