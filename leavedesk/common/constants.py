"""Enums and constants for LeaveDesk."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    employee = "employee"
    manager = "manager"
    hr = "hr"


# Each role implicitly includes the roles below it
ROLE_HIERARCHY: dict[UserRole, set[UserRole]] = {
    UserRole.hr: {UserRole.hr, UserRole.manager, UserRole.employee},
    UserRole.manager: {UserRole.manager, UserRole.employee},
    UserRole.employee: {UserRole.employee},
}

# Roles allowed to decide (approve / reject) leave requests
REVIEWER_ROLES: frozenset[UserRole] = frozenset({UserRole.hr, UserRole.manager})


# ── Employee ────────────────────────────────────────────────────────

class Department(str, enum.Enum):
    hr = "HR"
    engineering = "Engineering"
    sales = "Sales"
    marketing = "Marketing"
    finance = "Finance"
    operations = "Operations"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class LeaveType(str, enum.Enum):
    sick = "sick"
    vacation = "vacation"
    personal = "personal"
    emergency = "emergency"
    maternity = "maternity"
    paternity = "paternity"


# Statuses that occupy calendar days; rejected requests never conflict
BLOCKING_STATUSES: tuple[LeaveStatus, ...] = (LeaveStatus.pending, LeaveStatus.approved)

# Saturday (5) and Sunday (6) in date.weekday() numbering
WEEKEND_DAYS: frozenset[int] = frozenset({5, 6})

# ── Misc constants ──────────────────────────────────────────────────

REASON_MAX_LENGTH = 500
REVIEW_COMMENT_MAX_LENGTH = 200
REJECTION_COMMENT_MIN_LENGTH = 10
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10
