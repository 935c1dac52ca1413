"""Common module — shared utilities for LeaveDesk."""

from leavedesk.common.constants import (
    BLOCKING_STATUSES,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    REVIEWER_ROLES,
    ROLE_HIERARCHY,
    WEEKEND_DAYS,
    Department,
    LeaveStatus,
    LeaveType,
    UserRole,
)
from leavedesk.common.exceptions import (
    AppException,
    ConflictError,
    DuplicateException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
    register_exception_handlers,
)
from leavedesk.common.filters import apply_filters, apply_sorting
from leavedesk.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Constants / Enums
    "Department",
    "LeaveStatus",
    "LeaveType",
    "UserRole",
    "BLOCKING_STATUSES",
    "REVIEWER_ROLES",
    "ROLE_HIERARCHY",
    "WEEKEND_DAYS",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AppException",
    "ConflictError",
    "DuplicateException",
    "ForbiddenException",
    "NotFoundException",
    "UnauthorizedException",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_sorting",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
