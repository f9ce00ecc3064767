"""Common module — shared utilities for Leave Desk."""

from leavedesk.common.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PERMISSIONS,
    ApprovalStatus,
    LeaveStatus,
    Portal,
    RequestScope,
    UserRole,
)
from leavedesk.common.exceptions import (
    AppException,
    BackendException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
    register_exception_handlers,
)
from leavedesk.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    build_meta,
)

__all__ = [
    # Constants / Enums
    "ApprovalStatus",
    "LeaveStatus",
    "Portal",
    "RequestScope",
    "UserRole",
    "PERMISSIONS",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AppException",
    "BackendException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "ValidationException",
    "register_exception_handlers",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "build_meta",
]
