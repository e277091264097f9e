"""Common module — errors, query helpers and calendar math shared by the ERP."""

from erp.common.dates import add_months, month_bounds, month_key, month_label
from erp.common.exceptions import (
    AppError,
    BadRequestException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    register_exception_handlers,
)
from erp.common.filters import apply_filters, apply_search, apply_sorting

__all__ = [
    # Dates
    "add_months",
    "month_bounds",
    "month_key",
    "month_label",
    # Errors
    "AppError",
    "BadRequestException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "UnauthorizedException",
    "register_exception_handlers",
    # Query helpers
    "apply_filters",
    "apply_search",
    "apply_sorting",
]
