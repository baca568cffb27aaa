"""
Result utilities for consistent success/error shapes in CLI JSON output.
"""

import traceback
from typing import Any, Optional

from clbox.commands.errors import ClboxError


def ok(data: Optional[Any] = None, **extras: Any) -> dict[str, Any]:
    """Standard success result shape."""
    result: dict[str, Any] = {"success": True}
    if data is not None:
        result["data"] = data
    if extras:
        result.update(extras)
    return result


def fail(
    message: str, *, error: Optional[Exception] = None, **extras: Any
) -> dict[str, Any]:
    """Standard failure result shape with optional exception details.

    For ClboxError subclasses, error_type, error_code and error_details are
    included at the top level.
    """
    result: dict[str, Any] = {"success": False, "error": message}
    if error is not None:
        formatted = format_error(error, include_traceback=False)
        result["exception"] = formatted
        result["error_type"] = formatted["type"]
        if "code" in formatted:
            result["error_code"] = formatted["code"]
        if "details" in formatted:
            result["error_details"] = formatted["details"]
    if extras:
        result.update(extras)
    return result


def format_error(error: Exception, include_traceback: bool = True) -> dict[str, Any]:
    """Format an exception with type, message and optionally its traceback."""
    result: dict[str, Any] = {
        "type": type(error).__name__,
        "message": str(error),
    }
    if include_traceback:
        result["traceback"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
    if isinstance(error, ClboxError):
        if error.code:
            result["code"] = error.code
        if error.details:
            result["details"] = error.details
    return result
