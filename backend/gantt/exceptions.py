"""
Structured exceptions and error responses for the Gantt engine.

Provides consistent error handling with:
- Custom exception classes raised by the engine and the interaction layer
- Structured error response format
- FastAPI exception handlers for the HTTP adapter
"""

from typing import Any, Dict, Optional, List
from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from gantt.logging_config import get_logger

logger = get_logger("gantt.error")


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """Detail of a single error."""
    loc: Optional[List[str]] = None  # Location of error (e.g., ["body", "startDate"])
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Structured error response format."""
    error: str  # Error code (e.g., "not_found", "cycle_detected")
    message: str  # Human-readable message
    details: Optional[List[ErrorDetail]] = None


# =============================================================================
# Custom Exceptions
# =============================================================================

class GanttException(Exception):
    """Base exception for all engine errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(GanttException):
    """Task, dependency or resource not found."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} with ID {resource_id} not found",
            error_code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )
        self.resource = resource
        self.resource_id = resource_id


class ValidationError(GanttException):
    """Input rejected before it reached the task graph."""

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            error_code="validation_error",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )

    @classmethod
    def from_pydantic(cls, exc, message: str = "Invalid task data") -> "ValidationError":
        """Wrap a pydantic ValidationError, keeping its per-field errors."""
        details = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", "value_error"),
            }
            for err in exc.errors()
        ]
        return cls(message, details=details)


class CycleDetectedError(GanttException):
    """Adding a dependency would create a cycle."""

    def __init__(self, from_id: str, to_id: str):
        super().__init__(
            message="Adding this dependency would create a cycle in the task graph",
            error_code="cycle_detected",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=[{
                "loc": ["body"],
                "msg": f"Dependency {from_id} -> {to_id} would create a cycle",
                "type": "cycle_error",
            }],
        )
        self.from_id = from_id
        self.to_id = to_id


class DuplicateDependencyError(GanttException):
    """Dependency already exists."""

    def __init__(self, from_id: str, to_id: str):
        super().__init__(
            message="This dependency already exists",
            error_code="duplicate_dependency",
            status_code=status.HTTP_409_CONFLICT,
        )
        self.from_id = from_id
        self.to_id = to_id


class SelfDependencyError(GanttException):
    """Task cannot depend on itself."""

    def __init__(self, task_id: str):
        super().__init__(
            message="A task cannot depend on itself",
            error_code="self_dependency",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
        self.task_id = task_id


# =============================================================================
# Exception Handlers
# =============================================================================

async def gantt_exception_handler(request: Request, exc: GanttException) -> JSONResponse:
    """Handle GanttException and return structured response."""
    body = ErrorResponse(error=exc.error_code, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="internal_error", message="An unexpected error occurred").model_dump(),
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(GanttException, gantt_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
