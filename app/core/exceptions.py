"""
Base exception classes for application-wide error handling.

Every domain failure in the chat core falls into one of four kinds. Each kind
is a subclass of BaseApplicationError carrying a machine-readable error code
and the HTTP status it maps to at the API boundary.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Empty content, malformed frames (400)
    ├── NotFoundError - Missing event, conversation, user or message (404)
    ├── PermissionDeniedError - Caller is not a participant (403)
    └── ConflictError - Concurrent provisioning could not settle (409)

Usage:
    from core.exceptions import NotFoundError, PermissionDeniedError

    raise NotFoundError("Event not found", error_code="EVENT_NOT_FOUND")

    raise PermissionDeniedError(
        "You are not a participant in this conversation",
        error_code="NOT_PARTICIPANT",
        details={"conversation_id": conversation_id},
    )

    # Convert to dict for API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.status_code)

Note:
    Services report expected failures through ServiceResult; these classes
    are what those failures become once they reach a transport boundary.
    See core.exception_handler for the DRF side.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (ids, field errors, etc.)
        status_code: HTTP status used when rendered by the API layer

    Example:
        try:
            conversation = result.unwrap(CHAT_ERROR_CLASSES)
        except NotFoundError as e:
            logger.warning(f"Lookup failed: {e.error_code}")
            return Response(e.to_dict(), status=e.status_code)
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, error_code, and details keys

        Example:
            {
                "error": "Conversation not found",
                "error_code": "CONVERSATION_NOT_FOUND",
                "details": {"conversation_id": 12}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Empty or oversized message content
    - Malformed WebSocket frames
    - Requests that make no sense (a direct chat with yourself)

    Example:
        raise ValidationError(
            "Message content cannot be empty",
            error_code="EMPTY_CONTENT",
        )

    Note:
        For DRF serializer validation, use DRF's built-in validation.
        Use this for service-layer validation logic.
    """

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = 400


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Example:
        raise NotFoundError(
            f"Event {event_id} not found",
            error_code="EVENT_NOT_FOUND",
            details={"event_id": event_id},
        )
    """

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the caller may not perform an operation.

    Use for:
    - Posting to or reading a conversation you do not participate in
    - Marking someone else's legacy message as read
    - Approving RSVPs for an event you do not host

    Note:
        For authentication failures (missing/invalid token), use DRF's
        AuthenticationFailed. Use this for authorization failures.
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = 403


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Use for:
    - Unique constraint violations that could not be resolved by
      fetching the existing row

    Note:
        HTTP 409 Conflict is the appropriate status for these errors.
    """

    default_error_code: str = "CONFLICT"
    status_code: int = 409
