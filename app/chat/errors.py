"""
Chat error codes and their exception classes.

Services return ServiceResult failures carrying one of these codes. Transport
layers turn them into exceptions with ServiceResult.unwrap(CHAT_ERROR_CLASSES)
(HTTP) or into error frames (WebSocket).
"""

from core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


class ChatErrorCode:
    """Machine-readable failure codes returned by chat services."""

    # NotFound
    CONVERSATION_NOT_FOUND = "CONVERSATION_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    MESSAGE_NOT_FOUND = "MESSAGE_NOT_FOUND"

    # Forbidden
    NOT_PARTICIPANT = "NOT_PARTICIPANT"
    NOT_MESSAGE_RECEIVER = "NOT_MESSAGE_RECEIVER"
    SENDER_MISMATCH = "SENDER_MISMATCH"

    # Validation
    EMPTY_CONTENT = "EMPTY_CONTENT"
    CONTENT_TOO_LONG = "CONTENT_TOO_LONG"
    SAME_USER = "SAME_USER"
    DIRECT_CONVERSATION_FULL = "DIRECT_CONVERSATION_FULL"
    INVALID_FRAME = "INVALID_FRAME"

    # Conflict
    EVENT_CHAT_CONFLICT = "EVENT_CHAT_CONFLICT"
    DIRECT_CONVERSATION_CONFLICT = "DIRECT_CONVERSATION_CONFLICT"


CHAT_ERROR_CLASSES = {
    ChatErrorCode.CONVERSATION_NOT_FOUND: NotFoundError,
    ChatErrorCode.USER_NOT_FOUND: NotFoundError,
    ChatErrorCode.EVENT_NOT_FOUND: NotFoundError,
    ChatErrorCode.MESSAGE_NOT_FOUND: NotFoundError,
    ChatErrorCode.NOT_PARTICIPANT: PermissionDeniedError,
    ChatErrorCode.NOT_MESSAGE_RECEIVER: PermissionDeniedError,
    ChatErrorCode.SENDER_MISMATCH: PermissionDeniedError,
    ChatErrorCode.EMPTY_CONTENT: ValidationError,
    ChatErrorCode.CONTENT_TOO_LONG: ValidationError,
    ChatErrorCode.SAME_USER: ValidationError,
    ChatErrorCode.DIRECT_CONVERSATION_FULL: ValidationError,
    ChatErrorCode.INVALID_FRAME: ValidationError,
    ChatErrorCode.EVENT_CHAT_CONFLICT: ConflictError,
    ChatErrorCode.DIRECT_CONVERSATION_CONFLICT: ConflictError,
}
