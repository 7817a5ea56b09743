"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and consumers.
    Views and consumers handle transport concerns, models handle data,
    services handle rules.

Pattern Comparison:
    - ServiceResult: Use for expected failures (not found, not a participant)
    - Exceptions: Use for unexpected failures (database errors, bugs)

Usage:
    from core.services import BaseService, ServiceResult

    class MessageService(BaseService):
        @classmethod
        def post_message(cls, sender_id, conversation_id, content) -> ServiceResult:
            if not content.strip():
                return ServiceResult.failure(
                    "Message content cannot be empty",
                    error_code="EMPTY_CONTENT",
                )

            with cls.atomic():
                message = Message.objects.create(...)

            cls.get_logger().info(f"Message {message.id} posted")
            return ServiceResult.success(message)

    # In view
    message = MessageService.post_message(...).unwrap(CHAT_ERROR_CLASSES)
    return Response(MessageSerializer(message).data, status=201)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

from core.exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Generator, Mapping
    from typing import Any

    from core.exceptions import BaseApplicationError

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.
    Use this for expected failures (validation errors, business rule violations).

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures

    Usage:
        # Success case
        return ServiceResult.success(conversation)

        # Failure case
        return ServiceResult.failure("Event not found", "EVENT_NOT_FOUND")

        # Check result
        result = GroupChatService.ensure_event_group_chat(event_id, host)
        if result.success:
            conversation = result.data
        else:
            logger.warning(f"{result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)

        Returns:
            ServiceResult with success=False and error details

        Example:
            return ServiceResult.failure(
                "You are not a participant in this conversation",
                error_code="NOT_PARTICIPANT",
            )
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Returns:
            Dict with success status and data or error details
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response

    def unwrap(
        self,
        error_classes: Mapping[str, type[BaseApplicationError]] | None = None,
    ) -> T:
        """
        Return the data, or raise the application error for this failure.

        Args:
            error_classes: error_code -> exception class. Codes not listed
                raise ValidationError.

        Example:
            conversation = result.unwrap(CHAT_ERROR_CLASSES)
        """
        if self.success:
            return self.data  # type: ignore[return-value]

        exc_class = (error_classes or {}).get(self.error_code or "", ValidationError)
        raise exc_class(
            self.error or "Operation failed",
            error_code=self.error_code,
            details=self.errors,
        )

    def map(self, func) -> ServiceResult:
        """
        Transform the data if successful.

        Example:
            result = MessageService.post_message(...)
            serialized = result.map(lambda m: MessageSerializer(m).data)
        """
        if self.success and self.data is not None:
            return ServiceResult.success(func(self.data))
        return self  # type: ignore

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Nested use creates a savepoint, so an IntegrityError raised inside
        rolls back only the inner block and leaves an outer transaction usable.

        Example:
            with cls.atomic():
                conversation = Conversation.objects.create(...)
                Participant.objects.create(conversation=conversation, user=host)
        """
        with transaction.atomic():
            yield
