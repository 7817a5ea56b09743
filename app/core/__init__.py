"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the domain apps (authentication, events, chat).

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and HTTP status
    - ValidationError: Input validation failures
    - NotFoundError: Resource not found
    - PermissionDeniedError: Authorization failures
    - ConflictError: State conflicts

API (core.exception_handler, core.views):
    - api_exception_handler: Renders application errors for DRF
    - health_check: Database and cache health endpoint
"""
