# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings, URLs, ASGI/WSGI applications and Celery configuration for the
# chat service.
#
# The Celery app is imported here so that it is loaded when Django starts
# and shared_task decorators bind to it.
# =============================================================================

from config.celery import app as celery_app

__all__ = ("celery_app",)
