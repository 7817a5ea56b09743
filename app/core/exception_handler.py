"""
DRF exception handler for application errors.

Renders BaseApplicationError subclasses raised from views as
{"error", "error_code", ["details"]} with the status each class declares.
Everything else falls through to DRF's default handler.

Configured in settings:
    REST_FRAMEWORK = {
        "EXCEPTION_HANDLER": "core.exception_handler.api_exception_handler",
    }
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    if isinstance(exc, BaseApplicationError):
        view = context.get("view")
        logger.info(
            f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'view'}: {exc}"
        )
        return Response(exc.to_dict(), status=exc.status_code)

    return exception_handler(exc, context)
