"""
API exceptions for messaging automations.

Engine errors are translated into ``AutomationAPIException`` subclasses and
rendered in one format:
{
    "success": false,
    "message": "Human-readable message",
    "error_code": "MACHINE_READABLE_CODE",
    "errors": [...],
    "meta": {...}
}
"""

import logging
from typing import Dict, List

from django.http import Http404
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from ..exceptions import (
    CollaboratorFailure,
    RuleNotFoundError,
    RuleValidationError,
    TemplateNotFoundError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTIONS
# =============================================================================

class AutomationAPIException(APIException):
    """
    Base exception for automation API errors.

    Attributes:
        error_code: Specific error code for this instance
        errors: Field-scoped error list
        extra_data: Additional data to include in ``meta``
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = _("An unexpected error occurred.")
    default_code = "ERROR"

    def __init__(self, detail: str = None, code: str = None, errors: List[Dict] = None, extra_data: Dict = None):
        self.error_code = code or self.default_code
        self.errors = errors or []
        self.extra_data = extra_data or {}

        if detail is None:
            detail = str(self.default_detail)

        super().__init__(detail=detail, code=code)


class RuleInvalidError(AutomationAPIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("Validation failed.")
    default_code = "VALIDATION_ERROR"


class ResourceNotFoundError(AutomationAPIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = _("Not found.")
    default_code = "NOT_FOUND"


class UpstreamServiceError(AutomationAPIException):
    """An external system the engine depends on failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = _("An upstream service failed.")
    default_code = "UPSTREAM_ERROR"


def translate_engine_error(exc):
    """Map an engine exception to its API exception; other exceptions pass through."""
    if isinstance(exc, RuleValidationError):
        return RuleInvalidError(
            errors=[{'field': error.field, 'messages': [error.message]} for error in exc.errors],
        )
    if isinstance(exc, RuleNotFoundError):
        return ResourceNotFoundError(detail=exc.message, code="RULE_NOT_FOUND")
    if isinstance(exc, TemplateNotFoundError):
        return ResourceNotFoundError(detail=exc.message, code="TEMPLATE_NOT_FOUND")
    if isinstance(exc, CollaboratorFailure):
        logger.error(f"Collaborator failure ({exc.source}): {exc.message}")
        return UpstreamServiceError(detail=exc.message, extra_data={'source': exc.source})
    return exc


def automation_exception_handler(exc, context):
    """Standardized error responses for the automations API."""
    if isinstance(exc, Http404):
        exc = NotFound()
    exc = translate_engine_error(exc)
    response = exception_handler(exc, context)

    if response is None:
        logger.exception(f"Unhandled exception: {exc}")
        return Response(
            {
                "success": False,
                "message": "An unexpected error occurred.",
                "error_code": "INTERNAL_ERROR",
                "errors": [],
                "meta": {"timestamp": timezone.now().isoformat()},
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    error_data = {
        "success": False,
        "message": "",
        "error_code": "ERROR",
        "errors": [],
        "meta": {"timestamp": timezone.now().isoformat()},
    }

    if isinstance(exc, AutomationAPIException):
        error_data["message"] = str(exc.detail)
        error_data["error_code"] = exc.error_code
        error_data["errors"] = exc.errors
        error_data["meta"].update(exc.extra_data)

    elif isinstance(exc, ValidationError):
        error_data["error_code"] = "VALIDATION_ERROR"
        error_data["message"] = "Validation failed."
        if isinstance(exc.detail, dict):
            error_data["errors"] = [
                {"field": field, "messages": msgs if isinstance(msgs, list) else [str(msgs)]}
                for field, msgs in exc.detail.items()
            ]
        elif isinstance(exc.detail, list):
            error_data["errors"] = [{"field": "non_field_errors", "messages": [str(e) for e in exc.detail]}]

    else:
        error_data["message"] = str(exc.detail) if hasattr(exc, 'detail') else str(exc)
        error_data["error_code"] = getattr(exc, 'default_code', 'ERROR')

    response.data = error_data
    return response
