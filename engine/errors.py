"""
Error taxonomy for the issue templates backend.

Every failure that reaches a resolver is one of these. Operations raise them
before their first store write, so a raised error never leaves a partial
mutation behind.

Usage:
    raise TemplateNotFoundError("Template not found", template_id=template_id)
"""

from __future__ import annotations

from typing import Any


class IssueTemplatesError(Exception):
    """Base class. Carries a stable code, an HTTP status and log context."""

    code = "ISSUE_TEMPLATES_ERROR"
    http_status = 500

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Log/JSON serialisation."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class TemplateValidationError(IssueTemplatesError):
    """Missing or malformed input, e.g. absent id or a non-collection scope."""

    code = "VALIDATION_FAILED"
    http_status = 400


class TemplateNotFoundError(IssueTemplatesError):
    """Unknown id, or an id that resolves to a soft-deleted template."""

    code = "NOT_FOUND"
    http_status = 404


class NotAuthorizedError(IssueTemplatesError):
    code = "NOT_AUTHORIZED"
    http_status = 403


class UpstreamFailureError(IssueTemplatesError):
    """The Jira REST API failed or answered with something unexpected."""

    code = "UPSTREAM_FAILURE"
    http_status = 502
