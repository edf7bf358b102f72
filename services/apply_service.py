from __future__ import annotations

from typing import Any, Optional

from app_logging.activity_logger import ActivityLogger
from authz.policy import Action, AuthorizationPolicy
from config.settings import settings
from engine.errors import NotAuthorizedError, TemplateNotFoundError, TemplateValidationError
from jira_api.client import JiraClient
from persistence.repository import TemplateRepository
from schemas.principal import RequestUser

logger = ActivityLogger("apply_service")


class ApplyService:
    """Writes a template's summary/description onto an existing Jira issue."""

    def __init__(
        self,
        templates: TemplateRepository,
        policy: AuthorizationPolicy,
        jira: Optional[JiraClient] = None,
    ) -> None:
        self.templates = templates
        self.policy = policy
        self.jira = jira or JiraClient()

    def apply_template_to_issue(
        self,
        template_id: Optional[str],
        issue_key: Optional[str],
        principal: Optional[RequestUser] = None,
    ) -> dict[str, Any]:
        if not template_id or not issue_key:
            raise TemplateValidationError("templateId and issueKey are required")
        tpl = self.templates.get(template_id)
        if tpl is None or tpl.deleted or not tpl.active:
            raise TemplateNotFoundError("Template not available", template_id=template_id)
        if not self.policy.can(principal, Action.APPLY, template=tpl):
            raise NotAuthorizedError("Not authorized to apply template", template_id=template_id)

        fields = {"summary": tpl.summary or tpl.name, "description": tpl.content or ""}

        if settings.dry_run:
            logger.info("template_apply_dry_run", template_id=tpl.id, issue_key=issue_key)
            return {"status": "dry_run", "issueKey": issue_key, "fields": fields}

        status = self.jira.update_issue_fields(
            issue_key,
            fields,
            user_token=principal.auth_token if principal else None,
        )
        logger.info(
            "template_applied",
            template_id=tpl.id,
            issue_key=issue_key,
            account_id=principal.account_id if principal else None,
        )
        return {"status": status, "issueKey": issue_key}
