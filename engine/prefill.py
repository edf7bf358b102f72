"""
Prefill for the Create Issue dialog.

The frontend asks when the dialog opens and again whenever the user switches
issue type. The answer is a suggestion: template text is only flagged for
application where the user has not typed anything yet.
"""

from __future__ import annotations

from typing import Optional

from engine.errors import TemplateNotFoundError, TemplateValidationError
from engine.scope_matcher import scope_matches
from persistence.repository import TemplateRepository
from schemas.results import Prefill
from schemas.template import Template


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def compute_prefill(
    template: Template,
    current_summary: Optional[str] = "",
    current_description: Optional[str] = "",
) -> Prefill:
    summary = None if _is_blank(template.summary) else template.summary
    description = None if _is_blank(template.content) else template.content
    return Prefill(
        template_id=template.id,
        template_name=template.name,
        summary=summary,
        description=description,
        apply_summary=summary is not None and _is_blank(current_summary),
        apply_description=description is not None and _is_blank(current_description),
    )


class PrefillResolver:
    def __init__(self, templates: TemplateRepository) -> None:
        self.templates = templates

    def find_match(self, project_key: Optional[str], issue_type: Optional[str] = None) -> Optional[Template]:
        """First active, non-deleted template in index order whose scope covers the pair."""
        if not project_key:
            return None
        for tpl in self.templates.iter_templates():
            if tpl.active and scope_matches(tpl, project_key, issue_type):
                return tpl
        return None

    def prefill_for_create_issue(
        self,
        project_key: Optional[str],
        issue_type: Optional[str] = None,
        current_summary: Optional[str] = "",
        current_description: Optional[str] = "",
    ) -> Optional[Prefill]:
        tpl = self.find_match(project_key, issue_type)
        if tpl is None:
            return None
        return compute_prefill(tpl, current_summary, current_description)

    def template_description(self, template_id: Optional[str]) -> dict[str, str]:
        if not template_id:
            raise TemplateValidationError("template id is required")
        tpl = self.templates.get(template_id)
        if tpl is None or tpl.deleted or not tpl.active:
            raise TemplateNotFoundError("template not found", template_id=template_id)
        return {"templateId": tpl.id, "description": tpl.content or "", "summary": tpl.summary or ""}
