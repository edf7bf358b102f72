"""
Template assignment and the one-active-template-per-scope rule.

For every concrete (project, issue type) pair at most one active, non-deleted
template may cover it. `AssignmentEngine.enforce_uniqueness` is the only code
that restores this after a change. Every path that activates a template or
changes the scope of an active one must end by calling it.

Consistency: the store has no multi-key transactions, so enforcement is a
read-scan-then-write sequence and is best-effort, not linearizable. Two
requests activating overlapping templates at the same moment can each see
the other as active and deactivate it, leaving zero (or the "wrong") template
active. Re-running enforcement converges; it never creates a second winner.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional

from app_logging.activity_logger import ActivityLogger
from engine.errors import NotAuthorizedError, TemplateValidationError
from engine.scope_matcher import scope_overlap, validate_axis
from persistence.repository import TemplateRepository
from schemas.results import AssignmentResult, Assignments
from schemas.template import Template, utc_now

logger = ActivityLogger("assignment_engine")

Authorizer = Callable[[Template], bool]


class AssignmentEngine:
    def __init__(
        self,
        templates: TemplateRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.templates = templates
        self.clock = clock

    # ── Guards ────────────────────────────────────────────────────────────────

    @staticmethod
    def _check_authorized(template: Template, authorize: Optional[Authorizer], action: str) -> None:
        if authorize is not None and not authorize(template):
            raise NotAuthorizedError(f"Not authorized to {action}", template_id=template.id)

    # ── Operations ────────────────────────────────────────────────────────────

    def assign_scope(
        self,
        template_id: Optional[str],
        projects: Optional[Any] = None,
        issue_types: Optional[Any] = None,
        *,
        authorize: Optional[Authorizer] = None,
    ) -> AssignmentResult:
        """
        Replace the supplied axes of a template's scope (None leaves an axis alone).

        If the template is active, overlapping active templates are
        deactivated and their ids returned in index order.
        """
        if not template_id:
            raise TemplateValidationError("Template id is required")
        if projects is None and issue_types is None:
            raise TemplateValidationError(
                "At least one of `projects` or `issueTypes` is required",
                template_id=template_id,
            )
        new_projects = validate_axis(projects, "projects") if projects is not None else None
        new_issue_types = validate_axis(issue_types, "issueTypes") if issue_types is not None else None

        tpl = self.templates.get_live(template_id)
        self._check_authorized(tpl, authorize, "assign template")

        if new_projects is not None:
            tpl.assigned_projects = new_projects
        if new_issue_types is not None:
            tpl.assigned_issue_types = new_issue_types
        tpl.touch(self.clock())
        self.templates.save(tpl)

        logger.info(
            "template_scope_assigned",
            template_id=tpl.id,
            assigned_projects=tpl.assigned_projects,
            assigned_issue_types=tpl.assigned_issue_types,
            active=tpl.active,
        )

        deactivated = self.enforce_uniqueness(tpl) if tpl.active else []
        return AssignmentResult(template=tpl, deactivated=deactivated)

    def set_active(
        self,
        template_id: Optional[str],
        active: bool,
        *,
        authorize: Optional[Authorizer] = None,
    ) -> AssignmentResult:
        if not template_id:
            raise TemplateValidationError("Template id is required")

        tpl = self.templates.get_live(template_id)
        self._check_authorized(tpl, authorize, "change template status")

        tpl.active = bool(active)
        tpl.touch(self.clock())
        self.templates.save(tpl)

        logger.info("template_active_changed", template_id=tpl.id, active=tpl.active)

        deactivated = self.enforce_uniqueness(tpl) if tpl.active else []
        return AssignmentResult(template=tpl, deactivated=deactivated)

    def enforce_uniqueness(self, template: Template) -> list[str]:
        """
        Deactivate every other active, non-deleted template whose scope
        overlaps `template` on both axes.

        Returns the deactivated ids in index order. A second run with no
        intervening change returns [].
        """
        if not template.active or template.deleted:
            return []

        deactivated: list[str] = []
        for other_id in self.templates.read_index():
            if other_id == template.id:
                continue
            other = self.templates.get(other_id)
            if other is None or other.deleted or not other.active:
                continue
            if not scope_overlap(template, other):
                continue

            other.active = False
            other.touch(self.clock())
            self.templates.save(other)
            deactivated.append(other_id)

        if deactivated:
            logger.info(
                "uniqueness_enforced",
                template_id=template.id,
                deactivated=deactivated,
            )
        return deactivated

    def get_assignments(self, template_id: Optional[str]) -> Assignments:
        tpl = self.templates.get_live(template_id)
        return Assignments(
            assigned_projects=list(tpl.assigned_projects),
            assigned_issue_types=list(tpl.assigned_issue_types),
        )
