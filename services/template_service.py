from __future__ import annotations

import secrets
import string
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from app_logging.activity_logger import ActivityLogger
from authz.policy import Action, AuthorizationPolicy
from config.settings import settings
from engine.assignment import AssignmentEngine
from engine.errors import NotAuthorizedError, TemplateNotFoundError, TemplateValidationError
from engine.scope_matcher import validate_axis
from persistence.repository import TemplateRepository
from schemas.principal import RequestUser
from schemas.results import (
    AssignmentResult,
    Assignments,
    DeleteResult,
    PageRequest,
    ProjectCount,
    ProjectTemplateSummary,
    TemplatePage,
    TemplateSearchHit,
)
from schemas.template import Template, TemplateCreate, TemplateUpdate, utc_now
from services.payloads import parse_payload

logger = ActivityLogger("template_service")

# Filter key for templates with no project assignment
ALL_PROJECTS_BUCKET = "__ALL__"

_BASE36 = string.digits + string.ascii_lowercase


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_template_id(now: Optional[datetime] = None) -> str:
    """Readable, time-ordered id: tmpl_<epoch ms, base36>_<7 random base36 chars>."""
    now = now or utc_now()
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"tmpl_{_base36(int(now.timestamp() * 1000))}_{suffix}"


def _account_id(principal: Optional[RequestUser]) -> Optional[str]:
    return principal.account_id if principal else None


class TemplateService:
    """Template CRUD and queries. Every mutation authorizes before it writes."""

    def __init__(
        self,
        templates: TemplateRepository,
        engine: AssignmentEngine,
        policy: AuthorizationPolicy,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.templates = templates
        self.engine = engine
        self.policy = policy
        self.clock = clock

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _authorize(
        self,
        principal: Optional[RequestUser],
        action: Action,
        template: Optional[Template] = None,
        message: str = "Not authorized",
        project_keys: Iterable[str] = (),
    ) -> None:
        if not self.policy.can(principal, action, template=template, project_keys=tuple(project_keys)):
            raise NotAuthorizedError(message, template_id=template.id if template else None)

    @staticmethod
    def _page(items: list[Template], page: Any, limit: Any) -> TemplatePage:
        request = parse_payload(
            PageRequest,
            {"page": 1 if page is None else page, "limit": settings.default_page_size if limit is None else limit},
        )
        window = items[request.start : request.start + request.limit]
        return TemplatePage(total=len(items), page=request.page, limit=request.limit, templates=window)

    # ── CRUD ──────────────────────────────────────────────────────────────────

    def create_template(self, payload: Any, principal: Optional[RequestUser] = None) -> Template:
        """
        Create a template at the head of the index.

        Created inactive unless the payload says `active: true`, in which case
        overlapping active templates are deactivated straight away.
        """
        data = parse_payload(TemplateCreate, payload)
        self._authorize(principal, Action.CREATE, message="Not authorized to create templates")

        now = self.clock()
        tpl = Template(
            id=generate_template_id(now),
            name=data.name,
            summary=data.summary,
            content=data.content,
            assigned_projects=data.assigned_projects or [],
            assigned_issue_types=data.assigned_issue_types or [],
            active=data.active,
            owner=_account_id(principal),
            meta=data.meta,
            created_at=now,
            updated_at=now,
        )
        self.templates.add(tpl)
        deactivated = self.engine.enforce_uniqueness(tpl) if tpl.active else []

        logger.info(
            "template_created",
            template_id=tpl.id,
            account_id=tpl.owner,
            active=tpl.active,
            deactivated=deactivated,
        )
        return tpl

    def get_template(self, template_id: Optional[str], include_deleted: bool = False) -> Template:
        if not template_id:
            raise TemplateValidationError("Template `id` is required")
        tpl = self.templates.get(template_id)
        if tpl is None or (tpl.deleted and not include_deleted):
            raise TemplateNotFoundError("Template not found", template_id=template_id)
        return tpl

    def list_templates(self, page: Any = 1, limit: Any = None) -> TemplatePage:
        return self._page(list(self.templates.iter_templates()), page, limit)

    def update_template(self, payload: Any, principal: Optional[RequestUser] = None) -> AssignmentResult:
        data = parse_payload(TemplateUpdate, payload)
        existing = self.templates.get_live(data.id)
        self._authorize(principal, Action.UPDATE, existing, "Not authorized to update template")

        provided = data.provided()
        updated = existing.model_copy(deep=True)
        for field in ("name", "summary", "content", "meta"):
            value = getattr(data, field)
            if field in provided and value is not None:
                setattr(updated, field, value)

        scope_changed = False
        if "assigned_projects" in provided:
            updated.assigned_projects = data.assigned_projects or []
            scope_changed = scope_changed or updated.project_scope != existing.project_scope
        if "assigned_issue_types" in provided:
            updated.assigned_issue_types = data.assigned_issue_types or []
            scope_changed = scope_changed or updated.issue_type_scope != existing.issue_type_scope

        activated = False
        if "active" in provided and data.active is not None:
            updated.active = data.active
            activated = data.active and not existing.active

        updated.touch(self.clock())
        self.templates.save(updated)

        deactivated: list[str] = []
        if updated.active and (activated or scope_changed):
            deactivated = self.engine.enforce_uniqueness(updated)

        logger.info(
            "template_updated",
            template_id=updated.id,
            account_id=_account_id(principal),
            fields=sorted(provided),
            deactivated=deactivated,
        )
        return AssignmentResult(template=updated, deactivated=deactivated)

    def delete_template(
        self,
        template_id: Optional[str],
        hard: bool = False,
        principal: Optional[RequestUser] = None,
    ) -> DeleteResult:
        """Soft delete (hide, force inactive) or hard delete (drop record and index entry)."""
        if not template_id:
            raise TemplateValidationError("Template id is required")
        existing = self.templates.get(template_id)
        if existing is None:
            raise TemplateNotFoundError("Template not found", template_id=template_id)
        self._authorize(principal, Action.DELETE, existing, "Not authorized to delete template")

        if hard:
            self.templates.remove(template_id)
        else:
            existing.deleted = True
            existing.active = False
            existing.touch(self.clock())
            self.templates.save(existing)

        logger.info("template_deleted", template_id=template_id, account_id=_account_id(principal), hard=hard)
        return DeleteResult(id=template_id, deleted=True, hard=hard)

    def duplicate_template(
        self,
        template_id: Optional[str],
        new_name: Optional[str] = None,
        principal: Optional[RequestUser] = None,
    ) -> Template:
        """Clone a template under a new id. The clone is always inactive."""
        source = self.templates.get_live(template_id)
        self._authorize(principal, Action.DUPLICATE, source, "Not authorized to duplicate template")

        now = self.clock()
        name = new_name.strip() if isinstance(new_name, str) and new_name.strip() else f"{source.name} (copy)"
        clone = source.model_copy(
            deep=True,
            update={
                "id": generate_template_id(now),
                "name": name,
                "owner": _account_id(principal) or source.owner,
                "active": False,
                "deleted": False,
                "created_at": now,
                "updated_at": now,
            },
        )
        self.templates.add(clone)

        logger.info("template_duplicated", template_id=clone.id, source_id=source.id)
        return clone

    def copy_template_id(self, template_id: Optional[str]) -> dict[str, str]:
        return {"id": self.templates.get_live(template_id).id}

    # ── Assignment ────────────────────────────────────────────────────────────

    def assign_scope(
        self,
        template_id: Optional[str],
        projects: Optional[Any] = None,
        issue_types: Optional[Any] = None,
        principal: Optional[RequestUser] = None,
    ) -> AssignmentResult:
        new_projects = validate_axis(projects, "projects") if projects is not None else None
        new_issue_types = validate_axis(issue_types, "issueTypes") if issue_types is not None else None
        action = Action.ASSIGN_PROJECTS if new_projects is not None else Action.ASSIGN_ISSUE_TYPES

        return self.engine.assign_scope(
            template_id,
            new_projects,
            new_issue_types,
            authorize=lambda tpl: self.policy.can(
                principal, action, template=tpl, project_keys=tuple(new_projects or ())
            ),
        )

    def set_active(
        self,
        template_id: Optional[str],
        active: Any,
        principal: Optional[RequestUser] = None,
    ) -> AssignmentResult:
        return self.engine.set_active(
            template_id,
            bool(active),
            authorize=lambda tpl: self.policy.can(principal, Action.ACTIVATE, template=tpl),
        )

    def get_assignments(self, template_id: Optional[str]) -> Assignments:
        if not template_id:
            raise TemplateValidationError("Template id is required")
        return self.engine.get_assignments(template_id)

    # ── Queries ───────────────────────────────────────────────────────────────

    def search_by_name(self, query: Optional[str], limit: Any = None) -> list[TemplateSearchHit]:
        term = str(query or "").strip().lower()
        if not term:
            return []
        max_hits = parse_payload(
            PageRequest, {"limit": settings.search_default_limit if limit is None else limit}
        ).limit

        hits: list[TemplateSearchHit] = []
        for tpl in self.templates.iter_templates():
            if term in tpl.name.lower():
                hits.append(TemplateSearchHit(id=tpl.id, name=tpl.name, summary=tpl.summary))
                if len(hits) >= max_hits:
                    break
        return hits

    def filter_by_project(self, project_key: Optional[str], page: Any = 1, limit: Any = None) -> TemplatePage:
        """`__ALL__` selects unassigned templates; a key selects templates covering it."""
        if not project_key:
            raise TemplateValidationError("projectKey is required")
        if project_key == ALL_PROJECTS_BUCKET:
            matches = [t for t in self.templates.iter_templates() if t.project_scope.is_wildcard]
        else:
            matches = [t for t in self.templates.iter_templates() if t.project_scope.covers(project_key)]
        return self._page(matches, page, limit)

    def list_filter_projects(self) -> list[ProjectCount]:
        counts: dict[str, int] = {}
        for tpl in self.templates.iter_templates():
            keys = tpl.assigned_projects or [ALL_PROJECTS_BUCKET]
            for key in keys:
                counts[key] = counts.get(key, 0) + 1
        return [ProjectCount(project_key=key, count=count) for key, count in counts.items()]

    def templates_for_project(self, project_key: Optional[str]) -> list[Template]:
        if not project_key:
            raise TemplateValidationError("projectKey is required")
        return [t for t in self.templates.iter_templates() if t.project_scope.covers(project_key)]

    def assigned_templates_for_project(self, project_key: Optional[str]) -> list[ProjectTemplateSummary]:
        return [
            ProjectTemplateSummary(id=t.id, name=t.name, assigned_issue_types=list(t.assigned_issue_types))
            for t in self.templates_for_project(project_key)
        ]
