from __future__ import annotations

from typing import Any

from engine.errors import TemplateValidationError
from resolvers.registry import Resolver, ResolverRequest
from services.container import Services


def _optional_axis(payload: dict[str, Any], key: str) -> Any:
    """Absent key leaves the axis untouched; an explicit null clears it."""
    if key not in payload:
        return None
    value = payload[key]
    return [] if value is None else value


def _assignment_data(result) -> dict[str, Any]:
    data = result.template.to_json_dict()
    data["deactivated"] = result.deactivated
    return data


def register_assign_routes(resolver: Resolver, services: Services) -> None:
    templates = services.templates

    @resolver.define("assignScope")
    def assign_scope(req: ResolverRequest):
        # payload: { id, projects?, issueTypes? }
        result = templates.assign_scope(
            req.payload.get("id"),
            req.payload.get("projects"),
            req.payload.get("issueTypes"),
            req.principal,
        )
        return _assignment_data(result)

    @resolver.define("assignTemplateToProjects")
    def assign_template_to_projects(req: ResolverRequest):
        if not isinstance(req.payload.get("projects"), list):
            raise TemplateValidationError("projects must be an array")
        result = templates.assign_scope(
            req.payload.get("id"),
            req.payload["projects"],
            _optional_axis(req.payload, "issueTypes"),
            req.principal,
        )
        return _assignment_data(result)

    @resolver.define("assignTemplateToIssueTypes")
    def assign_template_to_issue_types(req: ResolverRequest):
        if not isinstance(req.payload.get("issueTypes"), list):
            raise TemplateValidationError("issueTypes must be an array")
        result = templates.assign_scope(
            req.payload.get("id"),
            _optional_axis(req.payload, "projects"),
            req.payload["issueTypes"],
            req.principal,
        )
        return _assignment_data(result)

    @resolver.define("setTemplateActive")
    def set_template_active(req: ResolverRequest):
        result = templates.set_active(req.payload.get("id"), req.payload.get("active", False), req.principal)
        return _assignment_data(result)

    @resolver.define("getTemplateAssignments")
    def get_template_assignments(req: ResolverRequest):
        return templates.get_assignments(req.payload.get("id"))
