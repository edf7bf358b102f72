from __future__ import annotations

from resolvers.registry import Resolver, ResolverRequest
from schemas.template import utc_now
from services.container import Services


def register_template_routes(resolver: Resolver, services: Services) -> None:
    """Template CRUD, search and the global-page listing/filter endpoints."""
    templates = services.templates

    @resolver.define("createTemplate")
    def create_template(req: ResolverRequest):
        # payload: { name, summary?, content?, projects?|assignedProjects?, issueTypes?, active?, meta? }
        return templates.create_template(req.payload, req.principal)

    @resolver.define("getTemplate")
    def get_template(req: ResolverRequest):
        return templates.get_template(req.payload.get("id"), bool(req.payload.get("includeDeleted")))

    @resolver.define("listTemplates")
    def list_templates(req: ResolverRequest):
        return templates.list_templates(req.payload.get("page", 1), req.payload.get("limit"))

    @resolver.define("updateTemplate")
    def update_template(req: ResolverRequest):
        result = templates.update_template(req.payload, req.principal)
        data = result.template.to_json_dict()
        data["deactivated"] = result.deactivated
        return data

    @resolver.define("deleteTemplate")
    def delete_template(req: ResolverRequest):
        return templates.delete_template(req.payload.get("id"), bool(req.payload.get("hard", False)), req.principal)

    @resolver.define("duplicateTemplate")
    def duplicate_template(req: ResolverRequest):
        return templates.duplicate_template(req.payload.get("id"), req.payload.get("newName"), req.principal)

    @resolver.define("copyTemplateId")
    def copy_template_id(req: ResolverRequest):
        return templates.copy_template_id(req.payload.get("id"))

    @resolver.define("searchTemplatesByName")
    def search_templates_by_name(req: ResolverRequest):
        return templates.search_by_name(req.payload.get("q", ""), req.payload.get("limit"))

    @resolver.define("listFilterProjects")
    def list_filter_projects(req: ResolverRequest):
        return templates.list_filter_projects()

    @resolver.define("filterTemplatesByProject")
    def filter_templates_by_project(req: ResolverRequest):
        return templates.filter_by_project(
            req.payload.get("projectKey"),
            req.payload.get("page", 1),
            req.payload.get("limit"),
        )

    @resolver.define("getTemplatesForProject")
    def get_templates_for_project(req: ResolverRequest):
        return templates.templates_for_project(req.payload.get("projectKey"))

    @resolver.define("ping")
    def ping(req: ResolverRequest):
        return {"ts": utc_now().isoformat()}
