from __future__ import annotations

from resolvers.registry import Resolver, ResolverRequest
from services.container import Services


def register_project_routes(resolver: Resolver, services: Services) -> None:
    """Project settings page."""

    @resolver.define("getProjectConfig")
    def get_project_config(req: ResolverRequest):
        return services.admin.get_project_config(req.payload.get("projectKey"))

    @resolver.define("setProjectUseGlobalTemplates")
    def set_project_use_global_templates(req: ResolverRequest):
        return services.admin.set_project_use_global_templates(
            req.payload.get("projectKey"),
            req.payload.get("enabled", False),
            req.principal,
        )

    @resolver.define("getAssignedTemplatesForProject")
    def get_assigned_templates_for_project(req: ResolverRequest):
        return services.templates.assigned_templates_for_project(req.payload.get("projectKey"))
