from __future__ import annotations

from resolvers.registry import Resolver, ResolverRequest
from services.container import Services


def register_admin_routes(resolver: Resolver, services: Services) -> None:
    admin = services.admin

    @resolver.define("getGlobalConfig")
    def get_global_config(req: ResolverRequest):
        return admin.get_global_config()

    @resolver.define("setGlobalConfig")
    def set_global_config(req: ResolverRequest):
        return admin.set_global_config(
            req.payload.get("allowAllUsers"),
            req.payload.get("admins"),
            req.principal,
        )

    @resolver.define("getProjectSettings")
    def get_project_settings(req: ResolverRequest):
        return admin.get_project_settings()

    @resolver.define("setProjectEnabled")
    def set_project_enabled(req: ResolverRequest):
        return admin.set_project_enabled(
            req.payload.get("projectKey"),
            req.payload.get("enabled", False),
            req.principal,
        )
