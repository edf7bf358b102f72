from __future__ import annotations

from typing import Optional

from resolvers.admin_routes import register_admin_routes
from resolvers.apply_routes import register_apply_routes
from resolvers.assign_routes import register_assign_routes
from resolvers.project_routes import register_project_routes
from resolvers.registry import Resolver
from resolvers.template_routes import register_template_routes
from services.container import Services, build_services


def build_resolver(services: Optional[Services] = None) -> Resolver:
    """Single resolver carrying every frontend function key."""
    services = services or build_services()
    resolver = Resolver()
    register_template_routes(resolver, services)
    register_assign_routes(resolver, services)
    register_apply_routes(resolver, services)
    register_admin_routes(resolver, services)
    register_project_routes(resolver, services)
    return resolver
