from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from authz.policy import AuthorizationPolicy, DefaultPolicy
from engine.assignment import AssignmentEngine
from engine.prefill import PrefillResolver
from jira_api.client import JiraClient
from jira_api.permissions import JiraProjectPermissions, ProjectPermissionChecker
from persistence.kv_store import KeyValueStore, SqlKeyValueStore
from persistence.repository import ConfigRepository, TemplateRepository
from services.admin_service import AdminService
from services.apply_service import ApplyService
from services.template_service import TemplateService


@dataclass
class Services:
    templates: TemplateService
    prefill: PrefillResolver
    admin: AdminService
    apply: ApplyService
    engine: AssignmentEngine
    policy: AuthorizationPolicy


def build_services(
    store: Optional[KeyValueStore] = None,
    policy: Optional[AuthorizationPolicy] = None,
    project_permissions: Optional[ProjectPermissionChecker] = None,
    jira: Optional[JiraClient] = None,
    namespace: Optional[str] = None,
) -> Services:
    """
    Wire the object graph. Defaults: SQLite-backed store, DefaultPolicy with
    Jira project-admin lookups, live Jira client.
    """
    store = store if store is not None else SqlKeyValueStore()
    jira = jira or JiraClient()

    template_repo = TemplateRepository(store, namespace)
    config_repo = ConfigRepository(store, namespace)

    if policy is None:
        policy = DefaultPolicy(config_repo, project_permissions or JiraProjectPermissions(jira))

    engine = AssignmentEngine(template_repo)
    return Services(
        templates=TemplateService(template_repo, engine, policy),
        prefill=PrefillResolver(template_repo),
        admin=AdminService(config_repo, policy),
        apply=ApplyService(template_repo, policy, jira),
        engine=engine,
        policy=policy,
    )
