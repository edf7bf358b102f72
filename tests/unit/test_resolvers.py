"""Unit tests for the resolver registry and the frontend function keys."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from engine.errors import NotAuthorizedError, TemplateNotFoundError, TemplateValidationError
from persistence.kv_store import InMemoryKeyValueStore
from resolvers.handler import build_resolver
from resolvers.registry import Resolver
from services.container import build_services

ADMIN_CTX = {"user": {"accountId": "admin-1"}, "authToken": "tok"}
USER_CTX = {"user": {"accountId": "user-1"}}

FRONTEND_KEYS = {
    "createTemplate", "getTemplate", "listTemplates", "ping", "updateTemplate", "deleteTemplate",
    "duplicateTemplate", "copyTemplateId", "findApplicableTemplate", "applyTemplateToIssue",
    "getTemplatesForProject", "searchTemplatesByName", "listFilterProjects", "filterTemplatesByProject",
    "assignScope", "assignTemplateToProjects", "assignTemplateToIssueTypes", "setTemplateActive",
    "getTemplateAssignments", "getPrefillForCreateIssue", "getTemplateDescription", "getGlobalConfig",
    "setGlobalConfig", "getProjectSettings", "setProjectEnabled", "getProjectConfig",
    "setProjectUseGlobalTemplates", "getAssignedTemplatesForProject",
}


@pytest.fixture
def resolver():
    store = InMemoryKeyValueStore({"issue-templates:config": {"allowAllUsers": False, "admins": ["admin-1"]}})
    project_permissions = MagicMock()
    project_permissions.is_project_admin.return_value = False
    services = build_services(
        store=store,
        project_permissions=project_permissions,
        jira=MagicMock(),
        namespace="issue-templates",
    )
    return build_resolver(services)


def _call(resolver, key, payload=None, context=ADMIN_CTX):
    result = resolver.invoke(key, payload, context)
    assert result["success"] is True
    return result["data"]


def test_every_frontend_key_is_registered(resolver):
    assert set(resolver.keys()) == FRONTEND_KEYS


def test_registry_rejects_duplicate_keys():
    r = Resolver()
    r.define("x", lambda req: 1)
    with pytest.raises(ValueError):
        r.define("x", lambda req: 2)


def test_unknown_key(resolver):
    with pytest.raises(TemplateNotFoundError):
        resolver.invoke("nope", {}, ADMIN_CTX)


def test_non_object_payload(resolver):
    with pytest.raises(TemplateValidationError):
        resolver.invoke("listTemplates", ["x"], ADMIN_CTX)


def test_ping(resolver):
    assert "ts" in _call(resolver, "ping")


def test_create_then_get_returns_camel_case(resolver):
    created = _call(resolver, "createTemplate", {"name": "Bug", "projects": ["P1"], "summary": "S"})

    assert created["id"].startswith("tmpl_")
    assert created["assignedProjects"] == ["P1"]
    assert created["owner"] == "admin-1"
    assert _call(resolver, "getTemplate", {"id": created["id"]})["name"] == "Bug"


def test_non_admin_cannot_create(resolver):
    with pytest.raises(NotAuthorizedError):
        resolver.invoke("createTemplate", {"name": "Bug"}, USER_CTX)


def test_anonymous_cannot_create(resolver):
    with pytest.raises(NotAuthorizedError):
        resolver.invoke("createTemplate", {"name": "Bug"}, {})


def test_assign_and_activate_flow(resolver):
    a = _call(resolver, "createTemplate", {"name": "A", "projects": ["P1"], "active": True})
    b = _call(resolver, "createTemplate", {"name": "B"})

    assigned = _call(resolver, "assignTemplateToProjects", {"id": b["id"], "projects": ["P1"]})
    assert assigned["assignedProjects"] == ["P1"]
    assert assigned["deactivated"] == []

    activated = _call(resolver, "setTemplateActive", {"id": b["id"], "active": True})
    assert activated["deactivated"] == [a["id"]]
    assert _call(resolver, "getTemplate", {"id": a["id"]})["active"] is False

    assignments = _call(resolver, "getTemplateAssignments", {"id": b["id"]})
    assert assignments == {"assignedProjects": ["P1"], "assignedIssueTypes": []}


def test_assign_to_projects_requires_array(resolver):
    tpl = _call(resolver, "createTemplate", {"name": "A"})
    with pytest.raises(TemplateValidationError):
        resolver.invoke("assignTemplateToProjects", {"id": tpl["id"], "projects": "P1"}, ADMIN_CTX)


def test_assign_to_issue_types_keeps_projects(resolver):
    tpl = _call(resolver, "createTemplate", {"name": "A", "projects": ["P1"]})

    data = _call(resolver, "assignTemplateToIssueTypes", {"id": tpl["id"], "issueTypes": ["Bug"]})

    assert data["assignedProjects"] == ["P1"]
    assert data["assignedIssueTypes"] == ["Bug"]


def test_generic_assign_scope_requires_an_axis(resolver):
    tpl = _call(resolver, "createTemplate", {"name": "A"})
    with pytest.raises(TemplateValidationError):
        resolver.invoke("assignScope", {"id": tpl["id"]}, ADMIN_CTX)


def test_prefill_and_description(resolver):
    tpl = _call(
        resolver,
        "createTemplate",
        {"name": "Bug", "projects": ["P1"], "issueTypes": ["Bug"], "summary": "S", "content": "D", "active": True},
    )

    prefill = _call(resolver, "getPrefillForCreateIssue", {"projectKey": "P1", "issueType": "Bug"}, USER_CTX)
    assert prefill == {
        "templateId": tpl["id"],
        "templateName": "Bug",
        "summary": "S",
        "description": "D",
        "applySummary": True,
        "applyDescription": True,
    }
    assert _call(resolver, "getPrefillForCreateIssue", {"projectKey": "P1", "issueType": "Task"}) is None

    description = _call(resolver, "getTemplateDescription", {"templateId": tpl["id"]})
    assert description["description"] == "D"


def test_find_applicable_template_requires_project(resolver):
    with pytest.raises(TemplateValidationError):
        resolver.invoke("findApplicableTemplate", {}, ADMIN_CTX)
    assert _call(resolver, "findApplicableTemplate", {"projectKey": "P1"}) is None


def test_update_and_delete(resolver):
    tpl = _call(resolver, "createTemplate", {"name": "A"})

    updated = _call(resolver, "updateTemplate", {"id": tpl["id"], "name": "Renamed"})
    assert updated["name"] == "Renamed"
    assert updated["deactivated"] == []

    deleted = _call(resolver, "deleteTemplate", {"id": tpl["id"]})
    assert deleted == {"id": tpl["id"], "deleted": True, "hard": False}
    assert _call(resolver, "listTemplates")["total"] == 0


def test_duplicate_and_copy_id(resolver):
    tpl = _call(resolver, "createTemplate", {"name": "A"})

    clone = _call(resolver, "duplicateTemplate", {"id": tpl["id"]})
    assert clone["name"] == "A (copy)"
    assert _call(resolver, "copyTemplateId", {"id": tpl["id"]}) == {"id": tpl["id"]}


def test_global_page_queries(resolver):
    _call(resolver, "createTemplate", {"name": "Bug everywhere"})
    _call(resolver, "createTemplate", {"name": "Bug P1", "projects": ["P1"]})

    assert [h["name"] for h in _call(resolver, "searchTemplatesByName", {"q": "bug"})] == [
        "Bug P1",
        "Bug everywhere",
    ]
    counts = {c["projectKey"]: c["count"] for c in _call(resolver, "listFilterProjects")}
    assert counts == {"__ALL__": 1, "P1": 1}
    page = _call(resolver, "filterTemplatesByProject", {"projectKey": "__ALL__"})
    assert [t["name"] for t in page["templates"]] == ["Bug everywhere"]
    assert len(_call(resolver, "getTemplatesForProject", {"projectKey": "P1"})) == 2
    summaries = _call(resolver, "getAssignedTemplatesForProject", {"projectKey": "P1"})
    assert {s["name"] for s in summaries} == {"Bug everywhere", "Bug P1"}


def test_admin_config_functions(resolver):
    config = _call(resolver, "setGlobalConfig", {"allowAllUsers": True})
    assert config == {"allowAllUsers": True, "admins": ["admin-1"]}
    assert _call(resolver, "getGlobalConfig") == config

    # allowAllUsers now lets ordinary users create
    assert _call(resolver, "createTemplate", {"name": "mine"}, USER_CTX)["owner"] == "user-1"

    assert _call(resolver, "setProjectEnabled", {"projectKey": "P1", "enabled": False}) == {"enabled": False}
    assert _call(resolver, "getProjectSettings") == {"P1": {"enabled": False}}
    assert _call(resolver, "getProjectConfig", {"projectKey": "P1"}) == {
        "projectKey": "P1",
        "useGlobalTemplates": False,
    }


def test_project_toggle_denied_without_project_admin(resolver):
    with pytest.raises(NotAuthorizedError):
        resolver.invoke("setProjectUseGlobalTemplates", {"projectKey": "P1", "enabled": False}, USER_CTX)


def test_malformed_user_context(resolver):
    with pytest.raises(TemplateValidationError):
        resolver.invoke("createTemplate", {"name": "A"}, {"user": {"accountId": "a", "isAdmin": "maybe"}})
