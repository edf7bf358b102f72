"""Unit tests for Pydantic schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from schemas.principal import RequestUser
from schemas.results import PageRequest
from schemas.template import Template, TemplateCreate, TemplateUpdate


def test_template_minimal():
    t = Template(id="tmpl_1", name="Bug")
    assert t.summary == ""
    assert t.content == ""
    assert t.assigned_projects == []
    assert t.active is False
    assert t.deleted is False
    assert t.project_scope.is_wildcard


def test_template_json_is_camel_case():
    data = Template(id="tmpl_1", name="Bug", assigned_projects=["P1"]).to_json_dict()
    assert data["assignedProjects"] == ["P1"]
    assert data["assignedIssueTypes"] == []
    assert isinstance(data["createdAt"], str)
    assert Template.model_validate(data).assigned_projects == ["P1"]


def test_template_create_null_text_becomes_empty():
    c = TemplateCreate(name="T", summary=None, content=None)
    assert c.summary == ""
    assert c.content == ""
    assert c.assigned_projects is None


def test_template_create_rejects_non_list_scope():
    with pytest.raises(ValidationError):
        TemplateCreate.model_validate({"name": "T", "issueTypes": "Bug"})


def test_template_update_tracks_provided_fields():
    u = TemplateUpdate.model_validate({"id": "tmpl_1", "summary": "x", "issueTypes": ["Bug"]})
    assert u.provided() == {"summary", "assigned_issue_types"}


def test_template_update_requires_id():
    with pytest.raises(ValidationError):
        TemplateUpdate.model_validate({"id": "  "})


def test_request_user_from_context():
    user = RequestUser.from_context({"user": {"accountId": "acc-1", "isAdmin": True}, "authToken": "tok"})
    assert user.account_id == "acc-1"
    assert user.is_admin is True
    assert user.auth_token == "tok"
    assert "authToken" not in user.to_json_dict()
    assert "tok" not in repr(user)


def test_request_user_from_unusable_context():
    assert RequestUser.from_context(None) is None
    assert RequestUser.from_context({}) is None
    assert RequestUser.from_context({"user": {"accountId": ""}}) is None


def test_page_request_bounds():
    assert PageRequest(page=3, limit=10).start == 20
    with pytest.raises(ValidationError):
        PageRequest(page=0)
