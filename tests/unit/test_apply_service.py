"""Unit tests for applying a template to an existing issue (Jira mocked)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from authz.policy import AllowAllPolicy
from config.settings import settings
from engine.errors import NotAuthorizedError, TemplateNotFoundError, TemplateValidationError
from schemas.principal import RequestUser
from schemas.template import Template
from services.apply_service import ApplyService

USER = RequestUser(account_id="acc-1", auth_token="tok")


class DenyPolicy:
    def can(self, principal, action, template=None, project_keys=()):
        return False


@pytest.fixture
def jira():
    client = MagicMock()
    client.update_issue_fields.return_value = 204
    return client


@pytest.fixture
def seeded(template_repo):
    template_repo.add(Template(id="on", name="Name", summary="", content="Body", active=True))
    template_repo.add(Template(id="off", name="Off", active=False))
    return template_repo


def test_apply_updates_issue_as_user(seeded, jira):
    result = ApplyService(seeded, AllowAllPolicy(), jira).apply_template_to_issue("on", "PROJ-1", USER)

    assert result == {"status": 204, "issueKey": "PROJ-1"}
    jira.update_issue_fields.assert_called_once_with(
        "PROJ-1",
        {"summary": "Name", "description": "Body"},
        user_token="tok",
    )


def test_apply_dry_run_skips_jira(seeded, jira, monkeypatch):
    monkeypatch.setattr(settings, "dry_run", True)

    result = ApplyService(seeded, AllowAllPolicy(), jira).apply_template_to_issue("on", "PROJ-1", USER)

    assert result["status"] == "dry_run"
    assert result["fields"]["description"] == "Body"
    jira.update_issue_fields.assert_not_called()


def test_apply_requires_ids(seeded, jira):
    with pytest.raises(TemplateValidationError):
        ApplyService(seeded, AllowAllPolicy(), jira).apply_template_to_issue("on", "", USER)


def test_apply_inactive_template_not_found(seeded, jira):
    with pytest.raises(TemplateNotFoundError):
        ApplyService(seeded, AllowAllPolicy(), jira).apply_template_to_issue("off", "PROJ-1", USER)


def test_apply_denied(seeded, jira):
    with pytest.raises(NotAuthorizedError):
        ApplyService(seeded, DenyPolicy(), jira).apply_template_to_issue("on", "PROJ-1", USER)
    jira.update_issue_fields.assert_not_called()
