"""Unit tests for the resolver HTTP host."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api.server import create_app
from authz.policy import AllowAllPolicy
from persistence.kv_store import InMemoryKeyValueStore
from services.container import build_services


@pytest.fixture
def client():
    services = build_services(store=InMemoryKeyValueStore(), policy=AllowAllPolicy(), jira=MagicMock())
    return TestClient(create_app(services, init_storage=False))


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_lists_resolver_functions(client):
    functions = client.get("/resolvers").json()["functions"]
    assert "createTemplate" in functions
    assert "getPrefillForCreateIssue" in functions


def test_invoke_resolver(client):
    response = client.post(
        "/resolvers/createTemplate",
        json={"payload": {"name": "Bug"}, "context": {"user": {"accountId": "acc-1"}}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["name"] == "Bug"
    assert body["data"]["owner"] == "acc-1"


def test_validation_error_maps_to_400(client):
    response = client.post("/resolvers/createTemplate", json={"payload": {"name": ""}})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_FAILED"


def test_not_found_maps_to_404(client):
    response = client.post("/resolvers/getTemplate", json={"payload": {"id": "tmpl_missing"}})

    assert response.status_code == 404
    assert response.json()["error"] == {
        "code": "NOT_FOUND",
        "message": "Template not found",
        "template_id": "tmpl_missing",
    }


def test_unknown_function_maps_to_404(client):
    response = client.post("/resolvers/nope", json={})
    assert response.status_code == 404
    assert response.json()["error"]["function_key"] == "nope"
