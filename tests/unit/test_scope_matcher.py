"""Unit tests for scope overlap and matching."""

from __future__ import annotations

import pytest

from engine.errors import TemplateValidationError
from engine.scope_matcher import axis_overlap, scope_matches, scope_overlap, validate_axis
from schemas.scope import AxisScope, parse_axis
from schemas.template import Template


def _tpl(tid="tmpl_a", projects=(), issue_types=(), active=True) -> Template:
    return Template(
        id=tid,
        name=tid,
        assigned_projects=list(projects),
        assigned_issue_types=list(issue_types),
        active=active,
    )


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ([], [], True),
        ([], ["P1"], True),
        (["P1"], [], True),
        (["P1", "P2"], ["P2", "P3"], True),
        (["P1"], ["P2"], False),
    ],
)
def test_axis_overlap(a, b, expected):
    assert axis_overlap(a, b) is expected
    assert axis_overlap(b, a) is expected


def test_axis_scope_wildcard_and_dedup():
    assert AxisScope.wildcard().is_wildcard
    scope = AxisScope(["P1", "P1", "P2"])
    assert scope.values == ["P1", "P2"]
    assert len(scope) == 2
    assert AxisScope(["P2", "P1"]) == scope


def test_axis_scope_covers_missing_value_only_when_wildcard():
    assert AxisScope().covers(None) is True
    assert AxisScope(["Bug"]).covers(None) is False
    assert AxisScope(["Bug"]).covers("") is False
    assert AxisScope(["Bug"]).covers("Bug") is True


def test_scope_overlap_requires_both_axes():
    a = _tpl("a", ["P1"], ["Bug"])
    assert scope_overlap(a, _tpl("b", ["P1"], ["Task"])) is False
    assert scope_overlap(a, _tpl("c", ["P1"], [])) is True
    assert scope_overlap(a, _tpl("d", [], ["Bug"])) is True
    assert scope_overlap(a, _tpl("e", ["P2"], [])) is False


def test_scope_matches_concrete_pair():
    tpl = _tpl(projects=["P1"], issue_types=["Bug"])
    assert scope_matches(tpl, "P1", "Bug") is True
    assert scope_matches(tpl, "P1", "Task") is False
    assert scope_matches(tpl, "P2", "Bug") is False
    assert scope_matches(tpl, "P1", None) is False


def test_scope_matches_wildcards():
    tpl = _tpl()
    assert scope_matches(tpl, "ANY", "Story") is True
    assert scope_matches(tpl, "ANY", None) is True
    assert scope_matches(tpl, "", "Story") is False


def test_parse_axis_rejects_non_collections():
    with pytest.raises(ValueError):
        parse_axis("P1")
    with pytest.raises(ValueError):
        parse_axis({"P1": True})
    with pytest.raises(ValueError):
        parse_axis(["P1", ""])
    with pytest.raises(ValueError):
        parse_axis(["P1", 3])


def test_parse_axis_strips_and_dedups():
    assert parse_axis([" P1 ", "P1", "P2"]) == ["P1", "P2"]
    assert parse_axis(()) == []


def test_validate_axis_raises_validation_error():
    with pytest.raises(TemplateValidationError) as exc_info:
        validate_axis("P1", "projects")
    assert exc_info.value.context["field"] == "projects"
    assert exc_info.value.code == "VALIDATION_FAILED"
