"""Overlap and match decisions over template scopes.

A scope is the pair (projects, issue types). An empty axis is the wildcard.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Union

from engine.errors import TemplateValidationError
from schemas.scope import AxisScope, parse_axis
from schemas.template import Template

AxisLike = Union[AxisScope, Iterable[str]]


def _as_axis(values: AxisLike) -> AxisScope:
    return values if isinstance(values, AxisScope) else AxisScope(values)


def axis_overlap(a: AxisLike, b: AxisLike) -> bool:
    """True if either axis is a wildcard or they share a value. Symmetric."""
    return _as_axis(a).overlaps(_as_axis(b))


def scope_overlap(template: Template, other: Template) -> bool:
    """Full-pair overlap: both axes must overlap."""
    return template.project_scope.overlaps(other.project_scope) and template.issue_type_scope.overlaps(
        other.issue_type_scope
    )


def scope_matches(template: Template, project_key: Optional[str], issue_type: Optional[str] = None) -> bool:
    """Does the template's scope cover the concrete (project, issue type) pair."""
    if not project_key:
        return False
    return template.project_scope.covers(project_key) and template.issue_type_scope.covers(issue_type)


def validate_axis(value: Any, field: str) -> list[str]:
    try:
        return parse_axis(value)
    except ValueError as exc:
        raise TemplateValidationError(f"`{field}` {exc}", field=field) from exc
