from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from schemas.scope import AxisScope, parse_axis


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base for everything that crosses the resolver boundary or the store.

    Python attributes are snake_case; JSON keys are camelCase.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Template(CamelModel):
    id: str = Field(..., description="Opaque stable id, e.g. tmpl_m1x2y3z4_k9a8b7c")
    name: str
    summary: str = ""
    content: str = Field(default="", description="Issue description preset")
    assigned_projects: list[str] = Field(
        default_factory=list,
        description="Project keys; empty means every project",
    )
    assigned_issue_types: list[str] = Field(
        default_factory=list,
        description="Issue type names; empty means every issue type",
    )
    active: bool = False
    deleted: bool = False
    owner: Optional[str] = Field(default=None, description="accountId of the creator")
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def project_scope(self) -> AxisScope:
        return AxisScope(self.assigned_projects)

    @property
    def issue_type_scope(self) -> AxisScope:
        return AxisScope(self.assigned_issue_types)

    def touch(self, now: datetime) -> None:
        self.updated_at = now


def _axis_or_none(value: Any) -> Optional[list[str]]:
    if value is None:
        return None
    return parse_axis(value)


class TemplateCreate(CamelModel):
    """createTemplate payload. `projects` / `issueTypes` are accepted as aliases."""

    name: str
    summary: str = ""
    content: str = ""
    assigned_projects: Optional[list[str]] = Field(
        default=None,
        validation_alias=AliasChoices("assignedProjects", "projects", "assigned_projects"),
    )
    assigned_issue_types: Optional[list[str]] = Field(
        default=None,
        validation_alias=AliasChoices("assignedIssueTypes", "issueTypes", "assigned_issue_types"),
    )
    active: bool = False
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("`name` is required and must be a non-empty string")
        return v.strip()

    @field_validator("summary", "content", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("assigned_projects", "assigned_issue_types", mode="before")
    @classmethod
    def _parse_axis(cls, v: Any) -> Optional[list[str]]:
        return _axis_or_none(v)


class TemplateUpdate(CamelModel):
    """updateTemplate payload. Only fields present in the payload are applied."""

    id: str
    name: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    assigned_projects: Optional[list[str]] = Field(
        default=None,
        validation_alias=AliasChoices("assignedProjects", "projects", "assigned_projects"),
    )
    assigned_issue_types: Optional[list[str]] = Field(
        default=None,
        validation_alias=AliasChoices("assignedIssueTypes", "issueTypes", "assigned_issue_types"),
    )
    active: Optional[bool] = None
    meta: Optional[dict[str, Any]] = None

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Template id is required")
        return v

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("`name` must be a non-empty string")
        return v.strip() if v is not None else v

    @field_validator("summary", "content", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("assigned_projects", "assigned_issue_types", mode="before")
    @classmethod
    def _parse_axis(cls, v: Any) -> Optional[list[str]]:
        # An explicit null clears the axis back to the wildcard
        return [] if v is None else parse_axis(v)

    def provided(self) -> set[str]:
        """Attribute names the caller actually sent, id excluded."""
        return self.model_fields_set - {"id"}
