from __future__ import annotations

from typing import Optional

from pydantic import Field

from schemas.template import CamelModel, Template


class Assignments(CamelModel):
    assigned_projects: list[str] = Field(default_factory=list)
    assigned_issue_types: list[str] = Field(default_factory=list)


class AssignmentResult(CamelModel):
    """Outcome of assign/activate: the saved template plus every id it deactivated."""

    template: Template
    deactivated: list[str] = Field(default_factory=list)


class Prefill(CamelModel):
    """Suggested Create Issue values. The frontend decides; nothing is overwritten here."""

    template_id: str
    template_name: str
    summary: Optional[str] = None
    description: Optional[str] = None
    apply_summary: bool = False
    apply_description: bool = False


class PageRequest(CamelModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1)

    @property
    def start(self) -> int:
        return (self.page - 1) * self.limit


class TemplatePage(CamelModel):
    total: int
    page: int
    limit: int
    templates: list[Template] = Field(default_factory=list)


class TemplateSearchHit(CamelModel):
    id: str
    name: str
    summary: str = ""


class ProjectCount(CamelModel):
    project_key: str
    count: int


class ProjectTemplateSummary(CamelModel):
    id: str
    name: str
    assigned_issue_types: list[str] = Field(default_factory=list)


class DeleteResult(CamelModel):
    id: str
    deleted: bool = True
    hard: bool = False
