from __future__ import annotations

from pydantic import Field

from schemas.template import CamelModel


class GlobalConfig(CamelModel):
    """Stored under `<ns>:config`. Governs default authorization."""

    allow_all_users: bool = False
    admins: list[str] = Field(default_factory=list, description="accountIds with admin rights")


class ProjectSetting(CamelModel):
    """One entry of the `<ns>:projects` map: does the project use global templates."""

    enabled: bool = True


class ProjectConfig(CamelModel):
    project_key: str
    use_global_templates: bool
