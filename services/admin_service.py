from __future__ import annotations

from typing import Any, Optional

from app_logging.activity_logger import ActivityLogger
from authz.policy import Action, AuthorizationPolicy
from engine.errors import NotAuthorizedError, TemplateValidationError
from persistence.repository import ConfigRepository
from schemas.admin_config import GlobalConfig, ProjectConfig, ProjectSetting
from schemas.principal import RequestUser

logger = ActivityLogger("admin_service")


class AdminService:
    """Global configuration flags and per-project opt-in settings."""

    def __init__(self, config_repo: ConfigRepository, policy: AuthorizationPolicy) -> None:
        self.config_repo = config_repo
        self.policy = policy

    # ── Global config ─────────────────────────────────────────────────────────

    def get_global_config(self) -> GlobalConfig:
        return self.config_repo.read_global_config()

    def set_global_config(
        self,
        allow_all_users: Optional[Any] = None,
        admins: Optional[Any] = None,
        principal: Optional[RequestUser] = None,
    ) -> GlobalConfig:
        """Merge the supplied fields over the stored config. Admin only."""
        if not self.policy.can(principal, Action.CONFIGURE_GLOBAL):
            raise NotAuthorizedError("Not authorized to change global config")

        current = self.config_repo.read_global_config()
        updated = current.model_copy(deep=True)
        if allow_all_users is not None:
            updated.allow_all_users = bool(allow_all_users)
        if isinstance(admins, list):
            updated.admins = [str(a) for a in admins if a]
        self.config_repo.write_global_config(updated)

        logger.info(
            "global_config_updated",
            account_id=principal.account_id if principal else None,
            allow_all_users=updated.allow_all_users,
            admin_count=len(updated.admins),
        )
        return updated

    # ── Project settings ──────────────────────────────────────────────────────

    def get_project_settings(self) -> dict[str, ProjectSetting]:
        return self.config_repo.read_project_settings()

    def _write_project_flag(self, project_key: str, enabled: bool) -> None:
        project_settings = self.config_repo.read_project_settings()
        project_settings[project_key] = ProjectSetting(enabled=enabled)
        self.config_repo.write_project_settings(project_settings)

    def set_project_enabled(
        self,
        project_key: Optional[str],
        enabled: Any,
        principal: Optional[RequestUser] = None,
    ) -> ProjectSetting:
        """Admin page switch. Admin only."""
        if not project_key:
            raise TemplateValidationError("projectKey is required")
        if not self.policy.can(principal, Action.CONFIGURE_PROJECT_SETTINGS, project_keys=(project_key,)):
            raise NotAuthorizedError("Not authorized to change project settings")

        self._write_project_flag(project_key, bool(enabled))
        logger.info("project_enabled_changed", project_key=project_key, enabled=bool(enabled))
        return ProjectSetting(enabled=bool(enabled))

    def get_project_config(self, project_key: Optional[str]) -> ProjectConfig:
        """Project page view. A project with no stored entry uses global templates."""
        if not project_key:
            raise TemplateValidationError("projectKey is required")
        entry = self.config_repo.read_project_settings().get(project_key, ProjectSetting())
        return ProjectConfig(project_key=project_key, use_global_templates=entry.enabled)

    def set_project_use_global_templates(
        self,
        project_key: Optional[str],
        enabled: Any,
        principal: Optional[RequestUser] = None,
    ) -> ProjectConfig:
        """Project page switch: allowAllUsers, admin, or project admin of this project."""
        if not project_key:
            raise TemplateValidationError("projectKey is required")
        if not self.policy.can(principal, Action.CONFIGURE_PROJECT, project_keys=(project_key,)):
            raise NotAuthorizedError("Not authorized to change project settings")

        self._write_project_flag(project_key, bool(enabled))
        logger.info("project_use_global_templates_changed", project_key=project_key, enabled=bool(enabled))
        return ProjectConfig(project_key=project_key, use_global_templates=bool(enabled))
