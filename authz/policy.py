"""
Authorization policy.

Services ask `policy.can(principal, action, template=..., project_keys=...)`
and hand the answer to the engine. The engine never looks at admin lists,
ownership or Jira permissions itself.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol, Sequence

from app_logging.activity_logger import ActivityLogger
from jira_api.permissions import ProjectPermissionChecker
from persistence.repository import ConfigRepository
from schemas.admin_config import GlobalConfig
from schemas.principal import RequestUser
from schemas.template import Template

logger = ActivityLogger("policy")


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    DUPLICATE = "duplicate"
    ASSIGN_PROJECTS = "assign_projects"
    ASSIGN_ISSUE_TYPES = "assign_issue_types"
    ACTIVATE = "activate"
    APPLY = "apply"
    CONFIGURE_GLOBAL = "configure_global"
    CONFIGURE_PROJECT = "configure_project"                    # project settings page toggle
    CONFIGURE_PROJECT_SETTINGS = "configure_project_settings"  # admin page project map


class AuthorizationPolicy(Protocol):
    def can(
        self,
        principal: Optional[RequestUser],
        action: Action,
        template: Optional[Template] = None,
        project_keys: Sequence[str] = (),
    ) -> bool: ...


class AllowAllPolicy:
    """Trusts every caller. For the local CLI operator and tests."""

    def can(
        self,
        principal: Optional[RequestUser],
        action: Action,
        template: Optional[Template] = None,
        project_keys: Sequence[str] = (),
    ) -> bool:
        return True


_OWNER_ACTIONS = frozenset(
    {
        Action.UPDATE,
        Action.DELETE,
        Action.ACTIVATE,
        Action.APPLY,
        Action.ASSIGN_ISSUE_TYPES,
        Action.ASSIGN_PROJECTS,
    }
)


class DefaultPolicy:
    """
    Rules:
      - admin = accountId in GlobalConfig.admins, or the host flags the user as admin
      - create / duplicate: allowAllUsers or admin
      - update / delete / activate / apply / assign issue types:
        allowAllUsers, admin, or template owner
      - assign projects: as above, or project admin of every target project
      - global config, admin-page project map: admin only
      - project-page toggle: allowAllUsers, admin, or project admin of that project
    """

    def __init__(
        self,
        config_repo: ConfigRepository,
        project_permissions: Optional[ProjectPermissionChecker] = None,
    ) -> None:
        self.config_repo = config_repo
        self.project_permissions = project_permissions

    @staticmethod
    def is_admin(principal: Optional[RequestUser], config: GlobalConfig) -> bool:
        if principal is None:
            return False
        if principal.account_id in config.admins:
            return True
        return principal.is_admin or principal.is_product_admin

    def _is_project_admin(self, principal: Optional[RequestUser], project_key: str) -> bool:
        if self.project_permissions is None:
            return False
        return self.project_permissions.is_project_admin(principal, project_key)

    def can(
        self,
        principal: Optional[RequestUser],
        action: Action,
        template: Optional[Template] = None,
        project_keys: Sequence[str] = (),
    ) -> bool:
        config = self.config_repo.read_global_config()
        is_admin = self.is_admin(principal, config)

        if action in (Action.CONFIGURE_GLOBAL, Action.CONFIGURE_PROJECT_SETTINGS):
            allowed = is_admin
        elif config.allow_all_users or is_admin:
            allowed = True
        elif action in (Action.CREATE, Action.DUPLICATE):
            allowed = False
        elif action is Action.CONFIGURE_PROJECT:
            allowed = bool(project_keys) and all(self._is_project_admin(principal, p) for p in project_keys)
        elif action in _OWNER_ACTIONS:
            is_owner = (
                principal is not None
                and template is not None
                and template.owner is not None
                and template.owner == principal.account_id
            )
            allowed = is_owner
            if not allowed and action is Action.ASSIGN_PROJECTS:
                # empty target list = every project; never granted via project admin
                allowed = bool(project_keys) and all(
                    self._is_project_admin(principal, p) for p in project_keys
                )
        else:
            allowed = False

        if not allowed:
            logger.info(
                "authorization_denied",
                account_id=principal.account_id if principal else None,
                action=action.value,
                template_id=template.id if template else None,
            )
        return allowed
