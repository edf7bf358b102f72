from __future__ import annotations

from typing import Any, Optional, Protocol

import httpx

from app_logging.activity_logger import ActivityLogger
from engine.errors import UpstreamFailureError
from jira_api.client import JiraClient
from schemas.principal import RequestUser

logger = ActivityLogger("jira_permissions")

PROJECT_ADMIN_KEYS = frozenset({"PROJECT_ADMIN", "ADMINISTER_PROJECTS", "PROJECT_ADMINISTER"})


class ProjectPermissionChecker(Protocol):
    def is_project_admin(self, principal: Optional[RequestUser], project_key: str) -> bool: ...


def grants_project_admin(permissions: dict[str, Any]) -> bool:
    """True if any held permission is a known admin key or is named like one."""
    for key, perm in permissions.items():
        if not isinstance(perm, dict) or not perm.get("havePermission"):
            continue
        if key in PROJECT_ADMIN_KEYS:
            return True
        if "admin" in str(perm.get("name") or "").lower():
            return True
    return False


class JiraProjectPermissions:
    """
    Project-admin lookup against Jira's mypermissions endpoint.

    Fails closed: any transport error, bad status, undecodable body or
    unexpected shape is reported as "not a project admin".
    """

    def __init__(self, client: Optional[JiraClient] = None) -> None:
        self.client = client or JiraClient()

    def is_project_admin(self, principal: Optional[RequestUser], project_key: str) -> bool:
        if not project_key or principal is None or not principal.auth_token:
            return False

        try:
            data = self.client.my_permissions(project_key, principal.auth_token)
        except (httpx.HTTPError, ValueError, UpstreamFailureError) as exc:
            logger.warning(
                "project_permission_check_failed",
                account_id=principal.account_id,
                project_key=project_key,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return False

        permissions = data.get("permissions") if isinstance(data, dict) else None
        if not isinstance(permissions, dict):
            logger.warning(
                "project_permission_unexpected_shape",
                account_id=principal.account_id,
                project_key=project_key,
            )
            return False

        return grants_project_admin(permissions)
