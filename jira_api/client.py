from __future__ import annotations

from typing import Any, Optional

import httpx

from app_logging.activity_logger import ActivityLogger
from config.settings import settings
from engine.errors import UpstreamFailureError

logger = ActivityLogger("jira_client")


class JiraClient:
    """
    Minimal Jira Cloud REST client.

    Calls are made "as the user" with the caller's bearer token when one is
    given. Otherwise they fall back to the configured service account
    (JIRA_USERNAME / JIRA_API_TOKEN, basic auth).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else settings.jira_base_url).rstrip("/")
        self.timeout = timeout_seconds if timeout_seconds is not None else settings.jira_timeout_seconds
        self._transport = transport

    def _client(self, user_token: Optional[str], allow_service_account: bool) -> httpx.Client:
        if not self.base_url:
            raise UpstreamFailureError("JIRA_URL is not configured")

        headers = {"Accept": "application/json"}
        auth: Optional[httpx.Auth] = None
        if user_token:
            headers["Authorization"] = f"Bearer {user_token}"
        elif allow_service_account and settings.has_jira_service_account:
            auth = httpx.BasicAuth(settings.jira_username, settings.jira_api_token)
        else:
            raise UpstreamFailureError("No Jira credentials available for this request")

        return httpx.Client(
            base_url=self.base_url,
            headers=headers,
            auth=auth,
            timeout=self.timeout,
            transport=self._transport,
        )

    # ── Endpoints ─────────────────────────────────────────────────────────────

    def my_permissions(self, project_key: str, user_token: str) -> Any:
        """GET /rest/api/3/mypermissions for one project, strictly as the user.

        Raises httpx.HTTPError on transport failure or non-2xx, ValueError on
        an undecodable body.
        """
        with self._client(user_token, allow_service_account=False) as client:
            response = client.get("/rest/api/3/mypermissions", params={"projectKey": project_key})
            response.raise_for_status()
            return response.json()

    def update_issue_fields(
        self,
        issue_key: str,
        fields: dict[str, Any],
        user_token: Optional[str] = None,
    ) -> int:
        """PUT /rest/api/3/issue/{key}. Returns the HTTP status code."""
        try:
            with self._client(user_token, allow_service_account=True) as client:
                response = client.put(f"/rest/api/3/issue/{issue_key}", json={"fields": fields})
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("jira_issue_update_failed", exc=exc, issue_key=issue_key)
            raise UpstreamFailureError(
                "Failed to apply template to issue (Jira API error). "
                "Ensure the app has the required scopes and access to the issue.",
                issue_key=issue_key,
            ) from exc

        logger.info("jira_issue_updated", issue_key=issue_key, status=response.status_code)
        return response.status_code
