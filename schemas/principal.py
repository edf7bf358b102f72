from __future__ import annotations

from typing import Any, Optional

from pydantic import Field

from schemas.template import CamelModel


class RequestUser(CamelModel):
    """The calling user, as described by the host's request context."""

    account_id: str
    is_admin: bool = False
    is_product_admin: bool = False
    auth_token: Optional[str] = Field(
        default=None,
        exclude=True,
        repr=False,
        description="User's own Jira bearer token for calls made as the user",
    )

    @classmethod
    def from_context(cls, context: Optional[dict[str, Any]]) -> Optional["RequestUser"]:
        """Build from `{"user": {...}, "authToken": "..."}`; None when no usable user."""
        if not isinstance(context, dict):
            return None
        user = context.get("user")
        if not isinstance(user, dict) or not user.get("accountId"):
            return None
        data = dict(user)
        if context.get("authToken") and not data.get("authToken"):
            data["authToken"] = context["authToken"]
        return cls.model_validate(data)
