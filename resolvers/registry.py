from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError

from app_logging.activity_logger import ActivityLogger
from engine.errors import IssueTemplatesError, TemplateNotFoundError, TemplateValidationError
from schemas.principal import RequestUser
from schemas.template import CamelModel

logger = ActivityLogger("resolver")


@dataclass
class ResolverRequest:
    """What a handler receives: the frontend payload plus the host context."""

    payload: dict[str, Any] = field(default_factory=dict)
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def principal(self) -> Optional[RequestUser]:
        try:
            return RequestUser.from_context(self.context)
        except ValidationError as exc:
            raise TemplateValidationError("Malformed user in request context") from exc


Handler = Callable[[ResolverRequest], Any]


def to_jsonable(value: Any) -> Any:
    """Dump pydantic models (camelCase) inside whatever a handler returned."""
    if isinstance(value, CamelModel):
        return value.to_json_dict()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


class Resolver:
    """
    Named handler registry.

    Handlers are registered with `define(function_key, handler)` (or as a
    decorator) and invoked by key. Every successful call returns
    `{"success": True, "data": ...}`; failures raise IssueTemplatesError.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def define(self, function_key: str, handler: Optional[Handler] = None) -> Any:
        def register(fn: Handler) -> Handler:
            if function_key in self._handlers:
                raise ValueError(f"Resolver function already defined: {function_key}")
            self._handlers[function_key] = fn
            return fn

        if handler is not None:
            return register(handler)
        return register

    def keys(self) -> list[str]:
        return sorted(self._handlers)

    def invoke(
        self,
        function_key: str,
        payload: Optional[Any] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        handler = self._handlers.get(function_key)
        if handler is None:
            raise TemplateNotFoundError("Unknown resolver function", function_key=function_key)
        if payload is not None and not isinstance(payload, dict):
            raise TemplateValidationError("Payload must be an object", function_key=function_key)

        request = ResolverRequest(payload=payload or {}, context=context or {})
        try:
            data = handler(request)
        except IssueTemplatesError as exc:
            logger.error("resolver_failed", exc=exc, function_key=function_key, code=exc.code)
            raise
        except Exception as exc:
            logger.error("resolver_crashed", exc=exc, function_key=function_key)
            raise

        logger.debug("resolver_completed", function_key=function_key)
        return {"success": True, "data": to_jsonable(data)}
