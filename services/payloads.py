from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from engine.errors import TemplateValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = str(first.get("msg", "invalid value"))
    # field validators surface as "Value error, <our message>"
    message = message.removeprefix("Value error, ")
    return f"{location}: {message}" if location else message


def parse_payload(model: type[ModelT], payload: Any) -> ModelT:
    """Validate a resolver payload into `model`, raising TemplateValidationError."""
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, dict):
        raise TemplateValidationError("Payload must be an object")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise TemplateValidationError(_describe(exc), errors=exc.error_count()) from exc
