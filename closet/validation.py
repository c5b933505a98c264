"""Schema gate: turn a candidate value into a model or report every bad field."""

import logging
from typing import Any, TypeVar

import pydantic

from closet.errors import FieldIssue, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

_REASONS = {
    "missing": "field is required",
    "string_type": "expected a string",
    "list_type": "expected a list",
    "model_type": "expected an object",
    "string_pattern_mismatch": "does not match the expected format",
    "string_too_short": "must not be empty",
    "enum": "is not one of the allowed values",
}


def _path(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc) or "<root>"


def _reason(error: dict[str, Any]) -> str:
    if error["type"] == "value_error":
        # custom rules: drop pydantic's "Value error, " prefix
        return str(error["ctx"]["error"]) if "ctx" in error else error["msg"]
    if error["type"] == "string_pattern_mismatch":
        return f"{_REASONS['string_pattern_mismatch']} ({error['ctx']['pattern']})"
    return _REASONS.get(error["type"], error["msg"])


def issues_from(exc: pydantic.ValidationError) -> list[FieldIssue]:
    return [FieldIssue(path=_path(err["loc"]), reason=_reason(err)) for err in exc.errors()]


def validate(model_cls: type[ModelT], value: Any) -> ModelT:
    """Return ``value`` as a ``model_cls`` instance or raise with every violation."""
    if isinstance(value, pydantic.BaseModel) and not isinstance(value, model_cls):
        value = value.model_dump()
    try:
        return model_cls.model_validate(value)
    except pydantic.ValidationError as exc:
        issues = issues_from(exc)
        logger.error("%s failed validation: %s", model_cls.__name__, "; ".join(map(str, issues)))
        raise ValidationError(model_cls.__name__, issues) from exc
