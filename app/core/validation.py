"""Request body validation: schema checks that yield human-readable violation lists."""

import json
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from app.core.exceptions import BadRequestError

ModelT = TypeVar("ModelT", bound=BaseModel)

# Leading location parts added by FastAPI that name the request section, not the field.
_REQUEST_SECTIONS = frozenset({"body", "query", "path", "header", "cookie"})


def _format_error(err: dict[str, Any]) -> str:
    loc: Sequence[Any] = err.get("loc", ())
    if loc and loc[0] in _REQUEST_SECTIONS:
        loc = loc[1:]
    field = ".".join(str(part) for part in loc) or "value"
    if err["type"] == "missing":
        return f'"{field}" is required'
    if err["type"] == "extra_forbidden":
        return f'"{field}" is not allowed'
    return f'"{field}": {err["msg"]}'


def format_errors(errors: Iterable[dict[str, Any]]) -> list[str]:
    """Turn pydantic/FastAPI error dicts into ordered messages."""
    return [_format_error(err) for err in errors]


def check_against_schema(schema: type[BaseModel], data: Any) -> list[str]:
    """Return the violations of ``data`` against ``schema``; empty means valid."""
    try:
        schema.model_validate(data)
    except ValidationError as e:
        return format_errors(e.errors())
    return []


def validate_body(schema: type[ModelT]) -> Callable[[Request], Awaitable[ModelT]]:
    """
    Build a dependency that parses the JSON body against ``schema``.

    Raises BadRequestError (400) with the violation list when the body is not
    JSON or does not match.
    """

    async def dependency(request: Request) -> ModelT:
        try:
            data = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise BadRequestError(["request body must be valid JSON"]) from None
        errors = check_against_schema(schema, data)
        if errors:
            raise BadRequestError(errors)
        return schema.model_validate(data)

    return dependency
