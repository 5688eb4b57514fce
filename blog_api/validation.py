"""
JSON body dependency implementing the request-validation contract.

Checks run in a fixed order so the failure reported is always the first one
that applies:

  1. Content-Type must be application/json  (checked before reading the body)
  2. body must parse as a JSON object
  3. required fields must be present and non-empty, then of the right type

All three fail with 400; only the message differs.
"""
import json
from typing import Callable, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from blog_api.errors import BadRequest

ModelT = TypeVar("ModelT", bound=BaseModel)

JSON_CONTENT_TYPE = "application/json"

# pydantic error types that mean absent or blank; an explicit null counts too
MISSING_ERROR_TYPES = {"missing", "string_too_short"}


def json_body(model: type[ModelT]) -> Callable:
    """Build a dependency that parses and validates the request body as `model`."""

    async def dependency(request: Request) -> ModelT:
        content_type = request.headers.get("content-type", "")
        if JSON_CONTENT_TYPE not in content_type.lower():
            raise BadRequest(f"Content-Type must be {JSON_CONTENT_TYPE}")

        try:
            payload = json.loads(await request.body())
        except ValueError:
            raise BadRequest("Invalid JSON format")
        if not isinstance(payload, dict):
            raise BadRequest("Invalid JSON format")

        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            missing, invalid = set(), set()
            for err in exc.errors():
                if not err["loc"]:
                    continue
                absent = err["type"] in MISSING_ERROR_TYPES or err.get("input") is None
                bucket = missing if absent else invalid
                bucket.add(str(err["loc"][0]))
            if missing:
                raise BadRequest(f"Missing required fields: {', '.join(sorted(missing))}")
            raise BadRequest(f"Invalid fields: {', '.join(sorted(invalid))}")

    dependency.__name__ = f"{model.__name__}_body"
    return dependency
