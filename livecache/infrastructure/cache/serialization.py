"""JSON encoding for cached values.

Values go through pydantic so models, dataclasses, datetimes and Decimals
serialize without custom encoders. Reads return plain JSON data unless a
model type is given, in which case the payload is validated into it.
"""

import json
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter

T = TypeVar("T")

_ANY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


@lru_cache(maxsize=256)
def _adapter(model: Any) -> TypeAdapter[Any]:
    return TypeAdapter(model)


def dumps(value: Any) -> str:
    """Serialize value to a JSON string.

    Raises:
        pydantic_core.PydanticSerializationError: If value is not serializable
            (a ValueError subclass).
    """
    return _ANY_ADAPTER.dump_json(value).decode("utf-8")


def loads(raw: str | bytes, model: type[T] | None = None) -> T | Any:
    """Parse a JSON string, optionally validating it into model.

    Raises:
        ValueError: On malformed JSON or validation failure
            (json.JSONDecodeError and pydantic.ValidationError both subclass it).
    """
    if model is None:
        return json.loads(raw)
    return _adapter(model).validate_json(raw)
