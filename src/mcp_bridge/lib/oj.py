"""Thin orjson wrapper with a json-module shaped API."""

from typing import Any

import orjson

JSONDecodeError = orjson.JSONDecodeError


def dumps(obj: Any) -> str:
    """Serialize to a compact JSON string."""
    return orjson.dumps(obj).decode("utf-8")


def loads(data: str | bytes | bytearray) -> Any:
    """Parse a JSON document."""
    return orjson.loads(data)
