from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import TypeAdapter
from pydantic_core import from_json, to_json

# values of these types are never spread into a parameter map
NOT_FLATTENABLE_TYPES = (
    bool,
    int,
    float,
    complex,
    Decimal,
    str,
    bytes,
    bytearray,
    list,
    tuple,
    set,
    frozenset,
)


def _public_attributes(value: Any) -> Any:
    if hasattr(value, "__dict__"):
        return {k: v for k, v in vars(value).items() if not k.startswith("_")}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


@lru_cache(maxsize=256)
def _type_adapter(shape: Any) -> TypeAdapter:
    return TypeAdapter(shape)


class JsonCodec:
    """Structured value <-> JSON bytes conversion backed by pydantic.

    Pydantic models, dataclasses, TypedDicts and plain mappings are handled
    natively; other objects are serialized through their public attributes.
    """

    def encode(self, value: Any) -> bytes:
        return to_json(value, fallback=_public_attributes)

    def decode(self, content: bytes, shape: Any) -> Any:
        if shape is None or shape is Any:
            return from_json(content)
        return _type_adapter(shape).validate_json(content)

    def to_map(self, value: Any) -> Optional[Dict[str, Any]]:
        """Flatten a value into a key/value map.

        Returns None for scalars, strings, bytes and collections, or for any
        value whose JSON form is not an object.
        """
        if value is None or isinstance(value, NOT_FLATTENABLE_TYPES):
            return None
        structured = from_json(self.encode(value))
        if not isinstance(structured, dict):
            return None
        return structured

    def to_text(self, value: Any) -> str:
        """Render a value as it appears in a url, query string or form field.

        JSON scalars are sent without quotes (``true``, ``1.5``, ISO dates);
        objects and arrays are sent as their JSON text.
        """
        if isinstance(value, str):
            return value
        encoded = self.encode(value)
        decoded = from_json(encoded)
        if isinstance(decoded, str):
            return decoded
        return encoded.decode()
