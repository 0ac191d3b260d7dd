# stockroom/decode.py
"""
Boundary decoding of API payloads.

The products API may answer a list request with a bare array or with
``{"products": [...]}``, and a create/update with a bare product or with
``{"product": {...}}``. Each payload is classified once here and callers
only ever see the unwrapped value.
"""
from typing import Any, List, Literal, NamedTuple

from pydantic import ValidationError

from stockroom.errors import RemoteUnavailable
from stockroom.models import Product

Shape = Literal["array", "object", "bare", "wrapped"]


class Decoded(NamedTuple):
    shape: Shape
    value: Any


def decode_collection(payload: Any, key: str = "products") -> Decoded:
    if isinstance(payload, list):
        return Decoded("array", payload)
    if isinstance(payload, dict):
        items = payload.get(key)
        return Decoded("object", items if isinstance(items, list) else [])
    raise RemoteUnavailable(f"unexpected {key} payload: {type(payload).__name__}")


def decode_single(payload: Any, key: str = "product") -> Decoded:
    if not isinstance(payload, dict):
        raise RemoteUnavailable(f"unexpected {key} payload: {type(payload).__name__}")
    wrapped = payload.get(key)
    if isinstance(wrapped, dict):
        return Decoded("wrapped", wrapped)
    return Decoded("bare", payload)


def products_from(payload: Any) -> List[Product]:
    decoded = decode_collection(payload)
    try:
        return [Product.model_validate(item) for item in decoded.value]
    except ValidationError as e:
        raise RemoteUnavailable(f"invalid products payload: {e.error_count()} errors") from e


def product_from(payload: Any) -> Product:
    decoded = decode_single(payload)
    try:
        return Product.model_validate(decoded.value)
    except ValidationError as e:
        raise RemoteUnavailable(f"invalid product payload: {e.error_count()} errors") from e
