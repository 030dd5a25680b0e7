"""Primitive Soroban type to ``SCVal`` conversion."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from stellar_sdk import scval
from stellar_sdk import xdr as stellar_xdr

from ..constants import INTEGER_WIDTHS, PRIMITIVE_WIRE_TAGS
from ..exceptions import ConversionError
from ..utils import to_boolean, to_bytes, to_integer
from .ordering import sort_map_entries

logger = logging.getLogger(__name__)

_BYTES_N = re.compile(r"BytesN<\s*([0-9]+)\s*>")

_INTEGER_ENCODERS = {
    "u32": scval.to_uint32,
    "i32": scval.to_int32,
    "u64": scval.to_uint64,
    "i64": scval.to_int64,
    "u128": scval.to_uint128,
    "i128": scval.to_int128,
    "u256": scval.to_uint256,
    "i256": scval.to_int256,
    "timepoint": scval.to_timepoint,
    "duration": scval.to_duration,
}


def primitive_wire_tag(name: str) -> str:
    """Map a primitive type name to its wire tag; unknown names pass through lower-cased."""

    tag = PRIMITIVE_WIRE_TAGS.get(name)
    if tag is not None:
        return tag
    if _BYTES_N.fullmatch(name):
        return "bytes"
    logger.warning("No wire tag for type %s; passing through", name)
    return name.lower()


def bytes_n_length(name: str) -> int | None:
    match = _BYTES_N.fullmatch(name)
    return int(match.group(1)) if match else None


def primitive_to_scval(value: Any, name: str) -> stellar_xdr.SCVal:
    """Convert a native value to the ``SCVal`` of primitive type ``name``.

    Raises:
        ConversionError: The value does not match the declared type.
    """
    tag = primitive_wire_tag(name)

    encoder = _INTEGER_ENCODERS.get(tag)
    if encoder is not None:
        return encoder(to_integer(value, tag))

    if tag == "bool":
        return scval.to_bool(to_boolean(value))

    if tag == "void":
        if value not in (None, ""):
            raise ConversionError("Void accepts no value", field=name, value=value)
        return scval.to_void()

    if tag in ("string", "symbol"):
        if not isinstance(value, str):
            raise ConversionError(f"Expected a string for {name}", field=name, value=value)
        return scval.to_string(value) if tag == "string" else scval.to_symbol(value)

    if tag == "bytes":
        raw = to_bytes(value)
        expected = bytes_n_length(name)
        if expected is not None and len(raw) != expected:
            raise ConversionError(
                f"{name} requires exactly {expected} bytes, got {len(raw)}",
                field=name,
                value=value,
            )
        return scval.to_bytes(raw)

    if tag == "address":
        if not isinstance(value, str):
            raise ConversionError("Address must be a strkey string", field=name, value=value)
        try:
            return scval.to_address(value.strip())
        except ValueError as exc:
            raise ConversionError(f"Invalid address: {value}", field=name, value=value) from exc

    return infer_scval(value, name)


def infer_scval(value: Any, name: str = "Val") -> stellar_xdr.SCVal:
    """Pick a wire value from the native type of ``value``.

    Used for ``Val`` and for type names without a dedicated encoder.

    Raises:
        ConversionError: No wire value can be inferred for the native type.
    """
    if isinstance(value, stellar_xdr.SCVal):
        return value
    if value is None:
        return scval.to_void()
    if isinstance(value, bool):
        return scval.to_bool(value)
    if isinstance(value, int):
        return scval.to_int128(to_integer(value, "i128"))
    if isinstance(value, str):
        return scval.to_string(value)
    if isinstance(value, bytes | bytearray):
        return scval.to_bytes(bytes(value))
    if isinstance(value, list | tuple):
        return scval.to_vec([infer_scval(item, name) for item in value])
    if isinstance(value, Mapping):
        entries = [
            stellar_xdr.SCMapEntry(key=infer_scval(key, name), val=infer_scval(item, name))
            for key, item in value.items()
        ]
        return stellar_xdr.SCVal(
            stellar_xdr.SCValType.SCV_MAP, map=stellar_xdr.SCMap(sort_map_entries(entries))
        )

    raise ConversionError(
        f"Cannot infer a wire value for {type(value).__name__} as {name}", field=name, value=value
    )


def is_integer_tag(tag: str) -> bool:
    return tag in INTEGER_WIDTHS
