"""Utility functions for the Soroban introspection layer."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Any

from .constants import INTEGER_WIDTHS
from .exceptions import ConversionError

_DECIMAL_INTEGER = re.compile(r"-?[0-9]+")
_HEX_STRING = re.compile(r"(?:0x)?([0-9a-fA-F]{2})*")


def to_integer(value: Any, tag: str) -> int:
    """Validate an integer input against the range of a wire integer tag.

    Arbitrary precision values arrive as decimal strings so they survive
    transport without float rounding.
    """
    if isinstance(value, bool):
        raise ConversionError(f"Boolean is not a valid {tag} value", field=tag, value=value)

    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        text = value.strip()
        if not _DECIMAL_INTEGER.fullmatch(text):
            raise ConversionError(
                f"Invalid integer string for {tag}: {value!r}", field=tag, value=value
            )
        result = int(text)
    elif isinstance(value, float) and value.is_integer():
        result = int(value)
    else:
        raise ConversionError(
            f"Expected an integer for {tag}, got {type(value).__name__}", field=tag, value=value
        )

    bits, signed = INTEGER_WIDTHS[tag]
    if signed:
        low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
    else:
        low, high = 0, 2**bits - 1
    if not low <= result <= high:
        raise ConversionError(f"Value out of range for {tag}", field=tag, value=value)

    return result


def to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    raise ConversionError("Expected a boolean value", field="Bool", value=value)


def to_bytes(value: Any) -> bytes:
    """Coerce bytes, hex or base64 input into raw bytes."""

    if isinstance(value, bytes):
        return value

    if isinstance(value, bytearray):
        return bytes(value)

    if isinstance(value, list | tuple) and all(isinstance(item, int) for item in value):
        try:
            return bytes(value)
        except ValueError as exc:
            raise ConversionError("Byte values must be in range 0-255", value=value) from exc

    if isinstance(value, str):
        text = value.strip()
        if text.lower().startswith("0x") or (text and _HEX_STRING.fullmatch(text)):
            try:
                return bytes.fromhex(text[2:] if text.lower().startswith("0x") else text)
            except ValueError as exc:
                raise ConversionError("Invalid hex string", field="Bytes", value=value) from exc
        try:
            return base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ConversionError(
                "Bytes must be hex or base64 encoded", field="Bytes", value=value
            ) from exc

    raise ConversionError(
        f"Unsupported type for bytes coercion: {type(value).__name__}", field="Bytes", value=value
    )


def xdr_text(value: Any) -> str:
    """Return the text of an XDR string/symbol field whatever its wrapper.

    Invalid UTF-8 is replaced rather than rejected so one malformed name
    cannot abort a whole catalogue.
    """

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    for attr in ("sc_symbol", "sc_string", "string"):
        inner = getattr(value, attr, None)
        if inner is not None:
            return xdr_text(inner)
    return str(value)


def xdr_uint(value: Any) -> int:
    """Unwrap an XDR Uint32/Uint64 wrapper into a plain int."""

    for attr in ("uint32", "uint64"):
        inner = getattr(value, attr, None)
        if inner is not None:
            return int(inner)
    return int(value)


def display_name(function_name: str) -> str:
    """Human-readable label for a contract function name."""

    if not function_name:
        return function_name
    return function_name[0].upper() + function_name[1:].replace("_", " ")
