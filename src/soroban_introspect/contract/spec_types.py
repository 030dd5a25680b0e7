"""Render ``SCSpecTypeDef`` values as type expression strings."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from stellar_sdk import xdr as stellar_xdr

from ..constants import UNKNOWN_TYPE_NAME
from ..utils import xdr_text, xdr_uint

logger = logging.getLogger(__name__)

_PRIMITIVE_SPEC_TYPES = {
    "SC_SPEC_TYPE_VAL": "Val",
    "SC_SPEC_TYPE_BOOL": "Bool",
    "SC_SPEC_TYPE_VOID": "Void",
    "SC_SPEC_TYPE_ERROR": "Error",
    "SC_SPEC_TYPE_U32": "U32",
    "SC_SPEC_TYPE_I32": "I32",
    "SC_SPEC_TYPE_U64": "U64",
    "SC_SPEC_TYPE_I64": "I64",
    "SC_SPEC_TYPE_TIMEPOINT": "Timepoint",
    "SC_SPEC_TYPE_DURATION": "Duration",
    "SC_SPEC_TYPE_U128": "U128",
    "SC_SPEC_TYPE_I128": "I128",
    "SC_SPEC_TYPE_U256": "U256",
    "SC_SPEC_TYPE_I256": "I256",
    "SC_SPEC_TYPE_BYTES": "Bytes",
    "SC_SPEC_TYPE_STRING": "ScString",
    "SC_SPEC_TYPE_SYMBOL": "ScSymbol",
    "SC_SPEC_TYPE_ADDRESS": "Address",
    "SC_SPEC_TYPE_MUXED_ADDRESS": "MuxedAddress",
}


@dataclass(frozen=True)
class SpecTypeResolution:
    """Rendered type name, or the reason it could not be rendered."""

    type_name: str
    warning: str | None = None

    @property
    def ok(self) -> bool:
        return self.warning is None

    @classmethod
    def miss(cls, warning: str) -> SpecTypeResolution:
        return cls(UNKNOWN_TYPE_NAME, warning)


def describe_spec_type(type_def: stellar_xdr.SCSpecTypeDef) -> SpecTypeResolution:
    """Render ``type_def`` as e.g. ``Map<ScSymbol, Vec<U32>>``.

    Unsupported spec types never raise; the miss is reported on the result so
    callers can decide between failing fast and degrading to a placeholder.
    """
    try:
        return _describe(type_def)
    except (AttributeError, TypeError, ValueError) as exc:
        logger.warning("Failed to render spec type %r: %s", type_def, exc)
        return SpecTypeResolution.miss(f"Failed to render spec type: {exc}")


def _describe(type_def: stellar_xdr.SCSpecTypeDef) -> SpecTypeResolution:
    kind = getattr(type_def.type, "name", str(type_def.type))

    primitive = _PRIMITIVE_SPEC_TYPES.get(kind)
    if primitive is not None:
        return SpecTypeResolution(primitive)

    if kind == "SC_SPEC_TYPE_BYTES_N":
        return SpecTypeResolution(f"BytesN<{xdr_uint(type_def.bytes_n.n)}>")
    if kind == "SC_SPEC_TYPE_UDT":
        return SpecTypeResolution(xdr_text(type_def.udt.name))
    if kind == "SC_SPEC_TYPE_VEC":
        return _generic("Vec", type_def.vec.element_type)
    if kind == "SC_SPEC_TYPE_OPTION":
        return _generic("Option", type_def.option.value_type)
    if kind == "SC_SPEC_TYPE_MAP":
        return _generic("Map", type_def.map.key_type, type_def.map.value_type)
    if kind == "SC_SPEC_TYPE_RESULT":
        return _generic("Result", type_def.result.ok_type, type_def.result.error_type)
    if kind == "SC_SPEC_TYPE_TUPLE":
        return _generic("Tuple", *type_def.tuple.value_types)

    logger.error("Missing handler for spec type %s", kind)
    return SpecTypeResolution.miss(f"Unsupported spec type {kind}")


def _generic(name: str, *children: stellar_xdr.SCSpecTypeDef) -> SpecTypeResolution:
    rendered = []
    for child in children:
        resolution = _describe(child)
        if not resolution.ok:
            return resolution
        rendered.append(resolution.type_name)
    return SpecTypeResolution(f"{name}<{', '.join(rendered)}>")
