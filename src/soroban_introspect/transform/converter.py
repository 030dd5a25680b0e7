"""Conversion between native Python values and Soroban ``SCVal`` wire values."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from stellar_sdk import scval
from stellar_sdk import xdr as stellar_xdr

from ..exceptions import ConversionError
from ..parser import parse_type
from ..types import (
    Composite,
    CompositeKind,
    EnumMetadata,
    Named,
    Parameter,
    Primitive,
    TypeExpression,
    VariantKind,
    format_type,
)
from .ordering import sort_map_entries
from .primitives import primitive_to_scval

logger = logging.getLogger(__name__)

_RESULT_KEYS = ("ok", "err")


def is_result_shape(value: Any) -> bool:
    """True when ``value`` carries exactly one of the ``ok``/``err`` keys."""

    if not isinstance(value, Mapping):
        return False
    return sum(key in value for key in _RESULT_KEYS) == 1


def _is_typed_wrapper(value: Any) -> bool:
    return isinstance(value, Mapping) and set(value) == {"type", "value"}


def _as_sequence(value: Any, type_expr: TypeExpression) -> Sequence[Any]:
    if isinstance(value, list | tuple):
        return value
    raise ConversionError(
        f"Expected a list for {format_type(type_expr)}",
        field=format_type(type_expr),
        value=value,
    )


def _map_scval(entries: list[stellar_xdr.SCMapEntry]) -> stellar_xdr.SCVal:
    return stellar_xdr.SCVal(stellar_xdr.SCValType.SCV_MAP, map=stellar_xdr.SCMap(entries))


def _element_hint(schema_hint: Parameter | None, index: int) -> Parameter | None:
    return schema_hint.element_hint(index) if schema_hint is not None else None


class ValueConverter:
    """Convert native values into wire values for a declared type expression.

    Record and enum parameters need the ``components`` / ``enum_metadata``
    side-channel attached by :class:`SpecExtractor`, passed as ``schema_hint``.
    Map entries are sorted by encoded key, which the ledger requires;
    ``sort_map_entries=False`` keeps caller order.
    """

    def __init__(self, *, sort_map_entries: bool = True) -> None:
        self.sort_map_entries = sort_map_entries

    def to_native(self, value: stellar_xdr.SCVal) -> Any:
        return scval.to_native(value)

    def to_wire_value(
        self,
        value: Any,
        type_expr: TypeExpression | str,
        schema_hint: Parameter | None = None,
    ) -> Any:
        """Convert ``value`` into an ``SCVal`` of ``type_expr``.

        ``Result`` values that carry neither or both of ``ok``/``err`` are
        returned unconverted so the caller's validation layer can flag them.

        Raises:
            ConversionError: The value does not match the declared type.
            ParseError: ``type_expr`` is a malformed type string.
        """
        if isinstance(type_expr, str):
            type_expr = parse_type(type_expr)

        if _is_typed_wrapper(value) and not (schema_hint and schema_hint.components):
            value = value["value"]

        if isinstance(value, stellar_xdr.SCVal):
            return value

        if isinstance(type_expr, Primitive):
            return primitive_to_scval(value, type_expr.name)

        if isinstance(type_expr, Composite):
            return self._composite(value, type_expr, schema_hint)

        return self._named(value, type_expr, schema_hint)

    # ------------------------------------------------------------------
    # Composites
    # ------------------------------------------------------------------
    def _composite(
        self, value: Any, type_expr: Composite, schema_hint: Parameter | None
    ) -> Any:
        kind = type_expr.kind
        children = type_expr.children

        if kind is CompositeKind.VEC:
            items = _as_sequence(value, type_expr)
            return scval.to_vec(
                [self.to_wire_value(item, children[0], schema_hint) for item in items]
            )

        if kind is CompositeKind.OPTION:
            if value is None or value == "":
                return scval.to_void()
            return self.to_wire_value(value, children[0], schema_hint)

        if kind is CompositeKind.TUPLE:
            items = _as_sequence(value, type_expr)
            if len(items) != len(children):
                raise ConversionError(
                    f"{format_type(type_expr)} expects {len(children)} values, got {len(items)}",
                    field=format_type(type_expr),
                    value=value,
                )
            return scval.to_vec(
                [
                    self.to_wire_value(item, child, _element_hint(schema_hint, index))
                    for index, (item, child) in enumerate(zip(items, children))
                ]
            )

        if kind is CompositeKind.MAP:
            return self._map(value, type_expr, schema_hint)

        return self._result(value, type_expr, schema_hint)

    def _map(
        self, value: Any, type_expr: Composite, schema_hint: Parameter | None
    ) -> stellar_xdr.SCVal:
        key_type, value_type = type_expr.children
        key_hint = _element_hint(schema_hint, 0)
        value_hint = _element_hint(schema_hint, 1)
        entries = []
        for key, item in self._map_pairs(value, type_expr):
            entries.append(
                stellar_xdr.SCMapEntry(
                    key=self.to_wire_value(key, key_type, key_hint),
                    val=self.to_wire_value(item, value_type, value_hint),
                )
            )
        if self.sort_map_entries:
            entries = sort_map_entries(entries)
        return _map_scval(entries)

    def _map_pairs(self, value: Any, type_expr: Composite) -> list[tuple[Any, Any]]:
        if isinstance(value, Mapping):
            return list(value.items())

        pairs = []
        for entry in _as_sequence(value, type_expr):
            if isinstance(entry, Mapping) and "key" in entry and "value" in entry:
                pairs.append((entry["key"], entry["value"]))
            elif isinstance(entry, list | tuple) and len(entry) == 2:
                pairs.append((entry[0], entry[1]))
            else:
                raise ConversionError(
                    "Map entries must be {'key', 'value'} objects or pairs",
                    field=format_type(type_expr),
                    value=entry,
                )
        return pairs

    def _result(self, value: Any, type_expr: Composite, schema_hint: Parameter | None) -> Any:
        if not is_result_shape(value):
            logger.warning(
                "Result value for %s needs exactly one of ok/err; passing through",
                format_type(type_expr),
            )
            return value

        key = "ok" if "ok" in value else "err"
        index = 0 if key == "ok" else 1
        payload = self.to_wire_value(
            value[key], type_expr.children[index], _element_hint(schema_hint, index)
        )
        return _map_scval([stellar_xdr.SCMapEntry(key=scval.to_symbol(key), val=payload)])

    # ------------------------------------------------------------------
    # User-defined types
    # ------------------------------------------------------------------
    def _named(self, value: Any, type_expr: Named, schema_hint: Parameter | None) -> Any:
        if schema_hint is not None and schema_hint.enum_metadata is not None:
            return self._enum(value, schema_hint.enum_metadata)
        if schema_hint is not None and schema_hint.components is not None:
            return self._record(value, type_expr, schema_hint.components)
        raise ConversionError(
            f"No schema available for user-defined type {type_expr.identifier}",
            field=type_expr.identifier,
            value=value,
        )

    def _enum(self, value: Any, metadata: EnumMetadata) -> stellar_xdr.SCVal:
        if metadata.is_integer_enum:
            return self._integer_enum(value, metadata)

        if isinstance(value, str):
            tag, values = value, []
        elif isinstance(value, Mapping) and "tag" in value:
            tag, values = value["tag"], value.get("values") or []
        else:
            raise ConversionError(
                f"Enum {metadata.name} expects a tag or {{'tag', 'values'}} object",
                field=metadata.name,
                value=value,
            )

        variant = metadata.variant(tag)
        if variant is None:
            raise ConversionError(
                f"Unknown variant {tag!r} for enum {metadata.name}", field=metadata.name, value=tag
            )

        if variant.kind is VariantKind.VOID:
            return scval.to_vec([scval.to_symbol(variant.name)])

        values = list(_as_sequence(values, Named(metadata.name)))
        if variant.is_single_tuple_payload:
            tuple_type = variant.payload_types[0]
            if not (len(values) == 1 and isinstance(values[0], list | tuple)):
                values = [values]
            payload = [self.to_wire_value(values[0], tuple_type, variant.payload_hint(0))]
        else:
            if len(values) != len(variant.payload_types):
                raise ConversionError(
                    f"Variant {variant.name} expects {len(variant.payload_types)} values, "
                    f"got {len(values)}",
                    field=metadata.name,
                    value=value,
                )
            payload = [
                self.to_wire_value(item, payload_type, variant.payload_hint(index))
                for index, (item, payload_type) in enumerate(zip(values, variant.payload_types))
            ]

        return scval.to_vec([scval.to_symbol(variant.name), *payload])

    def _integer_enum(self, value: Any, metadata: EnumMetadata) -> stellar_xdr.SCVal:
        if isinstance(value, Mapping) and "tag" in value:
            value = value["tag"]

        for variant in metadata.variants:
            if value == variant.name or (
                isinstance(value, int) and not isinstance(value, bool) and value == variant.value
            ):
                return scval.to_uint32(variant.value or 0)

        raise ConversionError(
            f"Unknown variant {value!r} for enum {metadata.name}", field=metadata.name, value=value
        )

    def _record(
        self, value: Any, type_expr: Named, components: Sequence[Parameter]
    ) -> stellar_xdr.SCVal:
        name = type_expr.identifier
        if components and all(component.name.isdigit() for component in components):
            if isinstance(value, Mapping):
                value = [value.get(component.name) for component in components]
            items = _as_sequence(value, type_expr)
            if len(items) != len(components):
                raise ConversionError(
                    f"{name} expects {len(components)} values, got {len(items)}",
                    field=name,
                    value=value,
                )
            return scval.to_vec(
                [
                    self.to_wire_value(item, component.type, component)
                    for item, component in zip(items, components)
                ]
            )

        if not isinstance(value, Mapping):
            raise ConversionError(f"Expected an object for {name}", field=name, value=value)

        expected = {component.name for component in components}
        missing = [component.name for component in components if component.name not in value]
        unknown = sorted(set(value) - expected)
        if missing or unknown:
            raise ConversionError(
                f"Fields of {name} do not match its definition",
                field=name,
                value=value,
                details={"missing": missing, "unknown": unknown},
            )

        entries = [
            stellar_xdr.SCMapEntry(
                key=scval.to_symbol(component.name),
                val=self.to_wire_value(value[component.name], component.type, component),
            )
            for component in components
        ]
        return _map_scval(sort_map_entries(entries))
