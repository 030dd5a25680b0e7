"""Struct and enum metadata resolution for contract spec entries."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from stellar_sdk import xdr as stellar_xdr

from ..constants import UNKNOWN_TYPE_NAME
from ..exceptions import ParseError, ValidationError
from ..parser import parse_type
from ..types import (
    Composite,
    CompositeKind,
    EnumMetadata,
    EnumVariant,
    Named,
    Parameter,
    TypeExpression,
    VariantKind,
)
from ..utils import xdr_text, xdr_uint
from .spec_types import describe_spec_type

logger = logging.getLogger(__name__)

_UDT_ATTRIBUTES = (
    "udt_struct_v0",
    "udt_union_v0",
    "udt_enum_v0",
    "udt_error_enum_v0",
)


def entry_name(entry: stellar_xdr.SCSpecEntry) -> str | None:
    """Name of a user-defined type entry, ``None`` for functions and events."""

    for attr in _UDT_ATTRIBUTES:
        body = getattr(entry, attr, None)
        if body is not None:
            return xdr_text(body.name)
    return None


class SpecMetadata:
    """Index user-defined types of one contract and resolve parameter metadata."""

    def __init__(self, entries: Iterable[stellar_xdr.SCSpecEntry], *, strict_types: bool = False):
        self._strict_types = strict_types
        self._by_name: dict[str, stellar_xdr.SCSpecEntry] = {}
        for entry in entries:
            name = entry_name(entry)
            if name:
                self._by_name[name] = entry

    @property
    def types(self) -> Mapping[str, stellar_xdr.SCSpecEntry]:
        return self._by_name

    # ------------------------------------------------------------------
    # Type resolution
    # ------------------------------------------------------------------
    def resolve_type(self, type_def: stellar_xdr.SCSpecTypeDef) -> TypeExpression:
        """Render and parse a spec type into a type expression.

        Raises:
            ValidationError: The type definition is unsupported and strict typing is on.
            ParseError: The rendered type string is rejected by the parser.
        """
        resolution = describe_spec_type(type_def)
        if not resolution.ok:
            if self._strict_types:
                raise ValidationError(resolution.warning or "Unsupported spec type", field="type")
            logger.warning("Degrading to placeholder type: %s", resolution.warning)
            return Named(UNKNOWN_TYPE_NAME)
        return parse_type(resolution.type_name)

    def _resolve_or_placeholder(self, type_def: stellar_xdr.SCSpecTypeDef) -> TypeExpression:
        try:
            return self.resolve_type(type_def)
        except ParseError as exc:
            logger.warning("Unparseable nested type: %s", exc.message)
            return Named(UNKNOWN_TYPE_NAME)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------
    def build_parameter(
        self, name: str, type_expr: TypeExpression, _seen: frozenset[str] = frozenset()
    ) -> Parameter:
        """Attach record components, enum metadata or element hints to a parameter.

        ``Vec`` and ``Option`` share the hint of their element; ``Map``,
        ``Tuple`` and ``Result`` get one hint per child.
        """
        target = _hint_target(type_expr)
        components = None
        enum_metadata = None
        element_hints = None
        if isinstance(target, Named) and target.identifier in self._by_name:
            components = self.struct_components(target.identifier, _seen)
            if components is None:
                enum_metadata = self.enum_metadata(target.identifier, _seen)
        elif isinstance(target, Composite) and self._refers_to_udt(target):
            element_hints = tuple(
                self.build_parameter(str(index), child, _seen)
                for index, child in enumerate(target.children)
            )
        return Parameter(
            name=name,
            type=type_expr,
            components=components,
            enum_metadata=enum_metadata,
            element_hints=element_hints,
        )

    def _refers_to_udt(self, type_expr: TypeExpression) -> bool:
        if isinstance(type_expr, Named):
            return type_expr.identifier in self._by_name
        if isinstance(type_expr, Composite):
            return any(self._refers_to_udt(child) for child in type_expr.children)
        return False

    def struct_components(
        self, name: str, _seen: frozenset[str] = frozenset()
    ) -> tuple[Parameter, ...] | None:
        """Field parameters of struct ``name``; ``None`` when it is not a struct."""

        entry = self._by_name.get(name)
        struct = getattr(entry, "udt_struct_v0", None)
        if struct is None:
            return None
        if name in _seen:
            logger.warning("Recursive struct %s; nested components omitted", name)
            return ()

        seen = _seen | {name}
        components = []
        for field in struct.fields or []:
            field_name = xdr_text(field.name)
            field_type = self._resolve_or_placeholder(field.type)
            components.append(self.build_parameter(field_name, field_type, seen))

        if not components:
            logger.warning("Struct %s declares no fields", name)
        return tuple(components)

    def enum_metadata(
        self, name: str, _seen: frozenset[str] = frozenset()
    ) -> EnumMetadata | None:
        entry = self._by_name.get(name)
        if entry is None:
            return None

        union = getattr(entry, "udt_union_v0", None)
        if union is not None:
            seen: frozenset[str] | None = _seen | {name}
            if name in _seen:
                logger.warning("Recursive union %s; payload hints omitted", name)
                seen = None
            return EnumMetadata(
                name, tuple(self._union_variant(case, seen) for case in union.cases)
            )

        enum = getattr(entry, "udt_enum_v0", None)
        if enum is not None:
            return EnumMetadata(
                name,
                tuple(
                    EnumVariant(
                        xdr_text(case.name), VariantKind.INTEGER, value=xdr_uint(case.value)
                    )
                    for case in enum.cases
                ),
            )

        return None

    def is_struct(self, name: str) -> bool:
        return getattr(self._by_name.get(name), "udt_struct_v0", None) is not None

    def _union_variant(
        self, case: stellar_xdr.SCSpecUDTUnionCaseV0, seen: frozenset[str] | None
    ) -> EnumVariant:
        if case.tuple_case is not None:
            payload = tuple(
                self._resolve_or_placeholder(type_def) for type_def in case.tuple_case.type
            )
            hints: tuple[Parameter, ...] = ()
            if seen is not None:
                hints = tuple(
                    self.build_parameter(str(index), type_expr, seen)
                    for index, type_expr in enumerate(payload)
                )
            return EnumVariant(
                xdr_text(case.tuple_case.name), VariantKind.TUPLE, payload, payload_hints=hints
            )
        return EnumVariant(xdr_text(case.void_case.name), VariantKind.VOID)


def _hint_target(type_expr: TypeExpression) -> TypeExpression:
    while isinstance(type_expr, Composite) and type_expr.kind in (
        CompositeKind.VEC,
        CompositeKind.OPTION,
    ):
        type_expr = type_expr.children[0]
    return type_expr
