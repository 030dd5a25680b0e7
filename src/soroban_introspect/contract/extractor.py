"""Build function catalogues from contract interface descriptions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from stellar_sdk import Keypair
from stellar_sdk import xdr as stellar_xdr

from ..base import LedgerClient
from ..constants import UNKNOWN_TYPE_NAME
from ..exceptions import MissingContractDataError
from ..transform.converter import ValueConverter
from ..transform.primitives import bytes_n_length, is_integer_tag, primitive_wire_tag
from ..types import (
    Composite,
    CompositeKind,
    ExecutableKind,
    FunctionSignature,
    Named,
    Output,
    Parameter,
    Primitive,
    StateMutability,
    TypeExpression,
    VariantKind,
    format_type,
)
from ..utils import display_name, xdr_text
from .config import SacSpecSource
from .metadata import SpecMetadata
from .sac import SacSpecCache

logger = logging.getLogger(__name__)


class SpecExtractor:
    """Turn spec entries into :class:`FunctionSignature` objects.

    Each function is processed independently and concurrently; a failure in
    one produces a placeholder signature without affecting the others.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        sac_cache: SacSpecCache,
        *,
        strict_types: bool = False,
        simulation_source: str | None = None,
        sac_source: SacSpecSource | None = None,
    ) -> None:
        self._ledger = ledger
        self._sac_cache = sac_cache
        self._strict_types = strict_types
        self._simulation_source = simulation_source or Keypair.random().public_key
        self._sac_source = sac_source or SacSpecSource()
        self._converter = ValueConverter()

    async def resolve_entries(
        self,
        spec_entries: Sequence[stellar_xdr.SCSpecEntry] | None,
        contract_id: str | None,
        executable_kind: ExecutableKind,
    ) -> list[stellar_xdr.SCSpecEntry]:
        """Select the interface description for the contract's executable kind."""

        if executable_kind is ExecutableKind.ASSET_BACKED:
            cached = await self._sac_cache.get(self._sac_source)
            return list(cached.decoded_entries)

        if spec_entries is not None:
            return list(spec_entries)

        if contract_id:
            if executable_kind is ExecutableKind.UNKNOWN:
                logger.info("Unknown executable for %s; reading contract code", contract_id)
            return await self._ledger.get_contract_spec(contract_id)

        raise MissingContractDataError(
            f"No interface description available for {contract_id}", contract_id=contract_id
        )

    async def extract(
        self,
        spec_entries: Sequence[stellar_xdr.SCSpecEntry] | None,
        contract_id: str | None,
        executable_kind: ExecutableKind,
    ) -> list[FunctionSignature]:
        entries = await self.resolve_entries(spec_entries, contract_id, executable_kind)
        metadata = SpecMetadata(entries, strict_types=self._strict_types)
        functions = [
            entry.function_v0
            for entry in entries
            if entry.kind == stellar_xdr.SCSpecEntryKind.SC_SPEC_ENTRY_FUNCTION_V0
        ]
        logger.info("Found %d functions in contract spec", len(functions))

        results = await asyncio.gather(
            *(
                self._extract_function(index, function, metadata, contract_id)
                for index, function in enumerate(functions)
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)

    # ------------------------------------------------------------------
    # Per-function work
    # ------------------------------------------------------------------
    async def _extract_function(
        self,
        index: int,
        function: stellar_xdr.SCSpecFunctionV0,
        metadata: SpecMetadata,
        contract_id: str | None,
    ) -> FunctionSignature:
        try:
            name = xdr_text(function.name)
            inputs = tuple(
                self._extract_input(position, spec_input, metadata, name)
                for position, spec_input in enumerate(function.inputs or [])
            )
            outputs = tuple(
                self._extract_output(position, output, metadata)
                for position, output in enumerate(function.outputs or [])
            )
        except Exception as exc:
            if self._strict_types:
                raise
            logger.exception("Failed to process function %d", index)
            return _placeholder_function(index, exc)

        mutability = await self._classify(contract_id, name, inputs)
        signature = FunctionSignature(
            id=f"{name}_{'_'.join(param.type_name for param in inputs)}",
            name=name,
            display_name=display_name(name),
            description=xdr_text(function.doc) or f"Soroban function: {name}",
            inputs=inputs,
            outputs=outputs,
            modifies_state=mutability is StateMutability.NONPAYABLE,
            state_mutability=mutability,
        )
        logger.debug("Extracted %s (%s)", signature.id, mutability.value)
        return signature

    def _extract_input(
        self,
        position: int,
        spec_input: stellar_xdr.SCSpecFunctionInputV0,
        metadata: SpecMetadata,
        function_name: str,
    ) -> Parameter:
        try:
            name = xdr_text(spec_input.name) or f"param_{position}"
            type_expr = metadata.resolve_type(spec_input.type)
            if type_expr == Named(UNKNOWN_TYPE_NAME):
                logger.warning(
                    'Unknown type for parameter "%s" in function "%s"', name, function_name
                )
            return metadata.build_parameter(name, type_expr)
        except Exception as exc:
            if self._strict_types:
                raise
            logger.warning("Failed to parse input %d of %s: %s", position, function_name, exc)
            return Parameter(name=f"param_{position}", type=Named(UNKNOWN_TYPE_NAME))

    def _extract_output(
        self, position: int, output: stellar_xdr.SCSpecTypeDef, metadata: SpecMetadata
    ) -> Output:
        try:
            return Output(type=metadata.resolve_type(output), name=f"result_{position}")
        except Exception as exc:
            if self._strict_types:
                raise
            logger.warning("Failed to parse output %d: %s", position, exc)
            return Output(type=Named(UNKNOWN_TYPE_NAME), name=f"result_{position}")

    # ------------------------------------------------------------------
    # Read/write classification
    # ------------------------------------------------------------------
    async def _classify(
        self, contract_id: str | None, name: str, inputs: Sequence[Parameter]
    ) -> StateMutability:
        """Speculatively invoke ``name``; an empty write footprint means view."""

        if not contract_id:
            return StateMutability.NONPAYABLE

        try:
            args = [
                self._converter.to_wire_value(self._placeholder(param), param.type, param)
                for param in inputs
            ]
            result = await self._ledger.simulate_invocation(contract_id, name, args)
        except Exception as exc:
            logger.debug("Simulation of %s unavailable: %s", name, exc)
            return StateMutability.NONPAYABLE

        if result.modifies_state:
            if not result.success:
                logger.debug("Simulation of %s failed: %s", name, result.error)
            return StateMutability.NONPAYABLE
        return StateMutability.VIEW

    def _placeholder(self, param: Parameter) -> Any:
        return self._placeholder_for(param.type, param)

    def _placeholder_for(self, type_expr: TypeExpression, param: Parameter | None) -> Any:
        if isinstance(type_expr, Primitive):
            tag = primitive_wire_tag(type_expr.name)
            if is_integer_tag(tag):
                return 0
            if tag == "bool":
                return False
            if tag in ("string", "symbol"):
                return ""
            if tag == "bytes":
                return bytes(bytes_n_length(type_expr.name) or 0)
            if tag == "address":
                return self._simulation_source
            if tag in ("void", "val"):
                return None
            raise ValueError(f"No placeholder for {type_expr.name}")

        if isinstance(type_expr, Composite):
            if type_expr.kind is CompositeKind.OPTION:
                return None
            if type_expr.kind in (CompositeKind.VEC, CompositeKind.MAP):
                return []
            if type_expr.kind is CompositeKind.TUPLE:
                return [
                    self._placeholder_for(child, param.element_hint(index) if param else None)
                    for index, child in enumerate(type_expr.children)
                ]
            raise ValueError(f"No placeholder for {format_type(type_expr)}")

        if param is not None and param.enum_metadata is not None:
            first = param.enum_metadata.variants[0]
            if first.kind is VariantKind.TUPLE:
                return {
                    "tag": first.name,
                    "values": [
                        self._placeholder_for(child, first.payload_hint(index))
                        for index, child in enumerate(first.payload_types)
                    ],
                }
            return first.value if first.kind is VariantKind.INTEGER else first.name

        if param is not None and param.components is not None:
            return {
                component.name: self._placeholder_for(component.type, component)
                for component in param.components
            }

        raise ValueError(f"No placeholder for {format_type(type_expr)}")


def _placeholder_function(index: int, error: Exception) -> FunctionSignature:
    return FunctionSignature(
        id=f"function_{index}",
        name=f"function_{index}",
        display_name=f"Function {index}",
        description=f"Failed to parse function {index}: {error}",
        modifies_state=True,
        state_mutability=StateMutability.NONPAYABLE,
    )
