"""Type definitions and data models for the Soroban introspection layer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from stellar_sdk import xdr as stellar_xdr


class CompositeKind(str, Enum):
    """Generic container kinds a contract interface can express."""

    VEC = "Vec"
    MAP = "Map"
    OPTION = "Option"
    TUPLE = "Tuple"
    RESULT = "Result"


@dataclass(frozen=True)
class Primitive:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Composite:
    kind: CompositeKind
    children: tuple[TypeExpression, ...]

    def __str__(self) -> str:
        return format_type(self)


@dataclass(frozen=True)
class Named:
    """Reference to a user-defined struct, union or enum."""

    identifier: str

    def __str__(self) -> str:
        return self.identifier


TypeExpression = Primitive | Composite | Named


def format_type(expr: TypeExpression) -> str:
    """Serialise a type tree back into its textual form."""

    if isinstance(expr, Composite):
        inner = ", ".join(format_type(child) for child in expr.children)
        return f"{expr.kind.value}<{inner}>"
    if isinstance(expr, Primitive):
        return expr.name
    return expr.identifier


class ExecutableKind(str, Enum):
    """What backs a deployed contract instance."""

    ASSET_BACKED = "AssetBacked"
    BYTECODE = "Bytecode"
    UNKNOWN = "Unknown"


class StateMutability(str, Enum):
    VIEW = "view"
    PURE = "pure"
    NONPAYABLE = "nonpayable"


class ExecutionState(str, Enum):
    """Lifecycle of a single transaction submission."""

    IDLE = "idle"
    PENDING_SIGNATURE = "pendingSignature"
    PENDING_CONFIRMATION = "pendingConfirmation"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ExecutionState.SUCCESS, ExecutionState.ERROR)


class VariantKind(str, Enum):
    VOID = "void"
    TUPLE = "tuple"
    INTEGER = "integer"


@dataclass(frozen=True)
class EnumVariant:
    name: str
    kind: VariantKind
    payload_types: tuple[TypeExpression, ...] = ()
    value: int | None = None
    payload_hints: tuple[Parameter, ...] = field(default=(), compare=False, repr=False)

    @property
    def is_single_tuple_payload(self) -> bool:
        return (
            len(self.payload_types) == 1
            and isinstance(self.payload_types[0], Composite)
            and self.payload_types[0].kind is CompositeKind.TUPLE
        )

    def payload_hint(self, index: int) -> Parameter | None:
        return self.payload_hints[index] if index < len(self.payload_hints) else None


@dataclass(frozen=True)
class EnumMetadata:
    """Variant catalogue of a tagged union or integer enum.

    Only used while converting values; it is not part of the rendered schema.
    """

    name: str
    variants: tuple[EnumVariant, ...]

    @property
    def is_unit_only(self) -> bool:
        return all(variant.kind is not VariantKind.TUPLE for variant in self.variants)

    @property
    def is_integer_enum(self) -> bool:
        return bool(self.variants) and all(
            variant.kind is VariantKind.INTEGER for variant in self.variants
        )

    def variant(self, name: str) -> EnumVariant | None:
        for variant in self.variants:
            if variant.name == name:
                return variant
        return None


@dataclass(frozen=True)
class Parameter:
    """A named, typed value slot.

    ``element_hints`` carries one hint per child of a ``Map``, ``Tuple`` or
    ``Result`` type when one of those children refers to a user-defined type.
    """

    name: str
    type: TypeExpression
    components: tuple[Parameter, ...] | None = None
    enum_metadata: EnumMetadata | None = None
    element_hints: tuple[Parameter, ...] | None = None

    @property
    def type_name(self) -> str:
        return format_type(self.type)

    def component(self, name: str) -> Parameter | None:
        for component in self.components or ():
            if component.name == name:
                return component
        return None

    def element_hint(self, index: int) -> Parameter | None:
        hints = self.element_hints or ()
        return hints[index] if index < len(hints) else None


@dataclass(frozen=True)
class Output:
    type: TypeExpression
    name: str = ""

    @property
    def type_name(self) -> str:
        return format_type(self.type)


@dataclass(frozen=True)
class FunctionSignature:
    id: str
    name: str
    display_name: str
    description: str
    inputs: tuple[Parameter, ...] = ()
    outputs: tuple[Output, ...] = ()
    modifies_state: bool = True
    state_mutability: StateMutability = StateMutability.NONPAYABLE

    @property
    def is_view(self) -> bool:
        return self.state_mutability in (StateMutability.VIEW, StateMutability.PURE)


@dataclass(frozen=True)
class ContractSchema:
    """Function catalogue of one loaded contract."""

    name: str
    functions: tuple[FunctionSignature, ...]
    ecosystem: str = "stellar"
    address: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def get_function(self, function_id: str) -> FunctionSignature | None:
        """Look a function up by id, falling back to its (unique) name."""

        for function in self.functions:
            if function.id == function_id:
                return function
        matches = [function for function in self.functions if function.name == function_id]
        if len(matches) == 1:
            return matches[0]
        return None

    def writable_functions(self) -> list[FunctionSignature]:
        return [function for function in self.functions if not function.is_view]

    def view_functions(self) -> list[FunctionSignature]:
        return [function for function in self.functions if function.is_view]

    @property
    def spec_entries(self) -> tuple[stellar_xdr.SCSpecEntry, ...]:
        return tuple(self.metadata.get("specEntries", ()))


@dataclass(frozen=True)
class SacSpecCacheEntry:
    """Decoded well-known interface description shared by all asset contracts."""

    source_key: str
    encoded_entries: tuple[str, ...]
    decoded_entries: tuple[stellar_xdr.SCSpecEntry, ...]


@dataclass(frozen=True)
class WireTransaction:
    """A contract invocation whose arguments are already SCVal-encoded."""

    contract_id: str
    function_name: str
    args: tuple[stellar_xdr.SCVal, ...] = ()


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of a speculative, non-committing invocation."""

    success: bool
    read_write_keys: int = 0
    error: str | None = None

    @property
    def modifies_state(self) -> bool:
        return not self.success or self.read_write_keys > 0


@dataclass(frozen=True)
class TransactionStatusResult:
    status: str
    tx_hash: str
    result_xdr: str | None = None
    ledger: int | None = None
    raw_response: Any = None


@dataclass(frozen=True)
class SubmissionReceipt:
    tx_hash: str
    details: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class ExecutionResult:
    """Final outcome of an execution attempt."""

    state: ExecutionState
    tx_hash: str | None = None
    receipt: TransactionStatusResult | None = None
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.state is ExecutionState.SUCCESS
