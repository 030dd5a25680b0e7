"""Soroban contract introspection - interface loading, value encoding and execution.

This library loads the callable interface of a deployed Soroban contract,
converts native Python values into ``SCVal`` wire values for its functions,
and drives signing, submission and confirmation of the resulting transaction.
"""

from .base import LedgerClient, SignerBackend
from .contract import (
    MAINNET,
    TESTNET,
    ContractLoader,
    LoaderConfig,
    NetworkConfig,
    SacSpecCache,
    SacSpecSource,
    SorobanLedgerClient,
    SpecExtractor,
    detect_contract_type,
    is_view_function,
    writable_functions,
)
from .exceptions import (
    ConfigurationError,
    ConfirmationFailedError,
    ConfirmationTimeoutError,
    ConversionError,
    DetectionError,
    MissingContractDataError,
    NetworkError,
    ParseError,
    ParseFailure,
    SorobanIntrospectError,
    SubmissionError,
    ValidationError,
)
from .parser import is_valid_type_string, parse_type, split_top_level, try_parse_type
from .transaction import (
    ConfirmationPolicy,
    EoaExecutionConfig,
    ExecutionMethod,
    ExecutionStrategy,
    MultisigExecutionConfig,
    RelayerExecutionConfig,
    execution_config_from_mapping,
)
from .transform import ValueConverter, compare_xdr, format_transaction, primitive_wire_tag
from .types import (
    Composite,
    CompositeKind,
    ContractSchema,
    EnumMetadata,
    EnumVariant,
    ExecutableKind,
    ExecutionResult,
    ExecutionState,
    FunctionSignature,
    Named,
    Output,
    Parameter,
    Primitive,
    StateMutability,
    TypeExpression,
    WireTransaction,
    format_type,
)

__version__ = "0.1.0"

__all__ = [
    # Interfaces
    "LedgerClient",
    "SignerBackend",
    # Contract loading
    "ContractLoader",
    "LoaderConfig",
    "NetworkConfig",
    "MAINNET",
    "TESTNET",
    "SacSpecCache",
    "SacSpecSource",
    "SorobanLedgerClient",
    "SpecExtractor",
    "detect_contract_type",
    "is_view_function",
    "writable_functions",
    # Parsing and conversion
    "parse_type",
    "try_parse_type",
    "is_valid_type_string",
    "split_top_level",
    "format_type",
    "ValueConverter",
    "compare_xdr",
    "format_transaction",
    "primitive_wire_tag",
    # Execution
    "ConfirmationPolicy",
    "EoaExecutionConfig",
    "ExecutionMethod",
    "ExecutionStrategy",
    "MultisigExecutionConfig",
    "RelayerExecutionConfig",
    "execution_config_from_mapping",
    # Types and enums
    "Composite",
    "CompositeKind",
    "ContractSchema",
    "EnumMetadata",
    "EnumVariant",
    "ExecutableKind",
    "ExecutionResult",
    "ExecutionState",
    "FunctionSignature",
    "Named",
    "Output",
    "Parameter",
    "Primitive",
    "StateMutability",
    "TypeExpression",
    "WireTransaction",
    # Exceptions
    "SorobanIntrospectError",
    "ConfigurationError",
    "ConfirmationFailedError",
    "ConfirmationTimeoutError",
    "ConversionError",
    "DetectionError",
    "MissingContractDataError",
    "NetworkError",
    "ParseError",
    "ParseFailure",
    "SubmissionError",
    "ValidationError",
]
