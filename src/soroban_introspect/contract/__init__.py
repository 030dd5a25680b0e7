"""Contract detection, interface extraction and loading."""

from .config import MAINNET, TESTNET, LoaderConfig, NetworkConfig, SacSpecSource
from .connections import SorobanLedgerClient
from .detection import contract_instance_key, detect_contract_type, validate_contract_id
from .extractor import SpecExtractor
from .loader import ContractLoader, is_view_function, writable_functions
from .metadata import SpecMetadata
from .sac import SacSpecCache
from .spec_types import SpecTypeResolution, describe_spec_type

__all__ = [
    "MAINNET",
    "TESTNET",
    "ContractLoader",
    "LoaderConfig",
    "NetworkConfig",
    "SacSpecCache",
    "SacSpecSource",
    "SorobanLedgerClient",
    "SpecExtractor",
    "SpecMetadata",
    "SpecTypeResolution",
    "contract_instance_key",
    "describe_spec_type",
    "detect_contract_type",
    "is_view_function",
    "validate_contract_id",
    "writable_functions",
]
