"""Constants and mappings for the Soroban introspection layer."""

# Type expression parsing limits
MAX_NESTING_DEPTH = 10
MAX_TYPE_STRING_LENGTH = 1000

# Soroban primitive type names as rendered from contract spec entries
PRIMITIVE_TYPE_NAMES = frozenset(
    {
        "Val",
        "Bool",
        "Void",
        "Error",
        "U32",
        "I32",
        "U64",
        "I64",
        "Timepoint",
        "Duration",
        "U128",
        "I128",
        "U256",
        "I256",
        "Bytes",
        "ScString",
        "ScSymbol",
        "String",
        "Symbol",
        "Address",
        "MuxedAddress",
    }
)

# Primitive type name to scval helper tag
PRIMITIVE_WIRE_TAGS = {
    "U32": "u32",
    "I32": "i32",
    "U64": "u64",
    "I64": "i64",
    "U128": "u128",
    "I128": "i128",
    "U256": "u256",
    "I256": "i256",
    "Bool": "bool",
    "Void": "void",
    "Timepoint": "timepoint",
    "Duration": "duration",
    "Bytes": "bytes",
    "ScString": "string",
    "String": "string",
    "ScSymbol": "symbol",
    "Symbol": "symbol",
    "Address": "address",
    "MuxedAddress": "address",
    "Val": "val",
}

# (bits, signed) per integer wire tag
INTEGER_WIDTHS = {
    "u32": (32, False),
    "i32": (32, True),
    "u64": (64, False),
    "i64": (64, True),
    "timepoint": (64, False),
    "duration": (64, False),
    "u128": (128, False),
    "i128": (128, True),
    "u256": (256, False),
    "i256": (256, True),
}

UNKNOWN_TYPE_NAME = "unknown"

# Well-known interface description for Stellar Asset Contracts
DEFAULT_SAC_SPEC_BASE_URL = "https://raw.githubusercontent.com"
DEFAULT_SAC_SPEC_REPOSITORY = "stellar/stellar-asset-contract-spec"
DEFAULT_SAC_SPEC_REF = "main"
DEFAULT_SAC_SPEC_PATH = "stellar-asset-spec.json"

# Network passphrases
TESTNET_PASSPHRASE = "Test SDF Network ; September 2015"
MAINNET_PASSPHRASE = "Public Global Stellar Network ; September 2015"
TESTNET_RPC_URL = "https://soroban-testnet.stellar.org"
MAINNET_RPC_URL = "https://mainnet.sorobanrpc.com"

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_CONFIRMATION_ATTEMPTS = 20
DEFAULT_CONFIRMATION_INTERVAL = 1.0
DEFAULT_TRANSACTION_TIMEOUT = 30
DEFAULT_BASE_FEE = 100

# Ledger transaction status values
TX_STATUS_SUCCESS = "SUCCESS"
TX_STATUS_FAILED = "FAILED"
TX_STATUS_NOT_FOUND = "NOT_FOUND"
