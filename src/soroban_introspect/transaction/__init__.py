"""Transaction signing, submission and confirmation."""

from .config import (
    ConfirmationPolicy,
    EoaExecutionConfig,
    ExecutionConfig,
    ExecutionMethod,
    MultisigExecutionConfig,
    RelayerExecutionConfig,
    execution_config_from_mapping,
)
from .signers import EoaSigner, RelayerSigner
from .strategy import ExecutionStrategy, select_signer

__all__ = [
    "ConfirmationPolicy",
    "EoaExecutionConfig",
    "EoaSigner",
    "ExecutionConfig",
    "ExecutionMethod",
    "ExecutionStrategy",
    "MultisigExecutionConfig",
    "RelayerExecutionConfig",
    "RelayerSigner",
    "execution_config_from_mapping",
    "select_signer",
]
