"""Execution method configuration for transaction submission."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..constants import (
    DEFAULT_BASE_FEE,
    DEFAULT_CONFIRMATION_ATTEMPTS,
    DEFAULT_CONFIRMATION_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TRANSACTION_TIMEOUT,
)
from ..exceptions import ConfigurationError

DEFAULT_RELAYER_POLL_INTERVAL = 2.0
DEFAULT_RELAYER_MAX_POLLS = 150


class ExecutionMethod(str, Enum):
    EOA = "eoa"
    RELAYER = "relayer"
    MULTISIG = "multisig"


@dataclass(frozen=True)
class EoaExecutionConfig:
    """Sign locally with a Stellar secret seed."""

    secret_key: str = field(repr=False)
    allow_any: bool = True
    specific_address: str | None = None
    base_fee: int = DEFAULT_BASE_FEE
    timeout: int = DEFAULT_TRANSACTION_TIMEOUT

    @property
    def method(self) -> ExecutionMethod:
        return ExecutionMethod.EOA


@dataclass(frozen=True)
class RelayerExecutionConfig:
    """Submit through an HTTP relayer service that signs and pays fees."""

    service_url: str
    relayer_id: str
    relayer_address: str
    network: str = "testnet"
    api_key: str | None = field(default=None, repr=False)
    transaction_options: Mapping[str, Any] = field(default_factory=dict)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    poll_interval: float = DEFAULT_RELAYER_POLL_INTERVAL
    max_polls: int = DEFAULT_RELAYER_MAX_POLLS

    @property
    def method(self) -> ExecutionMethod:
        return ExecutionMethod.RELAYER


@dataclass(frozen=True)
class MultisigExecutionConfig:
    signers: tuple[str, ...] = ()
    threshold: int = 1

    @property
    def method(self) -> ExecutionMethod:
        return ExecutionMethod.MULTISIG


ExecutionConfig = EoaExecutionConfig | RelayerExecutionConfig | MultisigExecutionConfig


@dataclass(frozen=True)
class ConfirmationPolicy:
    """Fixed-interval confirmation polling with a hard attempt ceiling."""

    max_attempts: int = DEFAULT_CONFIRMATION_ATTEMPTS
    interval: float = DEFAULT_CONFIRMATION_INTERVAL


def execution_config_from_mapping(data: Mapping[str, Any]) -> ExecutionConfig:
    """Build a typed execution config from a plain mapping with a ``method`` key.

    Raises:
        ConfigurationError: Unknown method or missing required settings.
    """
    raw_method = data.get("method")
    try:
        method = ExecutionMethod(raw_method)
    except ValueError as exc:
        raise ConfigurationError(
            f"Unsupported execution method: {raw_method}", field="method", value=raw_method
        ) from exc

    options = {key: value for key, value in data.items() if key != "method"}
    config_type = {
        ExecutionMethod.EOA: EoaExecutionConfig,
        ExecutionMethod.RELAYER: RelayerExecutionConfig,
        ExecutionMethod.MULTISIG: MultisigExecutionConfig,
    }[method]

    if method is ExecutionMethod.MULTISIG and "signers" in options:
        options["signers"] = tuple(options["signers"])

    try:
        return config_type(**options)
    except TypeError as exc:
        raise ConfigurationError(
            f"Invalid {method.value} execution settings: {exc}",
            field="method",
            value=method.value,
        ) from exc
