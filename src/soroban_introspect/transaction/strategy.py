"""Execution strategy state machine: sign, submit, confirm."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..base import LedgerClient, SignerBackend
from ..constants import TX_STATUS_FAILED, TX_STATUS_SUCCESS
from ..contract.connections import SorobanLedgerClient
from ..exceptions import (
    ConfigurationError,
    ConfirmationFailedError,
    ConfirmationTimeoutError,
    SubmissionError,
    ValidationError,
)
from ..types import ExecutionResult, ExecutionState, WireTransaction
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

logger = logging.getLogger(__name__)

StateObserver = Callable[[ExecutionState, dict[str, Any]], None]


def select_signer(
    config: ExecutionConfig,
    ledger: LedgerClient,
    signers: Mapping[ExecutionMethod, SignerBackend] | None = None,
) -> SignerBackend:
    """Pick the signer backend for ``config``.

    Raises:
        ConfigurationError: The method is unknown or has no available backend.
    """
    method = getattr(config, "method", None)
    if signers and method in signers:
        return signers[method]

    if isinstance(config, EoaExecutionConfig):
        if not isinstance(ledger, SorobanLedgerClient):
            raise ConfigurationError(
                "EOA execution requires a SorobanLedgerClient", field="method", value="eoa"
            )
        return EoaSigner(ledger)
    if isinstance(config, RelayerExecutionConfig):
        return RelayerSigner()
    if isinstance(config, MultisigExecutionConfig):
        raise ConfigurationError(
            "Multisig execution method not yet implemented", field="method", value="multisig"
        )
    raise ConfigurationError(
        f"Unsupported execution method: {method}", field="method", value=config
    )


def _submission_error(function_name: str, exc: Exception) -> SubmissionError:
    if isinstance(exc, SubmissionError):
        return exc
    error = SubmissionError(
        f"Failed to submit {function_name}: {exc}", details={"error": str(exc)}
    )
    error.__cause__ = exc
    return error


class ExecutionStrategy:
    """Drive one transaction through ``idle -> pendingSignature -> pendingConfirmation``.

    Every attempt ends in ``success`` or ``error``; call :meth:`reset` before
    executing again.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        *,
        policy: ConfirmationPolicy | None = None,
        signers: Mapping[ExecutionMethod, SignerBackend] | None = None,
        on_state_change: StateObserver | None = None,
    ) -> None:
        self._ledger = ledger
        self._policy = policy or ConfirmationPolicy()
        self._signers = dict(signers or {})
        self._on_state_change = on_state_change
        self._state = ExecutionState.IDLE

    @property
    def state(self) -> ExecutionState:
        return self._state

    def reset(self) -> None:
        if self._state not in (ExecutionState.IDLE, ExecutionState.SUCCESS, ExecutionState.ERROR):
            raise ValidationError(
                "Cannot reset while a transaction is in flight", field="state", value=self._state
            )
        self._state = ExecutionState.IDLE

    async def execute(
        self,
        wire_tx: WireTransaction,
        config: ExecutionConfig | Mapping[str, Any],
    ) -> ExecutionResult:
        """Sign, submit and confirm ``wire_tx``.

        Submission and confirmation failures end in the ``error`` state and are
        reported on the result; configuration problems raise before any
        transition.

        Raises:
            ValidationError: The strategy is not idle.
            ConfigurationError: Unsupported or unavailable execution method.
        """
        if self._state is not ExecutionState.IDLE:
            raise ValidationError(
                f"Execution already in state {self._state.value}", field="state", value=self._state
            )

        if isinstance(config, Mapping):
            config = execution_config_from_mapping(config)
        signer = select_signer(config, self._ledger, self._signers)

        logger.debug("Stage exec [%s]: awaiting signature", wire_tx.function_name)
        self._transition(ExecutionState.PENDING_SIGNATURE, {"method": config.method.value})

        try:
            receipt = await signer.execute(wire_tx, config, self._forward_status)
        except Exception as exc:
            error = _submission_error(wire_tx.function_name, exc)
            logger.error("Submission of %s failed: %s", wire_tx.function_name, exc)
            self._transition(ExecutionState.ERROR, {"error": str(error)})
            return ExecutionResult(ExecutionState.ERROR, error=error)

        tx_hash = receipt.tx_hash
        logger.info("Transaction submitted for %s hash=%s", wire_tx.function_name, tx_hash)
        self._transition(ExecutionState.PENDING_CONFIRMATION, {"txHash": tx_hash})
        return await self._confirm(tx_hash)

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------
    async def _confirm(self, tx_hash: str) -> ExecutionResult:
        max_attempts = self._policy.max_attempts
        logger.debug(
            "Stage exec [%s]: poll confirmation (max_attempts=%s, interval=%s)",
            tx_hash,
            max_attempts,
            self._policy.interval,
        )

        for attempt in range(max_attempts):
            if attempt:
                await asyncio.sleep(self._policy.interval)

            try:
                status = await self._ledger.get_transaction_status(tx_hash)
            except Exception as exc:
                logger.warning(
                    "Confirmation poll error (attempt %s/%s): %s", attempt + 1, max_attempts, exc
                )
                continue

            if status.status == TX_STATUS_SUCCESS:
                logger.info("Transaction %s confirmed in ledger %s", tx_hash, status.ledger)
                self._transition(ExecutionState.SUCCESS, {"txHash": tx_hash})
                return ExecutionResult(ExecutionState.SUCCESS, tx_hash=tx_hash, receipt=status)

            if status.status == TX_STATUS_FAILED:
                error = ConfirmationFailedError(
                    f"Transaction {tx_hash} failed on-chain",
                    tx_hash=tx_hash,
                    details={"result_xdr": status.result_xdr},
                )
                logger.error("Transaction %s failed on-chain", tx_hash)
                self._transition(ExecutionState.ERROR, {"txHash": tx_hash, "error": str(error)})
                return ExecutionResult(
                    ExecutionState.ERROR, tx_hash=tx_hash, receipt=status, error=error
                )

            logger.debug(
                "Transaction %s status %s (attempt %s/%s)",
                tx_hash,
                status.status,
                attempt + 1,
                max_attempts,
            )

        timeout = ConfirmationTimeoutError(
            f"Transaction confirmation timed out after {max_attempts} attempts",
            tx_hash=tx_hash,
            attempts=max_attempts,
        )
        logger.error("Transaction %s confirmation timed out", tx_hash)
        self._transition(ExecutionState.ERROR, {"txHash": tx_hash, "error": str(timeout)})
        return ExecutionResult(ExecutionState.ERROR, tx_hash=tx_hash, error=timeout)

    # ------------------------------------------------------------------
    # Observer plumbing
    # ------------------------------------------------------------------
    def _transition(self, state: ExecutionState, details: dict[str, Any]) -> None:
        logger.debug("Execution state %s -> %s", self._state.value, state.value)
        self._state = state
        self._emit(details)

    def _forward_status(self, status: str, details: dict[str, Any]) -> None:
        self._emit({"status": status, **details})

    def _emit(self, details: dict[str, Any]) -> None:
        if self._on_state_change is None:
            return
        try:
            self._on_state_change(self._state, details)
        except Exception:
            logger.exception("State observer raised")
