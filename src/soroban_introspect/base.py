"""Soroban ledger and signer base interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any

from stellar_sdk import xdr as stellar_xdr

from .types import SimulationResult, SubmissionReceipt, TransactionStatusResult, WireTransaction

StatusCallback = Callable[[str, dict[str, Any]], None]


class LedgerClient(ABC):
    """Read access to the Soroban ledger used by detection, extraction and confirmation."""

    @abstractmethod
    async def get_ledger_entries(
        self, keys: Sequence[stellar_xdr.LedgerKey]
    ) -> list[stellar_xdr.LedgerEntryData]:
        pass

    @abstractmethod
    async def simulate_invocation(
        self, contract_id: str, function_name: str, args: Sequence[stellar_xdr.SCVal]
    ) -> SimulationResult:
        pass

    @abstractmethod
    async def get_transaction_status(self, tx_hash: str) -> TransactionStatusResult:
        pass

    @abstractmethod
    async def get_contract_spec(self, contract_id: str) -> list[stellar_xdr.SCSpecEntry]:
        pass


class SignerBackend(ABC):
    """Signs and submits a wire transaction, returning its hash."""

    @abstractmethod
    async def execute(
        self,
        wire_tx: WireTransaction,
        config: Any,
        on_status_change: StatusCallback | None = None,
    ) -> SubmissionReceipt:
        pass
