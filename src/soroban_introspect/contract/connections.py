"""Connection helpers for the Soroban RPC endpoint."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from stellar_sdk import Account, Keypair, SorobanServerAsync, TransactionBuilder
from stellar_sdk import xdr as stellar_xdr

from ..base import LedgerClient
from ..constants import DEFAULT_BASE_FEE, DEFAULT_TRANSACTION_TIMEOUT
from ..exceptions import MissingContractDataError, NetworkError, ValidationError
from ..types import SimulationResult, TransactionStatusResult
from .config import NetworkConfig
from .detection import contract_code_key, contract_instance_key, instance_executable
from .wasm import extract_spec_entries

logger = logging.getLogger(__name__)


class SorobanLedgerClient(LedgerClient):
    """Manage the asynchronous Soroban RPC client and expose ledger reads."""

    def __init__(
        self,
        network: NetworkConfig,
        *,
        user_rpc_url: str | None = None,
        app_rpc_url: str | None = None,
        simulation_source: str | None = None,
    ):
        self.network = network.with_overrides(user_rpc_url, app_rpc_url)
        self._simulation_source = simulation_source
        self._server: SorobanServerAsync | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def connect(self) -> None:
        rpc_url = self.network.soroban_rpc_url
        if rpc_url.startswith("http://") and not self.network.allow_http(rpc_url):
            raise ValidationError(
                "Insecure RPC URL; only localhost may use http", field="rpc_url", value=rpc_url
            )
        self._server = SorobanServerAsync(rpc_url)
        logger.info("Connected to Soroban RPC at %s", rpc_url)

    async def close(self) -> None:
        if self._server is not None:
            await self._server.close()
        self._server = None

    def is_connected(self) -> bool:
        return self._server is not None

    async def __aenter__(self) -> SorobanLedgerClient:
        self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def server(self) -> SorobanServerAsync:
        if self._server is None:
            raise NetworkError(
                "Soroban RPC client not connected; call connect() first",
                endpoint=self.network.soroban_rpc_url,
            )
        return self._server

    @property
    def simulation_source(self) -> str:
        if self._simulation_source is None:
            self._simulation_source = Keypair.random().public_key
        return self._simulation_source

    # ------------------------------------------------------------------
    # LedgerClient
    # ------------------------------------------------------------------
    async def get_ledger_entries(
        self, keys: Sequence[stellar_xdr.LedgerKey]
    ) -> list[stellar_xdr.LedgerEntryData]:
        server = self.server
        try:
            response = await server.get_ledger_entries(list(keys))
        except Exception as exc:
            raise NetworkError(
                "Failed to read ledger entries",
                endpoint=self.network.soroban_rpc_url,
                details={"error": str(exc)},
            ) from exc

        return [
            stellar_xdr.LedgerEntryData.from_xdr(entry.xdr) for entry in response.entries or []
        ]

    async def simulate_invocation(
        self, contract_id: str, function_name: str, args: Sequence[stellar_xdr.SCVal]
    ) -> SimulationResult:
        server = self.server
        transaction = (
            TransactionBuilder(
                Account(self.simulation_source, 0),
                self.network.network_passphrase,
                base_fee=DEFAULT_BASE_FEE,
            )
            .append_invoke_contract_function_op(contract_id, function_name, list(args))
            .set_timeout(DEFAULT_TRANSACTION_TIMEOUT)
            .build()
        )

        try:
            response = await server.simulate_transaction(transaction)
        except Exception as exc:
            raise NetworkError(
                f"Failed to simulate {function_name}",
                endpoint=self.network.soroban_rpc_url,
                details={"error": str(exc)},
            ) from exc

        if response.error or not response.transaction_data:
            return SimulationResult(success=False, error=response.error)

        data = stellar_xdr.SorobanTransactionData.from_xdr(response.transaction_data)
        read_write = data.resources.footprint.read_write or []
        return SimulationResult(success=True, read_write_keys=len(read_write))

    async def get_transaction_status(self, tx_hash: str) -> TransactionStatusResult:
        server = self.server
        try:
            response = await server.get_transaction(tx_hash)
        except Exception as exc:
            raise NetworkError(
                "Failed to fetch transaction status",
                endpoint=self.network.soroban_rpc_url,
                details={"error": str(exc), "hash": tx_hash},
            ) from exc

        status = getattr(response.status, "value", response.status)
        return TransactionStatusResult(
            status=str(status),
            tx_hash=tx_hash,
            result_xdr=response.result_xdr,
            ledger=response.ledger,
            raw_response=response,
        )

    async def get_contract_spec(self, contract_id: str) -> list[stellar_xdr.SCSpecEntry]:
        """Fetch the contract's bytecode and decode its embedded interface."""

        instances = await self.get_ledger_entries([contract_instance_key(contract_id)])
        executable = instance_executable(instances[0]) if instances else None
        if executable is None or executable.wasm_hash is None:
            raise MissingContractDataError(
                f"No published contract code found for {contract_id}", contract_id=contract_id
            )

        codes = await self.get_ledger_entries([contract_code_key(executable.wasm_hash)])
        if not codes or codes[0].contract_code is None:
            raise MissingContractDataError(
                f"Contract code for {contract_id} is not available on the ledger",
                contract_id=contract_id,
            )

        entries = extract_spec_entries(codes[0].contract_code.code)
        logger.debug("Decoded %d spec entries from %s bytecode", len(entries), contract_id)
        return entries
