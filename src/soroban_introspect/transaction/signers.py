"""Built-in signer backends."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import requests
from stellar_sdk import Keypair, TransactionBuilder

from ..base import SignerBackend, StatusCallback
from ..contract.connections import SorobanLedgerClient
from ..exceptions import ConfigurationError, NetworkError, SubmissionError, ValidationError
from ..types import SubmissionReceipt, WireTransaction
from .config import EoaExecutionConfig, RelayerExecutionConfig

logger = logging.getLogger(__name__)

_RELAYER_DONE = frozenset({"mined", "confirmed"})
_RELAYER_FAILED = frozenset({"failed", "canceled", "expired"})


def _notify(callback: StatusCallback | None, status: str, details: dict[str, Any]) -> None:
    if callback is not None:
        callback(status, details)


class EoaSigner(SignerBackend):
    """Sign with a local keypair and submit through the Soroban RPC endpoint."""

    def __init__(self, ledger: SorobanLedgerClient) -> None:
        self._ledger = ledger

    async def execute(
        self,
        wire_tx: WireTransaction,
        config: Any,
        on_status_change: StatusCallback | None = None,
    ) -> SubmissionReceipt:
        if not isinstance(config, EoaExecutionConfig):
            raise ConfigurationError(
                "EOA signer requires an EoaExecutionConfig", field="method", value=config
            )

        try:
            keypair = Keypair.from_secret(config.secret_key)
        except Exception as exc:
            raise ValidationError(
                "Failed to derive signer keypair from provided secret key",
                field="secret_key",
                details={"error": str(exc)},
            ) from exc

        if not config.allow_any and config.specific_address not in (None, keypair.public_key):
            raise ValidationError(
                "Signer does not match the required address",
                field="specific_address",
                value=config.specific_address,
                details={"signer": keypair.public_key},
            )

        server = self._ledger.server
        network = self._ledger.network
        _notify(on_status_change, "preparing", {"source": keypair.public_key})

        try:
            account = await server.load_account(keypair.public_key)
            transaction = (
                TransactionBuilder(account, network.network_passphrase, base_fee=config.base_fee)
                .append_invoke_contract_function_op(
                    wire_tx.contract_id, wire_tx.function_name, list(wire_tx.args)
                )
                .set_timeout(config.timeout)
                .build()
            )
            prepared = await server.prepare_transaction(transaction)
            prepared.sign(keypair)
            response = await server.send_transaction(prepared)
        except Exception as exc:
            raise SubmissionError(
                f"Failed to submit {wire_tx.function_name}", details={"error": str(exc)}
            ) from exc

        status = str(getattr(response.status, "value", response.status))
        if status != "PENDING":
            raise SubmissionError(
                f"Transaction failed to submit: {status}",
                details={"status": status, "error_result_xdr": response.error_result_xdr},
            )

        logger.info("Transaction sent for %s hash=%s", wire_tx.function_name, response.hash)
        return SubmissionReceipt(tx_hash=response.hash, details={"status": status})


class RelayerSigner(SignerBackend):
    """Delegate signing and fee payment to an HTTP relayer service."""

    def __init__(self, session: requests.Session | None = None) -> None:
        self._session = session or requests.Session()

    async def execute(
        self,
        wire_tx: WireTransaction,
        config: Any,
        on_status_change: StatusCallback | None = None,
    ) -> SubmissionReceipt:
        if not isinstance(config, RelayerExecutionConfig):
            raise ConfigurationError(
                "Relayer signer requires a RelayerExecutionConfig", field="method", value=config
            )

        transaction_id = await asyncio.to_thread(self._submit, wire_tx, config)
        _notify(on_status_change, "pendingRelayer", {"transactionId": transaction_id})
        logger.info("Relayer accepted %s as %s", wire_tx.function_name, transaction_id)

        tx_hash = await self._poll_for_hash(config, transaction_id)
        return SubmissionReceipt(tx_hash=tx_hash, details={"transactionId": transaction_id})

    def _submit(self, wire_tx: WireTransaction, config: RelayerExecutionConfig) -> str:
        payload: dict[str, Any] = {
            "network": config.network,
            "source_account": config.relayer_address,
            "operations": [
                {
                    "type": "invoke_contract",
                    "contract_address": wire_tx.contract_id,
                    "function_name": wire_tx.function_name,
                    "args": [{"xdr": arg.to_xdr()} for arg in wire_tx.args],
                }
            ],
        }
        options = config.transaction_options
        for key in ("max_fee", "valid_until"):
            if options.get(key) is not None:
                payload[key] = options[key]

        data = self._request(
            "POST", config, f"/api/v1/relayers/{config.relayer_id}/transactions", json=payload
        )
        transaction_id = data.get("id") if isinstance(data, Mapping) else None
        if not transaction_id:
            raise SubmissionError(
                "Relayer API failed to return a transaction ID", details={"response": data}
            )
        return str(transaction_id)

    async def _poll_for_hash(self, config: RelayerExecutionConfig, transaction_id: str) -> str:
        path = f"/api/v1/relayers/{config.relayer_id}/transactions/{transaction_id}"
        for attempt in range(config.max_polls):
            data = await asyncio.to_thread(self._request, "GET", config, path)
            status = str(data.get("status", "")) if isinstance(data, Mapping) else ""

            if status in _RELAYER_DONE:
                tx_hash = data.get("hash")
                if not tx_hash:
                    raise SubmissionError(
                        f"Transaction is confirmed but no hash was returned for {transaction_id}"
                    )
                return str(tx_hash)

            if status in _RELAYER_FAILED:
                raise SubmissionError(
                    f"Relayer transaction {status}", details={"transactionId": transaction_id}
                )

            logger.debug(
                "Relayer transaction %s is %s (attempt %s/%s)",
                transaction_id,
                status or "unknown",
                attempt + 1,
                config.max_polls,
            )
            await asyncio.sleep(config.poll_interval)

        raise SubmissionError(f"Polling for transaction hash timed out for {transaction_id}")

    def _request(
        self,
        method: str,
        config: RelayerExecutionConfig,
        path: str,
        *,
        json: Mapping[str, Any] | None = None,
    ) -> Any:
        url = f"{config.service_url.rstrip('/')}{path}"
        headers = {"Authorization": f"Bearer {config.api_key}"} if config.api_key else {}
        try:
            response = self._session.request(
                method, url, json=json, headers=headers, timeout=config.request_timeout
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise NetworkError(
                "Relayer request failed",
                endpoint=url,
                status_code=getattr(getattr(exc, "response", None), "status_code", None),
                details={"error": str(exc)},
            ) from exc

        if isinstance(body, Mapping) and body.get("success") is False:
            raise SubmissionError(
                "Relayer request was rejected", details={"error": body.get("error")}
            )
        return body.get("data", body) if isinstance(body, Mapping) else body
