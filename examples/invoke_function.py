"""Example: Invoke a contract function signed with a local secret key."""

from __future__ import annotations

import asyncio
import json
import logging
import os

from dotenv import load_dotenv

from soroban_introspect import (
    TESTNET,
    ContractLoader,
    EoaExecutionConfig,
    ExecutionStrategy,
    SorobanLedgerClient,
    format_transaction,
)

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def _print_state(state, details) -> None:
    print(f"[{state.value}] {details}")


async def main() -> None:
    """Call ``FUNCTION_NAME`` on ``CONTRACT_ID`` with JSON ``FUNCTION_ARGS``."""

    secret_key = os.getenv("STELLAR_SECRET_KEY")
    if not secret_key:
        raise ValueError("STELLAR_SECRET_KEY not found in environment variables")
    contract_id = os.getenv("CONTRACT_ID")
    if not contract_id:
        raise ValueError("CONTRACT_ID not found in environment variables")
    function_name = os.getenv("FUNCTION_NAME", "increment")
    arguments = json.loads(os.getenv("FUNCTION_ARGS", "{}"))

    async with SorobanLedgerClient(TESTNET, user_rpc_url=os.getenv("SOROBAN_RPC_URL")) as ledger:
        schema = await ContractLoader(ledger).load_contract(contract_id)
        wire_tx = format_transaction(schema, function_name, arguments)

        strategy = ExecutionStrategy(ledger, on_state_change=_print_state)
        result = await strategy.execute(wire_tx, EoaExecutionConfig(secret_key=secret_key))

    if result.success:
        print(f"Transaction {result.tx_hash} confirmed in ledger {result.receipt.ledger}")
    else:
        print(f"Execution failed: {result.error}")


if __name__ == "__main__":
    asyncio.run(main())
