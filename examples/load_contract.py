"""Example: Load a deployed Soroban contract and list its functions."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from soroban_introspect import TESTNET, ContractLoader, SorobanLedgerClient

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


async def main() -> None:
    """Print every function of ``CONTRACT_ID`` with its inputs and mutability."""

    contract_id = os.getenv("CONTRACT_ID")
    if not contract_id:
        raise ValueError("CONTRACT_ID not found in environment variables")

    async with SorobanLedgerClient(TESTNET, user_rpc_url=os.getenv("SOROBAN_RPC_URL")) as ledger:
        schema = await ContractLoader(ledger).load_contract(contract_id)

    print(f"{schema.name} ({schema.metadata['executableKind']})")
    for function in schema.functions:
        inputs = ", ".join(f"{param.name}: {param.type_name}" for param in function.inputs)
        outputs = ", ".join(output.type_name for output in function.outputs) or "Void"
        print(f"  {function.name}({inputs}) -> {outputs} [{function.state_mutability.value}]")


if __name__ == "__main__":
    asyncio.run(main())
