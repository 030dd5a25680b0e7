"""Classify what backs a deployed contract instance."""

from __future__ import annotations

import logging

from stellar_sdk import Address, StrKey
from stellar_sdk import xdr as stellar_xdr

from ..base import LedgerClient
from ..exceptions import DetectionError, MissingContractDataError, ValidationError
from ..types import ExecutableKind

logger = logging.getLogger(__name__)


def validate_contract_id(contract_id: str) -> str:
    if not isinstance(contract_id, str) or not StrKey.is_valid_contract(contract_id):
        raise ValidationError(
            f"Invalid contract address: {contract_id}", field="contract_id", value=contract_id
        )
    return contract_id


def contract_instance_key(contract_id: str) -> stellar_xdr.LedgerKey:
    """Ledger key of the persistent instance entry of ``contract_id``."""

    return stellar_xdr.LedgerKey(
        type=stellar_xdr.LedgerEntryType.CONTRACT_DATA,
        contract_data=stellar_xdr.LedgerKeyContractData(
            contract=Address(contract_id).to_xdr_sc_address(),
            key=stellar_xdr.SCVal(stellar_xdr.SCValType.SCV_LEDGER_KEY_CONTRACT_INSTANCE),
            durability=stellar_xdr.ContractDataDurability.PERSISTENT,
        ),
    )


def contract_code_key(wasm_hash: stellar_xdr.Hash) -> stellar_xdr.LedgerKey:
    return stellar_xdr.LedgerKey(
        type=stellar_xdr.LedgerEntryType.CONTRACT_CODE,
        contract_code=stellar_xdr.LedgerKeyContractCode(hash=wasm_hash),
    )


def instance_executable(
    entry: stellar_xdr.LedgerEntryData | None,
) -> stellar_xdr.ContractExecutable | None:
    """Pull the executable descriptor out of an instance entry, if present."""

    contract_data = getattr(entry, "contract_data", None)
    val = getattr(contract_data, "val", None)
    instance = getattr(val, "instance", None)
    return getattr(instance, "executable", None)


async def detect_contract_type(contract_id: str, ledger: LedgerClient) -> ExecutableKind:
    """Determine whether ``contract_id`` is asset-backed or bytecode-backed.

    Performs a single batched ledger read of the contract's instance entry.

    Raises:
        ValidationError: ``contract_id`` is not a contract strkey.
        MissingContractDataError: The ledger holds no instance or executable.
        DetectionError: The ledger read itself failed.
    """
    validate_contract_id(contract_id)

    try:
        entries = await ledger.get_ledger_entries([contract_instance_key(contract_id)])
    except Exception as exc:
        raise DetectionError(
            f"Failed to detect contract type for {contract_id}: {exc}",
            contract_id=contract_id,
            details={"error": str(exc)},
        ) from exc

    executable = instance_executable(entries[0]) if entries else None
    if executable is None:
        raise MissingContractDataError(
            f"No published contract code found for {contract_id}", contract_id=contract_id
        )

    executable_type = executable.type
    if executable_type == stellar_xdr.ContractExecutableType.CONTRACT_EXECUTABLE_STELLAR_ASSET:
        kind = ExecutableKind.ASSET_BACKED
    elif executable_type == stellar_xdr.ContractExecutableType.CONTRACT_EXECUTABLE_WASM:
        kind = ExecutableKind.BYTECODE
    else:
        logger.warning(
            "Unrecognised executable type %s for contract %s", executable_type, contract_id
        )
        kind = ExecutableKind.UNKNOWN

    logger.debug("Contract %s detected as %s", contract_id, kind.value)
    return kind
