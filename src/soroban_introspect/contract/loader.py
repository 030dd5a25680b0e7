"""Load a deployed contract's function catalogue from the network."""

from __future__ import annotations

import logging

from ..base import LedgerClient
from ..exceptions import DetectionError, MissingContractDataError, NetworkError
from ..types import ContractSchema, FunctionSignature
from .config import LoaderConfig
from .detection import detect_contract_type, validate_contract_id
from .extractor import SpecExtractor
from .sac import SacSpecCache

logger = logging.getLogger(__name__)


def is_view_function(function: FunctionSignature) -> bool:
    return function.is_view


def writable_functions(schema: ContractSchema) -> list[FunctionSignature]:
    return [function for function in schema.functions if not is_view_function(function)]


class ContractLoader:
    """Detect, fetch and extract a contract's interface into a :class:`ContractSchema`."""

    def __init__(
        self,
        ledger: LedgerClient,
        sac_cache: SacSpecCache | None = None,
        config: LoaderConfig | None = None,
    ) -> None:
        self._ledger = ledger
        self._config = config or LoaderConfig()
        self._sac_cache = sac_cache or SacSpecCache(
            request_timeout=self._config.network.request_timeout
        )
        self._extractor = SpecExtractor(
            ledger,
            self._sac_cache,
            strict_types=self._config.strict_types,
            simulation_source=self._config.simulation_source,
            sac_source=self._config.sac_source,
        )

    @property
    def sac_cache(self) -> SacSpecCache:
        return self._sac_cache

    async def load_contract(self, contract_id: str) -> ContractSchema:
        """Load the schema of ``contract_id``.

        Raises:
            ValidationError: ``contract_id`` is not a contract address.
            MissingContractDataError: No contract code is published at the address.
            DetectionError: The contract could not be loaded from the network.
        """
        validate_contract_id(contract_id)
        logger.info("Loading contract %s from %s", contract_id, self._config.network.name)

        try:
            kind = await detect_contract_type(contract_id, self._ledger)
            entries = await self._extractor.resolve_entries(None, contract_id, kind)
            functions = await self._extractor.extract(entries, contract_id, kind)
        except MissingContractDataError:
            raise
        except (DetectionError, NetworkError) as exc:
            raise DetectionError(
                f"Contract at {contract_id} could not be loaded from the network. "
                "Please verify the contract ID is correct and the network is accessible.",
                contract_id=contract_id,
                details={"error": exc.message},
            ) from exc

        logger.info("Successfully extracted %d functions from %s", len(functions), contract_id)
        return ContractSchema(
            name=f"Soroban Contract {contract_id[:8]}...",
            functions=tuple(functions),
            address=contract_id,
            metadata={
                "specEntries": tuple(entries),
                "executableKind": kind.value,
                "network": self._config.network.id,
            },
        )
