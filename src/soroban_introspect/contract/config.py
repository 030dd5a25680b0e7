"""Configuration containers for contract introspection."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from urllib.parse import urlparse

from ..constants import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SAC_SPEC_BASE_URL,
    DEFAULT_SAC_SPEC_PATH,
    DEFAULT_SAC_SPEC_REF,
    DEFAULT_SAC_SPEC_REPOSITORY,
    MAINNET_PASSPHRASE,
    MAINNET_RPC_URL,
    TESTNET_PASSPHRASE,
    TESTNET_RPC_URL,
)

_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


@dataclass(frozen=True)
class NetworkConfig:
    """Soroban network selection and RPC endpoint."""

    id: str
    name: str
    network_passphrase: str
    soroban_rpc_url: str
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def resolve_rpc_url(
        self, user_override: str | None = None, app_override: str | None = None
    ) -> str:
        """Pick the RPC URL: user override, then app-level override, then network default."""

        for candidate in (user_override, app_override, self.soroban_rpc_url):
            if candidate and candidate.strip():
                return candidate.strip().rstrip("/")
        return self.soroban_rpc_url

    def allow_http(self, rpc_url: str | None = None) -> bool:
        host = urlparse(rpc_url or self.soroban_rpc_url).hostname or ""
        return host in _LOCAL_HOSTS

    def with_overrides(
        self, user_override: str | None = None, app_override: str | None = None
    ) -> NetworkConfig:
        """Return a copy whose RPC URL is already resolved."""

        return replace(
            self, soroban_rpc_url=self.resolve_rpc_url(user_override, app_override)
        )


TESTNET = NetworkConfig(
    id="stellar-testnet",
    name="Stellar Testnet",
    network_passphrase=TESTNET_PASSPHRASE,
    soroban_rpc_url=TESTNET_RPC_URL,
)

MAINNET = NetworkConfig(
    id="stellar-mainnet",
    name="Stellar Mainnet",
    network_passphrase=MAINNET_PASSPHRASE,
    soroban_rpc_url=MAINNET_RPC_URL,
)


@dataclass(frozen=True)
class SacSpecSource:
    """Location of the well-known interface description for asset-backed contracts."""

    base_url: str = DEFAULT_SAC_SPEC_BASE_URL
    repository: str = DEFAULT_SAC_SPEC_REPOSITORY
    ref: str = DEFAULT_SAC_SPEC_REF
    path: str = DEFAULT_SAC_SPEC_PATH
    allowed_hosts: tuple[str, ...] = field(default_factory=lambda: ("raw.githubusercontent.com",))

    def canonical_url(self) -> str:
        parts = (
            self.base_url.rstrip("/"),
            self.repository.strip("/"),
            self.ref.strip("/"),
            self.path.lstrip("/"),
        )
        return "/".join(parts)


@dataclass(frozen=True)
class LoaderConfig:
    """Aggregated configuration used by :class:`~.loader.ContractLoader`."""

    network: NetworkConfig = TESTNET
    sac_source: SacSpecSource = SacSpecSource()
    strict_types: bool = False
    simulation_source: str | None = None
