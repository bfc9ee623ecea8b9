"""Configuration models for chainship.

This module provides:
- RetryConfig: Retry policy for chain API reads
- NetworkConfig: Connection settings for one named network
- ChainshipSettings: Process settings loaded from CHAINSHIP_* variables
- ContractFile: Pre-seeded deployment values from a `.contract` file
- resolve_network: Select and customize the active network
"""

from __future__ import annotations

from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from chainship_core.errors import ConfigurationError

logger = structlog.get_logger(__name__)

CONTRACT_FILE_NAME = ".contract"
"""Name of the per-project file holding pre-seeded deployment values."""

DEFAULT_SIGNER_URL = "http://127.0.0.1:8788"


class RetryConfig(BaseModel):
    """Retry policy configuration for chain API reads.

    Implements exponential backoff with jitter for transient transport
    failures. Submissions are never retried.

    Attributes:
        max_attempts: Maximum attempts (1-10, default 3).
        initial_wait_seconds: Initial backoff wait (0.1-30s, default 0.5).
        max_wait_seconds: Maximum backoff cap (1-300s, default 5.0).
        jitter_seconds: Random jitter range (0-10s, default 0.5).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: int = Field(default=3, ge=1, le=10, description="Maximum attempts")
    initial_wait_seconds: float = Field(
        default=0.5,
        ge=0.1,
        le=30.0,
        description="Initial backoff wait time in seconds",
    )
    max_wait_seconds: float = Field(
        default=5.0,
        ge=1.0,
        le=300.0,
        description="Maximum backoff wait time in seconds",
    )
    jitter_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=10.0,
        description="Random jitter range in seconds",
    )

    @field_validator("max_wait_seconds")
    @classmethod
    def max_wait_must_exceed_initial(cls, v: float, info: object) -> float:
        """Validate that max_wait_seconds >= initial_wait_seconds."""
        data = getattr(info, "data", {})
        initial = data.get("initial_wait_seconds", 0.5)
        if v < initial:
            msg = f"max_wait_seconds ({v}) must be >= initial_wait_seconds ({initial})"
            raise ValueError(msg)
        return v


class NetworkConfig(BaseModel):
    """Connection settings for a named network.

    Attributes:
        chain: Network name (compared against `.contract` NETWORK).
        endpoints: Chain API base URLs, first one is used.
        explorer_url: Block explorer base URL for transaction links.
        signer_url: Signing service that submits transactions.
        system_account: Account that owns setcode/setabi/updateauth.

    Example:
        >>> net = NetworkConfig(chain="local", endpoints=["http://127.0.0.1:8888"])
        >>> net.endpoint
        'http://127.0.0.1:8888'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    chain: str = Field(..., min_length=1, description="Network name")
    endpoints: list[str] = Field(..., min_length=1, description="Chain API URLs")
    explorer_url: str | None = Field(default=None, description="Block explorer URL")
    signer_url: str = Field(default=DEFAULT_SIGNER_URL, description="Signing service URL")
    system_account: str = Field(default="eosio", min_length=1, description="System account")

    @property
    def endpoint(self) -> str:
        """Primary chain API endpoint without trailing slash."""
        return self.endpoints[0].rstrip("/")

    def transaction_url(self, transaction_id: str) -> str | None:
        """Build the explorer link for a transaction, if an explorer is known."""
        if not self.explorer_url:
            return None
        return f"{self.explorer_url.rstrip('/')}/tx/{transaction_id}?tab=traces"


KNOWN_NETWORKS: dict[str, NetworkConfig] = {
    "proton": NetworkConfig(
        chain="proton",
        endpoints=["https://proton.greymass.com", "https://proton.eoscafeblock.com"],
        explorer_url="https://explorer.xprnetwork.org",
    ),
    "proton-test": NetworkConfig(
        chain="proton-test",
        endpoints=["https://proton-testnet.greymass.com", "https://testnet.protonchain.com"],
        explorer_url="https://testnet.explorer.xprnetwork.org",
    ),
}


class ChainshipSettings(BaseSettings):
    """Process-wide settings.

    Loaded from environment variables with the CHAINSHIP_ prefix (or a
    `.env` file).

    Example:
        >>> settings = ChainshipSettings()  # CHAINSHIP_NETWORK=proton
        >>> settings = ChainshipSettings(network="proton", log_level="DEBUG")
    """

    model_config = SettingsConfigDict(
        env_prefix="CHAINSHIP_",
        env_file=".env",
        extra="ignore",
    )

    network: str = Field(default="proton-test", description="Active network name")
    endpoint: str | None = Field(default=None, description="Chain API URL override")
    explorer_url: str | None = Field(default=None, description="Explorer URL override")
    signer_url: str | None = Field(default=None, description="Signing service URL override")
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Chain API request timeout",
    )
    log_level: str = Field(default="WARNING", description="Minimum log level")
    log_json: bool = Field(default=False, description="Render logs as JSON")


class ContractFile(BaseSettings):
    """Pre-seeded deployment values from a `.contract` file.

    The file uses dotenv syntax. Only the file is consulted, never the
    process environment, so an unrelated ACCOUNT variable cannot leak in.

    Attributes:
        account: Account to deploy to. Setting it pre-confirms the deployment.
        source: Artifact directory or repository URL.
        network: Network the deployment is meant for.

    Example:
        >>> contract = ContractFile.load(Path.cwd())
        >>> contract.account
        'mycontract'
    """

    model_config = SettingsConfigDict(extra="ignore", env_file_encoding="utf-8")

    account: str | None = None
    source: str | None = None
    network: str | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, dotenv_settings)

    @classmethod
    def load(cls, directory: Path) -> ContractFile:
        """Read `.contract` from a directory.

        Args:
            directory: Directory to look in (usually the working directory).

        Returns:
            ContractFile; all fields are None when the file does not exist.
        """
        path = directory / CONTRACT_FILE_NAME
        if not path.is_file():
            return cls()

        contract = cls(_env_file=path)  # type: ignore[call-arg]
        logger.debug("contract_file_loaded", path=str(path), empty=contract.is_empty)
        return contract

    @property
    def is_empty(self) -> bool:
        """True when the file set none of the known values."""
        return self.account is None and self.source is None and self.network is None


def resolve_network(settings: ChainshipSettings) -> NetworkConfig:
    """Select the active network and apply setting overrides.

    Args:
        settings: Process settings.

    Returns:
        NetworkConfig for the active network.

    Raises:
        ConfigurationError: If the network is unknown and no endpoint override
            is given.
    """
    base = KNOWN_NETWORKS.get(settings.network)
    if base is None:
        if not settings.endpoint:
            available = ", ".join(sorted(KNOWN_NETWORKS)) or "none"
            raise ConfigurationError(
                f"Unknown network '{settings.network}'. Available: {available}",
                field_path="network",
            )
        base = NetworkConfig(chain=settings.network, endpoints=[settings.endpoint])

    overrides: dict[str, object] = {}
    if settings.endpoint:
        overrides["endpoints"] = [settings.endpoint]
    if settings.explorer_url:
        overrides["explorer_url"] = settings.explorer_url
    if settings.signer_url:
        overrides["signer_url"] = settings.signer_url

    if overrides:
        return base.model_copy(update=overrides)
    return base
