"""chainship-core: Contract deployment safety pipeline.

This package provides:
- ArtifactResolver: Find (or download) a contract's bytecode and schema
- diff_schemas: Detect removed and reshaped tables
- assess_risk: Probe which affected tables hold data
- DeploymentPipeline: Confirm, submit and clean up a deployment
- classify_error: Turn chain errors into messages with hints
"""

from __future__ import annotations

__version__ = "0.1.0"

from chainship_core.artifacts import ArtifactResolver, ArtifactSet, parse_remote_source

# Chain collaborators
from chainship_core.chain import (
    ChainReader,
    ChainWriter,
    RpcChainClient,
    SignerClient,
)

# Configuration
from chainship_core.config import (
    KNOWN_NETWORKS,
    ChainshipSettings,
    ContractFile,
    NetworkConfig,
    RetryConfig,
    resolve_network,
)

# Error types
from chainship_core.errors import (
    AmbiguousArtifacts,
    ArtifactError,
    ArtifactNotFound,
    ChainConnectionError,
    ChainRpcError,
    ChainshipError,
    ConfigurationError,
    DownloadFailed,
    InvalidSchema,
    NetworkMismatch,
    RequestTimeout,
    SubmissionFailed,
)
from chainship_core.hints import ClassifiedError, classify_error, hint_for
from chainship_core.inline import enable_inline
from chainship_core.pipeline import (
    Confirmer,
    DeploymentPipeline,
    DeploymentRequest,
    DeploymentResult,
    PipelineState,
    SubmissionResult,
)
from chainship_core.reporting import NullReporter, Reporter
from chainship_core.risk import RiskAssessment, assess_risk
from chainship_core.schema import DiffResult, InterfaceSchema, diff_schemas

__all__ = [
    "__version__",
    # Artifacts
    "ArtifactResolver",
    "ArtifactSet",
    "parse_remote_source",
    # Schema
    "InterfaceSchema",
    "DiffResult",
    "diff_schemas",
    # Risk
    "RiskAssessment",
    "assess_risk",
    # Pipeline
    "Confirmer",
    "DeploymentPipeline",
    "DeploymentRequest",
    "DeploymentResult",
    "PipelineState",
    "SubmissionResult",
    "enable_inline",
    # Reporting
    "Reporter",
    "NullReporter",
    "ClassifiedError",
    "classify_error",
    "hint_for",
    # Chain
    "ChainReader",
    "ChainWriter",
    "RpcChainClient",
    "SignerClient",
    # Configuration
    "ChainshipSettings",
    "ContractFile",
    "NetworkConfig",
    "RetryConfig",
    "KNOWN_NETWORKS",
    "resolve_network",
    # Errors
    "ChainshipError",
    "ConfigurationError",
    "NetworkMismatch",
    "ArtifactError",
    "ArtifactNotFound",
    "AmbiguousArtifacts",
    "InvalidSchema",
    "DownloadFailed",
    "RequestTimeout",
    "ChainRpcError",
    "ChainConnectionError",
    "SubmissionFailed",
]
