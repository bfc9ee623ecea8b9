"""Custom exception hierarchy for chainship-core.

This module defines the exception classes used throughout chainship:
- ChainshipError: Base exception for all chainship errors
- ArtifactError: Raised when contract artifacts cannot be resolved
- NetworkMismatch: Raised when the pre-seeded network is not the connected one
- SubmissionFailed: Raised when a single chain operation is rejected
- ChainRpcError / ChainConnectionError: Raised by the chain RPC client

Fatal errors (artifact resolution, network mismatch, configuration) abort
a deployment before any chain mutation. Submission errors are per-operation
and are reported by the pipeline instead of propagating.

User-facing messages are safe to display; technical details are logged
internally via structlog.
"""

from __future__ import annotations

from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class ChainshipError(Exception):
    """Base exception for chainship.

    All chainship exceptions inherit from this class. User-facing messages
    are safe to display; technical details are logged internally.

    Args:
        user_message: Message to display to the operator.
        internal_details: Optional technical details for logging only.

    Example:
        >>> raise ChainshipError(
        ...     "Deployment failed",
        ...     internal_details="setcode rejected by node https://rpc.example",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ChainshipError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "chainship_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigurationError(ChainshipError):
    """Raised when settings or a `.contract` file cannot be used.

    Attributes:
        file_path: Path to the offending file (if known).
        field_path: Name of the offending setting (if known).
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path


class NetworkMismatch(ChainshipError):
    """Raised when a pre-seeded network disagrees with the connected network.

    This is a hard precondition failure: the deployment never starts.

    Attributes:
        current: Network the client is connected to.
        expected: Network requested by the pre-seeded configuration.

    Example:
        >>> raise NetworkMismatch(current="proton-test", expected="proton")
        # User sees: 'Wrong network "proton-test". "proton" is expected'
    """

    def __init__(self, current: str, expected: str) -> None:
        super().__init__(f'Wrong network "{current}". "{expected}" is expected')
        self.current = current
        self.expected = expected


class ArtifactError(ChainshipError):
    """Base class for artifact resolution failures.

    Every ArtifactError is fatal: it aborts the deployment before any
    chain operation is submitted.
    """

    pass


class ArtifactNotFound(ArtifactError):
    """No bytecode or no schema file was found in the resolved directory.

    Attributes:
        directory: Directory that was scanned.
        extension: File extension that was missing (".wasm" or ".abi").
    """

    def __init__(self, directory: str, extension: str) -> None:
        super().__init__(f'Cannot find a "{extension} file" in {directory}')
        self.directory = directory
        self.extension = extension


class AmbiguousArtifacts(ArtifactError):
    """More than one bytecode or schema file was found.

    Attributes:
        directory: Directory that was scanned.
        bytecode_files: Bytecode file names found.
        schema_files: Schema file names found.
    """

    def __init__(
        self,
        directory: str,
        *,
        bytecode_files: list[str],
        schema_files: list[str],
    ) -> None:
        super().__init__(f"Directory {directory} must contain only 1 WASM and 1 ABI")
        self.directory = directory
        self.bytecode_files = bytecode_files
        self.schema_files = schema_files


class InvalidSchema(ArtifactError):
    """The schema file is not a readable JSON interface schema.

    Attributes:
        path: Schema file path.
    """

    def __init__(self, path: str, *, internal_details: str | None = None) -> None:
        super().__init__(
            f"Schema file {path} is not a valid ABI",
            internal_details=internal_details,
        )
        self.path = path


class DownloadFailed(ArtifactError):
    """A remote artifact request did not answer with HTTP 200.

    Attributes:
        url: Requested URL.
        status_code: HTTP status code, or None when the transfer itself failed.
    """

    def __init__(
        self,
        url: str,
        *,
        status_code: int | None = None,
        reason: str = "",
    ) -> None:
        if status_code is None:
            message = f"Download request failed for {url}: {reason}"
        else:
            message = f"Download request failed, response status: {status_code} {reason}".rstrip()
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.reason = reason


class RequestTimeout(ArtifactError):
    """A remote artifact request exceeded its fixed timeout.

    Attributes:
        url: Requested URL.
        timeout_seconds: Timeout that was exceeded.
    """

    def __init__(self, url: str, timeout_seconds: float) -> None:
        super().__init__(f"Request timeout after {timeout_seconds:g}s")
        self.url = url
        self.timeout_seconds = timeout_seconds


class ChainRpcError(ChainshipError):
    """The chain API answered with an error payload.

    Attributes:
        message: Top level error message.
        details: Detail entries reported by the node (each has a "message").
        status_code: HTTP status code of the response.
    """

    def __init__(
        self,
        message: str,
        *,
        details: list[dict[str, Any]] | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []
        self.status_code = status_code


class UnreadableSchema(ChainRpcError):
    """The account has a schema deployed but it could not be parsed.

    Attributes:
        account: Account whose schema was fetched.
    """

    def __init__(self, account: str, reason: str) -> None:
        super().__init__(f"Cannot read the ABI deployed on '{account}': {reason}")
        self.account = account


class ChainConnectionError(ChainshipError):
    """The chain API could not be reached.

    Attributes:
        url: Endpoint that was unreachable.
        cause: Underlying transport error.
    """

    def __init__(self, url: str, cause: str) -> None:
        super().__init__(f"Cannot reach chain API at {url}: {cause}")
        self.url = url
        self.cause = cause


class SubmissionFailed(ChainshipError):
    """A single chain operation was rejected.

    The pipeline catches this per operation, classifies it and keeps going.

    Attributes:
        operation: Operation name (e.g. "setcode").
        cause: Original exception raised by the chain writer.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause
