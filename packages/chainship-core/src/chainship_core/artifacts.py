"""Contract artifact resolution.

Turns a deployment source into exactly one bytecode file and one schema
file. A source is either a local directory or a GitHub folder URL; remote
sources are downloaded into a fresh staging directory first.

Staging and scanning are separate steps (stage, then locate) so a caller
learns about a staging directory before scanning can fail, and can always
remove it afterwards.
"""

from __future__ import annotations

import re
import shutil
import tempfile
from dataclasses import dataclass
from functools import partial
from pathlib import Path

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field

from chainship_core.concurrency import Outcome, join_all
from chainship_core.errors import (
    AmbiguousArtifacts,
    ArtifactError,
    ArtifactNotFound,
    DownloadFailed,
    RequestTimeout,
)
from chainship_core.reporting import NullReporter, Reporter

logger = structlog.get_logger(__name__)

BYTECODE_EXTENSION = ".wasm"
SCHEMA_EXTENSION = ".abi"
DOWNLOAD_TIMEOUT_SECONDS = 10.0
STAGING_PREFIX = "chainship-"

GITHUB_URL_PATTERN = re.compile(r"^https://github\.com/", re.IGNORECASE)
RAW_CONTENT_BASE = "https://raw.githubusercontent.com"


class ArtifactSet(BaseModel):
    """Resolved deployment artifacts.

    Attributes:
        bytecode_path: The contract's compiled bytecode.
        schema_path: The contract's interface schema.
        staging_directory: Temporary directory holding downloaded files, if
            the source was remote. Whoever consumes the set removes it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    bytecode_path: Path = Field(..., description="Bytecode file")
    schema_path: Path = Field(..., description="Schema file")
    staging_directory: Path | None = Field(default=None, description="Staging directory")


@dataclass(frozen=True)
class RemoteSource:
    """Raw-file location of a contract folder hosted on GitHub.

    Attributes:
        base_url: Raw content URL of the folder.
        contract_name: File basename shared by the bytecode and schema.
    """

    base_url: str
    contract_name: str

    def file_url(self, extension: str) -> str:
        return f"{self.base_url}/{self.contract_name}{extension}"


def parse_remote_source(source: str) -> RemoteSource | None:
    """Derive the raw-file location from a GitHub folder URL.

    `https://github.com/<owner>/<repo>/tree/<branch>/<path>/<name>` maps to
    `https://raw.githubusercontent.com/<owner>/<repo>/<branch>/<path>/<name>`
    with `<name>` as the contract name.

    Args:
        source: Deployment source.

    Returns:
        RemoteSource, or None if `source` is not a GitHub URL.

    Example:
        >>> parse_remote_source("https://github.com/acme/contracts/tree/main/token").base_url
        'https://raw.githubusercontent.com/acme/contracts/main/token'
    """
    if not GITHUB_URL_PATTERN.match(source):
        return None

    parts = [p for p in GITHUB_URL_PATTERN.sub("", source).split("/") if p]
    # Drop the "tree"/"blob" segment between the repository and the branch
    if len(parts) > 2:
        del parts[2]
    if not parts:
        return None

    return RemoteSource(
        base_url=f"{RAW_CONTENT_BASE}/{'/'.join(parts)}",
        contract_name=parts[-1],
    )


def download(
    client: httpx.Client,
    url: str,
    dest: Path,
    *,
    timeout_seconds: float = DOWNLOAD_TIMEOUT_SECONDS,
) -> None:
    """Download one file.

    The destination is created exclusively and removed again if the
    transfer breaks off.

    Args:
        client: HTTP client.
        url: File URL.
        dest: Destination path (must not exist).
        timeout_seconds: Request timeout.

    Raises:
        DownloadFailed: If the response status is not 200 or the transfer fails.
        RequestTimeout: If the request times out.
        FileExistsError: If `dest` already exists.
    """
    try:
        with client.stream("GET", url, timeout=timeout_seconds) as response:
            if response.status_code != 200:
                raise DownloadFailed(
                    url,
                    status_code=response.status_code,
                    reason=response.reason_phrase,
                )

            handle = dest.open("xb")
            try:
                with handle:
                    for chunk in response.iter_bytes():
                        handle.write(chunk)
            except Exception:
                dest.unlink(missing_ok=True)
                raise
    except httpx.TimeoutException as e:
        raise RequestTimeout(url, timeout_seconds) from e
    except httpx.TransportError as e:
        raise DownloadFailed(url, reason=str(e)) from e

    logger.debug("artifact_downloaded", url=url, dest=str(dest))


def _match_suffix(names: list[str], extension: str) -> list[str]:
    return [name for name in names if name.lower().endswith(extension)]


class ArtifactResolver:
    """Resolves deployment sources into an ArtifactSet.

    Example:
        >>> resolver = ArtifactResolver()
        >>> artifacts = resolver.resolve("./build/token")
        >>> artifacts.bytecode_path.name
        'token.wasm'
    """

    def __init__(
        self,
        *,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = DOWNLOAD_TIMEOUT_SECONDS,
        reporter: Reporter | None = None,
        staging_root: Path | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            http_client: HTTP client used for remote sources.
            timeout_seconds: Timeout of each download.
            reporter: Receives download progress messages.
            staging_root: Parent of staging directories (system temp dir
                by default).
        """
        self._http = http_client
        self.timeout_seconds = timeout_seconds
        self.reporter: Reporter = reporter or NullReporter()
        self.staging_root = staging_root

    def stage(self, source: str) -> Path | None:
        """Download a remote source into a new staging directory.

        Download failures are reported, not raised: scanning the staging
        directory afterwards reports what is missing.

        Args:
            source: Deployment source.

        Returns:
            The staging directory, or None for local sources.
        """
        remote = parse_remote_source(source)
        if remote is None:
            return None

        self.reporter.warning("The source is GitHub. Starting to download files...")
        staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=self.staging_root))
        logger.info("staging_created", source=source, staging=str(staging))
        self.fetch(remote, staging)
        return staging

    def fetch(self, remote: RemoteSource, staging: Path) -> list[Outcome[None]]:
        """Fetch the bytecode and schema of a remote source concurrently.

        Args:
            remote: Remote source.
            staging: Directory receiving the files.

        Returns:
            One outcome per file, bytecode first.
        """
        extensions = (BYTECODE_EXTENSION, SCHEMA_EXTENSION)
        client = self._http or httpx.Client(follow_redirects=True)
        try:
            outcomes = join_all(
                [
                    partial(
                        download,
                        client,
                        remote.file_url(ext),
                        staging / f"{remote.contract_name}{ext}",
                        timeout_seconds=self.timeout_seconds,
                    )
                    for ext in extensions
                ]
            )
        finally:
            if self._http is None:
                client.close()

        for ext, outcome in zip(extensions, outcomes, strict=True):
            if not outcome.ok:
                file_name = f"{remote.contract_name}{ext}"
                logger.warning("artifact_download_failed", file=file_name, error=str(outcome.error))
                self.reporter.error(f"Cannot download {file_name}: {outcome.error}")

        if all(outcome.ok for outcome in outcomes):
            self.reporter.success("Download completed")
        return outcomes

    def locate(self, directory: Path, staging_directory: Path | None = None) -> ArtifactSet:
        """Find the single bytecode and schema file in a directory.

        Args:
            directory: Directory to scan.
            staging_directory: Staging directory to record in the result.

        Returns:
            ArtifactSet.

        Raises:
            ArtifactNotFound: If there is no bytecode or no schema file.
            AmbiguousArtifacts: If there is more than one of either.
        """
        if not directory.is_dir():
            raise ArtifactNotFound(str(directory), BYTECODE_EXTENSION)

        names = sorted(entry.name for entry in directory.iterdir() if entry.is_file())
        wasms = _match_suffix(names, BYTECODE_EXTENSION)
        abis = _match_suffix(names, SCHEMA_EXTENSION)

        if not wasms:
            raise ArtifactNotFound(str(directory), BYTECODE_EXTENSION)
        if not abis:
            raise ArtifactNotFound(str(directory), SCHEMA_EXTENSION)
        if len(wasms) > 1 or len(abis) > 1:
            raise AmbiguousArtifacts(str(directory), bytecode_files=wasms, schema_files=abis)

        return ArtifactSet(
            bytecode_path=directory / wasms[0],
            schema_path=directory / abis[0],
            staging_directory=staging_directory,
        )

    def resolve(self, source: str) -> ArtifactSet:
        """Stage (if remote) and locate the artifacts of a source.

        On failure the staging directory, if any, is removed before the
        error propagates.

        Args:
            source: Local directory path or GitHub folder URL.

        Returns:
            ArtifactSet; the caller removes `staging_directory` when done.
        """
        staging = self.stage(source)
        try:
            return self.locate(staging or Path(source), staging)
        except ArtifactError:
            if staging is not None:
                shutil.rmtree(staging, ignore_errors=True)
            raise
