"""Unit tests for chainship_core.artifacts module."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from chainship_core.artifacts import (
    ArtifactResolver,
    download,
    parse_remote_source,
)
from chainship_core.errors import (
    AmbiguousArtifacts,
    ArtifactNotFound,
    DownloadFailed,
    RequestTimeout,
)

GITHUB_SOURCE = "https://github.com/acme/contracts/tree/main/build/token"
RAW_BASE = "https://raw.githubusercontent.com/acme/contracts/main/build/token"


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def serve(files: dict[str, bytes]) -> Callable[[httpx.Request], httpx.Response]:
    """Handler answering 200 for known URLs and 404 otherwise."""

    def handler(request: httpx.Request) -> httpx.Response:
        body = files.get(str(request.url))
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, content=body)

    return handler


class TestParseRemoteSource:
    """Tests for parse_remote_source function."""

    def test_github_tree_url(self) -> None:
        """Test the tree segment is dropped and the last segment names the contract."""
        remote = parse_remote_source(GITHUB_SOURCE)

        assert remote is not None
        assert remote.base_url == RAW_BASE
        assert remote.contract_name == "token"
        assert remote.file_url(".wasm") == f"{RAW_BASE}/token.wasm"

    def test_trailing_slash_ignored(self) -> None:
        """Test a trailing slash does not produce an empty contract name."""
        remote = parse_remote_source(GITHUB_SOURCE + "/")

        assert remote is not None
        assert remote.contract_name == "token"

    def test_local_path_is_not_remote(self) -> None:
        """Test local paths are left alone."""
        assert parse_remote_source("./build/token") is None
        assert parse_remote_source("/tmp/https://github.com/x") is None

    def test_other_hosts_are_not_remote(self) -> None:
        """Test only github.com URLs are downloaded."""
        assert parse_remote_source("https://gitlab.com/acme/contracts/tree/main/token") is None


class TestDownload:
    """Tests for download function."""

    def test_writes_file_on_200(self, tmp_path: Path) -> None:
        """Test a 200 response body is written to the destination."""
        url = f"{RAW_BASE}/token.wasm"
        dest = tmp_path / "token.wasm"

        with mock_client(serve({url: b"\x00asm"})) as client:
            download(client, url, dest)

        assert dest.read_bytes() == b"\x00asm"

    def test_non_200_raises_download_failed(self, tmp_path: Path) -> None:
        """Test a non-200 status raises with status code and reason."""
        dest = tmp_path / "token.wasm"

        with mock_client(serve({})) as client, pytest.raises(DownloadFailed) as exc_info:
            download(client, f"{RAW_BASE}/token.wasm", dest)

        assert exc_info.value.status_code == 404
        assert "404 Not Found" in str(exc_info.value)
        assert not dest.exists()

    def test_timeout_raises_request_timeout(self, tmp_path: Path) -> None:
        """Test a timed out request raises RequestTimeout."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with mock_client(handler) as client, pytest.raises(RequestTimeout) as exc_info:
            download(client, f"{RAW_BASE}/token.wasm", tmp_path / "token.wasm")

        assert str(exc_info.value) == "Request timeout after 10s"

    def test_transport_error_raises_download_failed(self, tmp_path: Path) -> None:
        """Test connection failures are reported as DownloadFailed."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with mock_client(handler) as client, pytest.raises(DownloadFailed) as exc_info:
            download(client, f"{RAW_BASE}/token.wasm", tmp_path / "token.wasm")

        assert exc_info.value.status_code is None

    def test_existing_destination_not_overwritten(self, tmp_path: Path) -> None:
        """Test the destination is opened exclusively."""
        url = f"{RAW_BASE}/token.wasm"
        dest = tmp_path / "token.wasm"
        dest.write_bytes(b"original")

        with mock_client(serve({url: b"new"})) as client, pytest.raises(FileExistsError):
            download(client, url, dest)

        assert dest.read_bytes() == b"original"


class TestLocate:
    """Tests for ArtifactResolver.locate."""

    def test_single_pair(self, tmp_path: Path) -> None:
        """Test one bytecode and one schema file resolve."""
        (tmp_path / "token.wasm").write_bytes(b"")
        (tmp_path / "token.abi").write_text("{}")
        (tmp_path / "README.md").write_text("")

        artifacts = ArtifactResolver().locate(tmp_path)

        assert artifacts.bytecode_path == tmp_path / "token.wasm"
        assert artifacts.schema_path == tmp_path / "token.abi"
        assert artifacts.staging_directory is None

    def test_extensions_case_insensitive(self, tmp_path: Path) -> None:
        """Test upper case extensions are accepted."""
        (tmp_path / "TOKEN.WASM").write_bytes(b"")
        (tmp_path / "TOKEN.ABI").write_text("{}")

        artifacts = ArtifactResolver().locate(tmp_path)

        assert artifacts.bytecode_path.name == "TOKEN.WASM"

    def test_missing_bytecode(self, tmp_path: Path) -> None:
        """Test a directory without .wasm raises ArtifactNotFound."""
        (tmp_path / "token.abi").write_text("{}")

        with pytest.raises(ArtifactNotFound) as exc_info:
            ArtifactResolver().locate(tmp_path)

        assert exc_info.value.extension == ".wasm"
        assert str(exc_info.value) == f'Cannot find a ".wasm file" in {tmp_path}'

    def test_missing_schema(self, tmp_path: Path) -> None:
        """Test a directory without .abi raises ArtifactNotFound."""
        (tmp_path / "token.wasm").write_bytes(b"")

        with pytest.raises(ArtifactNotFound) as exc_info:
            ArtifactResolver().locate(tmp_path)

        assert exc_info.value.extension == ".abi"

    def test_missing_bytecode_reported_before_ambiguity(self, tmp_path: Path) -> None:
        """Test zero bytecode files win over several schema files."""
        (tmp_path / "a.abi").write_text("{}")
        (tmp_path / "b.abi").write_text("{}")

        with pytest.raises(ArtifactNotFound):
            ArtifactResolver().locate(tmp_path)

    def test_two_bytecode_files_are_ambiguous(self, tmp_path: Path) -> None:
        """Test more than one .wasm raises AmbiguousArtifacts."""
        (tmp_path / "a.wasm").write_bytes(b"")
        (tmp_path / "b.wasm").write_bytes(b"")
        (tmp_path / "a.abi").write_text("{}")

        with pytest.raises(AmbiguousArtifacts) as exc_info:
            ArtifactResolver().locate(tmp_path)

        assert exc_info.value.bytecode_files == ["a.wasm", "b.wasm"]
        assert "must contain only 1 WASM and 1 ABI" in str(exc_info.value)

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Test a non-existent source raises ArtifactNotFound."""
        with pytest.raises(ArtifactNotFound):
            ArtifactResolver().locate(tmp_path / "missing")

    def test_resolution_is_deterministic(self, tmp_path: Path) -> None:
        """Test resolving the same directory twice gives the same result."""
        (tmp_path / "token.wasm").write_bytes(b"")
        (tmp_path / "token.abi").write_text("{}")
        resolver = ArtifactResolver()

        assert resolver.locate(tmp_path) == resolver.locate(tmp_path)


class TestRemoteResolution:
    """Tests for staging remote sources."""

    def test_downloads_both_files(self, tmp_path: Path, reporter: Any) -> None:
        """Test a GitHub source is downloaded into a staging directory."""
        files = {f"{RAW_BASE}/token.wasm": b"\x00asm", f"{RAW_BASE}/token.abi": b"{}"}
        with mock_client(serve(files)) as client:
            resolver = ArtifactResolver(
                http_client=client,
                reporter=reporter,
                staging_root=tmp_path,
            )
            artifacts = resolver.resolve(GITHUB_SOURCE)

        assert artifacts.staging_directory is not None
        assert artifacts.staging_directory.parent == tmp_path
        assert artifacts.bytecode_path.read_bytes() == b"\x00asm"
        assert reporter.texts("warning") == [
            "The source is GitHub. Starting to download files..."
        ]
        assert reporter.texts("success") == ["Download completed"]

    def test_local_source_is_not_staged(self, tmp_path: Path) -> None:
        """Test stage() returns None for a local directory."""
        assert ArtifactResolver().stage(str(tmp_path)) is None

    def test_failed_download_is_reported_and_scan_fails(
        self, tmp_path: Path, reporter: Any
    ) -> None:
        """Test a missing remote bytecode file ends in ArtifactNotFound without staging left."""
        files = {f"{RAW_BASE}/token.abi": b"{}"}
        with mock_client(serve(files)) as client:
            resolver = ArtifactResolver(
                http_client=client,
                reporter=reporter,
                staging_root=tmp_path,
            )
            with pytest.raises(ArtifactNotFound) as exc_info:
                resolver.resolve(GITHUB_SOURCE)

        assert exc_info.value.extension == ".wasm"
        errors = reporter.texts("error")
        assert len(errors) == 1
        assert errors[0].startswith("Cannot download token.wasm:")
        assert "Download completed" not in reporter.texts("success")
        assert list(tmp_path.iterdir()) == []

    def test_fetch_returns_outcome_per_file(self, tmp_path: Path) -> None:
        """Test each download gets its own outcome, bytecode first."""
        remote = parse_remote_source(GITHUB_SOURCE)
        assert remote is not None

        files = {f"{RAW_BASE}/token.wasm": b"\x00asm"}
        with mock_client(serve(files)) as client:
            outcomes = ArtifactResolver(http_client=client).fetch(remote, tmp_path)

        assert [o.ok for o in outcomes] == [True, False]
        assert isinstance(outcomes[1].error, DownloadFailed)
