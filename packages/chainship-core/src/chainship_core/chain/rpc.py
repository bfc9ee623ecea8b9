"""HTTP client for the chain read API.

Wraps the node's `/v1/chain/*` JSON endpoints with:
- Retry with exponential backoff for transport failures (reads only)
- Error payload parsing into ChainRpcError
- Structured logging and OpenTelemetry client spans
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from chainship_core.chain.models import AccountInfo
from chainship_core.config import RetryConfig
from chainship_core.errors import ChainConnectionError, ChainRpcError, UnreadableSchema
from chainship_core.observability import chain_call, get_logger
from chainship_core.retry import create_retry_decorator
from chainship_core.schema.models import InterfaceSchema

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from chainship_core.config import NetworkConfig

TABLE_SCOPE_LIMIT = 1


def raise_for_chain_error(response: httpx.Response) -> None:
    """Convert an error response of the node (or signer) into ChainRpcError.

    Nodes answer errors with a body like::

        {"code": 500, "message": "Internal Service Error",
         "error": {"name": "...", "what": "...", "details": [{"message": "..."}]}}

    Args:
        response: HTTP response.

    Raises:
        ChainRpcError: If the status code is 400 or above.
    """
    if response.status_code < 400:
        return

    try:
        body = response.json()
    except ValueError:
        body = None

    if not isinstance(body, dict):
        raise ChainRpcError(
            f"HTTP {response.status_code}: {response.text[:200]}",
            status_code=response.status_code,
        )

    error = body.get("error") if isinstance(body.get("error"), dict) else {}
    details = [d for d in error.get("details", []) if isinstance(d, dict)]
    message = error.get("what") or body.get("message") or f"HTTP {response.status_code}"
    raise ChainRpcError(str(message), details=details, status_code=response.status_code)


class RpcChainClient:
    """Chain read API client.

    Attributes:
        network: Network whose primary endpoint is queried.

    Example:
        >>> client = RpcChainClient(KNOWN_NETWORKS["proton-test"])
        >>> schema = client.get_abi("eosio.token")
        >>> client.get_table_by_scope("eosio.token", "accounts")
    """

    def __init__(
        self,
        network: NetworkConfig,
        *,
        timeout_seconds: float = 30.0,
        retry: RetryConfig | None = None,
        http_client: httpx.Client | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        """Initialize RpcChainClient.

        Args:
            network: Network configuration.
            timeout_seconds: Per-request timeout.
            retry: Retry policy for transport failures.
            http_client: Optional preconfigured httpx client (tests inject a
                MockTransport here).
            logger: Optional structlog logger.
        """
        self.network = network
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout_seconds)
        self._logger = logger or get_logger()
        self._retry = create_retry_decorator(
            retry or RetryConfig(),
            operation_name="chain_request",
        )

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> RpcChainClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _post(self, path: str, payload: dict[str, Any]) -> Any:
        url = f"{self.network.endpoint}{path}"

        def send() -> httpx.Response:
            try:
                return self._http.post(url, json=payload)
            except httpx.TransportError as e:
                raise ChainConnectionError(self.network.endpoint, str(e)) from e

        response = self._retry(send)()
        raise_for_chain_error(response)
        return response.json()

    def get_abi(self, account: str) -> InterfaceSchema | None:
        """Fetch the schema deployed on an account.

        Args:
            account: Account name.

        Returns:
            The deployed InterfaceSchema, or None if the account has none.

        Raises:
            ChainRpcError: If the node rejects the request (e.g. unknown account).
            UnreadableSchema: If a schema is deployed but cannot be parsed.
            ChainConnectionError: If the node cannot be reached.
        """
        with chain_call("get_abi", endpoint=self.network.endpoint, account=account):
            body = self._post("/v1/chain/get_abi", {"account_name": account})

        abi = body.get("abi") if isinstance(body, dict) else None
        if not abi:
            self._logger.debug("abi_not_deployed", account=account)
            return None
        try:
            return InterfaceSchema.from_dict(abi)
        except ValidationError as e:
            self._logger.warning("abi_unreadable", account=account, errors=e.error_count())
            raise UnreadableSchema(account, f"{e.error_count()} invalid field(s)") from e

    def get_table_by_scope(self, code: str, table: str) -> list[dict[str, Any]]:
        """List the scopes of a table that currently hold rows.

        Args:
            code: Contract account.
            table: Table name.

        Returns:
            Scope rows (`code`, `scope`, `table`, `payer`, `count`); empty when
            the table holds no data.
        """
        with chain_call(
            "get_table_by_scope",
            endpoint=self.network.endpoint,
            account=code,
            table=table,
        ):
            body = self._post(
                "/v1/chain/get_table_by_scope",
                {"code": code, "table": table, "limit": TABLE_SCOPE_LIMIT},
            )
        rows = body.get("rows", []) if isinstance(body, dict) else []
        return [row for row in rows if isinstance(row, dict)]

    def get_account(self, name: str) -> AccountInfo:
        """Fetch an account's permissions.

        Args:
            name: Account name.

        Returns:
            AccountInfo.
        """
        with chain_call("get_account", endpoint=self.network.endpoint, account=name):
            body = self._post("/v1/chain/get_account", {"account_name": name})
        return AccountInfo.model_validate(body)
