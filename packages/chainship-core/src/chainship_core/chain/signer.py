"""Transaction submission through a signing service.

chainship never handles private keys. Unsigned operations are posted to a
signing service (a local wallet daemon or agent) that signs them with the
operator's keys, pushes the transaction and answers with its id.

Request::

    POST <signer_url>/v1/transact
    {"chain": "proton-test", "actions": [{"account": ..., "name": ..., ...}]}

Response::

    {"transaction_id": "..."}

Errors from the node are relayed in the same body format the chain API uses.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import httpx

from chainship_core.chain.models import Action, TransactionReceipt
from chainship_core.chain.rpc import raise_for_chain_error
from chainship_core.errors import ChainConnectionError
from chainship_core.observability import get_logger

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from chainship_core.config import NetworkConfig


class SignerClient:
    """Submits transactions through the signing service of a network.

    Submissions are never retried: a resent transaction could execute twice.
    """

    def __init__(
        self,
        network: NetworkConfig,
        *,
        timeout_seconds: float = 30.0,
        http_client: httpx.Client | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self.network = network
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout_seconds)
        self._logger = logger or get_logger()

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> SignerClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def transact(self, actions: Sequence[Action]) -> TransactionReceipt:
        """Sign and push one transaction.

        Args:
            actions: Operations carried by the transaction.

        Returns:
            TransactionReceipt with the transaction id.

        Raises:
            ChainRpcError: If the signer or the node rejects the transaction.
            ChainConnectionError: If the signer cannot be reached.
        """
        url = f"{self.network.signer_url.rstrip('/')}/v1/transact"
        payload = {
            "chain": self.network.chain,
            "actions": [action.model_dump(mode="json") for action in actions],
        }
        names = [f"{a.account}::{a.name}" for a in actions]

        self._logger.info("transaction_submitting", actions=names)
        try:
            response = self._http.post(url, json=payload)
        except httpx.TransportError as e:
            raise ChainConnectionError(self.network.signer_url, str(e)) from e

        raise_for_chain_error(response)
        receipt = TransactionReceipt.model_validate(response.json())
        self._logger.info(
            "transaction_accepted",
            actions=names,
            transaction_id=receipt.transaction_id,
        )
        return receipt
