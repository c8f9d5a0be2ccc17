"""
Batch relay client.

Fans a single bundle out to several independently configured relays.
"""

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

import httpx
import structlog

from bundler.config import RelayConfig, get_config
from bundler.core.bundle import Bundle
from bundler.exceptions import RelayConfigurationError
from bundler.relay.client import RelayClient
from bundler.relay.interface import RelayInterface, SendBundleResponse
from bundler.tx.signer import KeyLike

logger = structlog.get_logger(__name__)


class BatchRelayClient:
    """
    Sends one bundle to every member relay.

    Responses are collected per relay name and returned as-is; deciding which
    relay's answer matters is left to the caller.

    Usage:
        ```python
        batch = BatchRelayClient.from_keys(
            [key_a, key_b],
            ["flashbots", "builder0x69"],
            ["https://relay.flashbots.net", "https://builder0x69.io"],
        )
        responses = batch.batch_send_bundle(bundle)
        ```
    """

    def __init__(
        self,
        clients: Sequence[RelayInterface],
        max_workers: Optional[int] = None,
        config: Optional[RelayConfig] = None,
    ):
        """
        Initialize the batch client.

        Args:
            clients: Member relay clients, names must be unique
            max_workers: Threads used for sending, 1 sends sequentially.
                Defaults to the configured batch_max_workers.
            config: Relay configuration. Uses global config if not provided.
        """
        config = config or get_config()

        counts = Counter(client.name for client in clients)
        duplicates = sorted(name for name, count in counts.items() if count > 1)
        if duplicates:
            raise RelayConfigurationError(f"relay names must be unique, duplicated: {duplicates}")

        self._clients: List[RelayInterface] = list(clients)
        self._max_workers = max_workers if max_workers is not None else config.batch_max_workers
        if self._max_workers < 1:
            raise RelayConfigurationError("max_workers must be at least 1")

    @classmethod
    def from_keys(
        cls,
        signing_keys: Sequence[KeyLike],
        names: Sequence[str],
        endpoints: Sequence[str],
        transport: Optional[httpx.Client] = None,
        max_workers: Optional[int] = None,
        config: Optional[RelayConfig] = None,
    ) -> "BatchRelayClient":
        """
        Create a batch client with one RelayClient per (key, name, endpoint).

        Members have no simulation endpoint.

        Raises:
            RelayConfigurationError: If the sequences differ in length or a
                member cannot be created; no clients are kept in that case
        """
        if len(signing_keys) != len(names) or len(signing_keys) != len(endpoints):
            raise RelayConfigurationError(
                "must initialize with same length sequences, got "
                f"{len(signing_keys)} keys, {len(names)} names, {len(endpoints)} endpoints"
            )

        clients: List[RelayClient] = []
        for key, name, endpoint in zip(signing_keys, names, endpoints):
            try:
                client = RelayClient(key, name, endpoint, transport=transport, config=config)
            except RelayConfigurationError as e:
                for created in clients:
                    created.close()
                raise RelayConfigurationError(
                    f"failed to initialize relay client, name: {name}, endpoint: {endpoint}, error: {e}"
                ) from e
            clients.append(client)

        try:
            return cls(clients, max_workers=max_workers, config=config)
        except RelayConfigurationError:
            for created in clients:
                created.close()
            raise

    @property
    def clients(self) -> List[RelayInterface]:
        """Get the member relay clients."""
        return list(self._clients)

    @property
    def names(self) -> List[str]:
        """Get the member relay names."""
        return [client.name for client in self._clients]

    def batch_send_bundle(self, bundle: Bundle) -> Dict[str, SendBundleResponse]:
        """
        Send a bundle to all member relays.

        Args:
            bundle: Bundle to send (not modified)

        Returns:
            Response per relay name
        """
        if self._max_workers == 1 or len(self._clients) <= 1:
            responses = {client.name: client.send_bundle(bundle) for client in self._clients}
        else:
            workers = min(self._max_workers, len(self._clients))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    client.name: executor.submit(client.send_bundle, bundle)
                    for client in self._clients
                }
                responses = {name: future.result() for name, future in futures.items()}

        failed = [name for name, response in responses.items() if response.error is not None]
        logger.info(
            "bundle_batch_sent",
            relays=len(responses),
            failed=failed,
            block_number=bundle.block_number,
        )
        return responses

    def close(self) -> None:
        """Close all member clients."""
        for client in self._clients:
            client.close()

    def __enter__(self) -> "BatchRelayClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
