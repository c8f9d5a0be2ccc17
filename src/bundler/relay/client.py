"""
Relay client for bundle submission.

Sends signed JSON-RPC requests to a relay over HTTP (eth_sendBundle,
eth_callBundle, flashbots_getBundleStats).
"""

import time
from datetime import timedelta
from typing import Optional, Tuple, Union

import httpx
import structlog

from bundler.config import RelayConfig, get_config
from bundler.core.bundle import BLOCK_TAG_LATEST, Bundle
from bundler.core.response import BundleStats, parse_bundle_stats
from bundler.exceptions import BundlerError, RelayConfigurationError, RelayRequestError
from bundler.relay.interface import (
    METHOD_CALL_BUNDLE,
    METHOD_GET_BUNDLE_STATS,
    METHOD_SEND_BUNDLE,
    RelayInterface,
    RelayResponse,
    SendBundleResponse,
    build_rpc_payload,
)
from bundler.tx.signer import SIGNATURE_HEADER, KeyLike, RequestSigner

logger = structlog.get_logger(__name__)


def create_transport(config: Optional[RelayConfig] = None) -> httpx.Client:
    """
    Create an HTTP client for relay requests.

    Args:
        config: Relay configuration. Uses global config if not provided.

    Returns:
        httpx.Client with the configured timeout and connection limits
    """
    config = config or get_config()
    return httpx.Client(
        timeout=config.request_timeout_seconds,
        limits=httpx.Limits(max_connections=config.max_connections),
    )


class RelayClient(RelayInterface):
    """
    Client for one relay.

    Owns one signing identity, a submission endpoint and an optional
    simulation endpoint. Calls do not modify client state, so one client can
    be shared between threads.
    """

    def __init__(
        self,
        signing_key: Union[KeyLike, RequestSigner, None],
        name: str,
        submission_endpoint: str,
        simulation_endpoint: str = "",
        transport: Optional[httpx.Client] = None,
        config: Optional[RelayConfig] = None,
    ):
        """
        Initialize the relay client.

        Args:
            signing_key: Key used to sign requests (any valid private key)
            name: Label identifying this relay
            submission_endpoint: Relay endpoint bundles and stats queries are sent to
            simulation_endpoint: Endpoint used for simulation, empty to disable
            transport: HTTP client to use. A client is created (and owned) from
                config if not provided.
            config: Relay configuration. Uses global config if not provided.

        Raises:
            RelayConfigurationError: If the key or submission endpoint is missing
        """
        if not submission_endpoint:
            raise RelayConfigurationError(f"must provide a submission endpoint for relay {name}")

        if isinstance(signing_key, RequestSigner):
            self._signer = signing_key
        else:
            self._signer = RequestSigner.from_key(signing_key)

        self._name = name
        self._submission_endpoint = submission_endpoint
        self._simulation_endpoint = simulation_endpoint or ""

        self._owns_transport = transport is None
        self._client = transport if transport is not None else create_transport(config)

    @classmethod
    def from_config(
        cls,
        config: Optional[RelayConfig] = None,
        transport: Optional[httpx.Client] = None,
    ) -> "RelayClient":
        """Create a relay client from configuration."""
        config = config or get_config()
        return cls(
            RequestSigner.from_config(config),
            name=config.relay_name,
            submission_endpoint=config.relay_url,
            simulation_endpoint=config.simulation_endpoint,
            transport=transport,
            config=config,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def signing_address(self) -> str:
        """Checksummed address relays will attribute requests to."""
        return self._signer.address

    @property
    def submission_endpoint(self) -> str:
        return self._submission_endpoint

    @property
    def simulation_endpoint(self) -> str:
        return self._simulation_endpoint

    def _request(self, endpoint: str, payload: bytes) -> RelayResponse:
        """Sign and POST a request body, returning the raw response."""
        try:
            signature = self._signer.signature_header(payload)
        except (ValueError, TypeError) as e:
            raise RelayRequestError(f"failed to sign request: {e}", endpoint=endpoint) from e

        headers = {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: signature,
        }

        start = time.perf_counter()
        try:
            response = self._client.post(endpoint, content=payload, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("relay_request_error", relay=self._name, endpoint=endpoint, error=str(e))
            raise RelayRequestError(f"relay request to {endpoint} failed: {e}", endpoint=endpoint) from e
        duration = timedelta(seconds=time.perf_counter() - start)

        if response.is_error:
            # Body is still returned; its JSON carries the relay's explanation
            logger.warning(
                "relay_http_status",
                relay=self._name,
                endpoint=endpoint,
                status=response.status_code,
            )

        return RelayResponse(response_bytes=response.content, duration=duration)

    def send_bundle(self, bundle: Bundle) -> SendBundleResponse:
        """Submit a bundle via eth_sendBundle. Request errors are returned, not raised."""
        payload = build_rpc_payload(METHOD_SEND_BUNDLE, [bundle.to_dict()])

        try:
            response = self._request(self._submission_endpoint, payload)
        except BundlerError as e:
            return SendBundleResponse(error=e)

        logger.info(
            "bundle_sent",
            relay=self._name,
            block_number=bundle.block_number,
            size=bundle.size,
            duration_ms=round(response.duration.total_seconds() * 1000, 3),
        )
        return SendBundleResponse(
            response_bytes=response.response_bytes,
            duration=response.duration,
        )

    def simulate_bundle(self, bundle: Bundle) -> RelayResponse:
        """Simulate a bundle via eth_callBundle on the simulation endpoint."""
        if not self._simulation_endpoint:
            raise RelayConfigurationError(f"no simulation endpoint for relay {self._name}")

        if bundle.state_block_number in ("", "0x0"):
            bundle = bundle.copy()
            bundle.state_block_number = BLOCK_TAG_LATEST

        payload = build_rpc_payload(METHOD_CALL_BUNDLE, [bundle.to_dict()])
        response = self._request(self._simulation_endpoint, payload)

        logger.info(
            "bundle_simulated",
            relay=self._name,
            state_block_number=bundle.state_block_number,
            size=bundle.size,
            duration_ms=round(response.duration.total_seconds() * 1000, 3),
        )
        return response

    def get_bundle_stats(self, bundle_hash: str, block_number: str) -> Tuple[BundleStats, timedelta]:
        """
        Query flashbots_getBundleStats.

        The signing address must be the one that submitted the bundle.
        """
        payload = build_rpc_payload(
            METHOD_GET_BUNDLE_STATS,
            [{"bundleHash": bundle_hash, "blockNumber": block_number}],
        )
        response = self._request(self._submission_endpoint, payload)
        stats = parse_bundle_stats(response.response_bytes)

        logger.debug("bundle_stats_fetched", relay=self._name, bundle_hash=bundle_hash)
        return stats, response.duration

    def close(self) -> None:
        """Close the HTTP client if this relay client created it."""
        if self._owns_transport:
            self._client.close()

    def __enter__(self) -> "RelayClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"RelayClient(name={self._name!r}, endpoint={self._submission_endpoint!r})"
