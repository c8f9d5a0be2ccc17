"""
Abstract interface for bundle relays.

Defines the contract for relay access that all relay clients must implement,
plus the JSON-RPC envelope and result types they share.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, Tuple

from bundler.core.bundle import Bundle
from bundler.core.response import BundleStats


METHOD_SEND_BUNDLE = "eth_sendBundle"
METHOD_CALL_BUNDLE = "eth_callBundle"
METHOD_GET_BUNDLE_STATS = "flashbots_getBundleStats"


def build_rpc_payload(method: str, params: Any) -> bytes:
    """
    Serialize a JSON-RPC 2.0 request.

    The returned bytes are exactly what gets signed and sent.

    Args:
        method: JSON-RPC method name
        params: Value for the "params" member

    Returns:
        Compact JSON request body
    """
    payload = {
        "jsonrpc": "2.0",
        "method": method,
        "params": params,
        "id": 1,
    }
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True)
class RelayResponse:
    """Raw response of one relay round trip."""
    response_bytes: bytes = b""
    duration: timedelta = timedelta(0)


@dataclass(frozen=True)
class SendBundleResponse(RelayResponse):
    """
    Outcome of sending a bundle to one relay.

    Request failures are carried in error instead of being raised, so one
    failing relay does not hide the others' responses in a batch send.
    """
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        """Check if the request completed (the body may still report errors)."""
        return self.error is None


class RelayInterface(ABC):
    """
    Abstract interface for a bundle relay.

    This interface defines all relay operations:
    - Bundle submission
    - Bundle simulation
    - Bundle stats queries
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Label identifying this relay."""
        pass

    @abstractmethod
    def send_bundle(self, bundle: Bundle) -> SendBundleResponse:
        """
        Submit a bundle for inclusion.

        Args:
            bundle: Bundle to submit

        Returns:
            Raw response, elapsed time and any request error
        """
        pass

    @abstractmethod
    def simulate_bundle(self, bundle: Bundle) -> RelayResponse:
        """
        Simulate a bundle against the state of its state block.

        Args:
            bundle: Bundle to simulate

        Returns:
            Raw response and elapsed time

        Raises:
            RelayConfigurationError: If the relay has no simulation endpoint
            RelayRequestError: If the request fails
        """
        pass

    @abstractmethod
    def get_bundle_stats(self, bundle_hash: str, block_number: str) -> Tuple[BundleStats, timedelta]:
        """
        Query stats for a submitted bundle.

        Args:
            bundle_hash: Bundle hash as hex
            block_number: Target block number as hex

        Returns:
            Decoded stats and elapsed time

        Raises:
            RelayRequestError: If the request fails
            MalformedResponseError: If the response does not match BundleStats
        """
        pass

    def close(self) -> None:
        """Release any resources held by the relay client."""
        pass
