"""
Relay Integration Layer.

Provides signed JSON-RPC access to bundle relays, for a single relay or a
batch of relays.
"""

from bundler.relay.interface import RelayInterface, RelayResponse, SendBundleResponse
from bundler.relay.client import RelayClient
from bundler.relay.batch import BatchRelayClient

__all__ = [
    "RelayInterface",
    "RelayResponse",
    "SendBundleResponse",
    "RelayClient",
    "BatchRelayClient",
]
