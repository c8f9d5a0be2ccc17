"""
Bundle Relay Client

Packages signed Ethereum transactions into atomic bundles, signs relay
requests, submits and simulates bundles on private transaction relays, and
interprets relay responses.
"""

__version__ = "0.1.0"

from bundler.core.bundle import Bundle
from bundler.core.response import (
    BundleStats,
    extract_bundle_hash,
    extract_execution_errors,
    extract_gas_used,
)
from bundler.exceptions import (
    BundleEncodingError,
    BundlerError,
    ExecutionError,
    MalformedResponseError,
    RelayConfigurationError,
    RelayRequestError,
    RelayRpcError,
)
from bundler.relay.batch import BatchRelayClient
from bundler.relay.client import RelayClient
from bundler.relay.interface import RelayResponse, SendBundleResponse
from bundler.tx.signer import RequestSigner
from bundler.tx.transaction import RawTransaction

__all__ = [
    "BatchRelayClient",
    "Bundle",
    "BundleEncodingError",
    "BundleStats",
    "BundlerError",
    "ExecutionError",
    "MalformedResponseError",
    "RawTransaction",
    "RelayClient",
    "RelayConfigurationError",
    "RelayRequestError",
    "RelayResponse",
    "RelayRpcError",
    "RequestSigner",
    "SendBundleResponse",
    "extract_bundle_hash",
    "extract_execution_errors",
    "extract_gas_used",
]
