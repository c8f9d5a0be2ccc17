"""
Error taxonomy for the bundle relay client.

Configuration and encoding errors are fatal and raised immediately.
Request and parse errors are raised (or, for send_bundle, returned in the
response). Execution errors describe per-transaction failures reported by a
relay and are normally returned as data rather than raised.
"""

import json
from typing import Any, Optional


class BundlerError(Exception):
    """Base error for the bundle relay client."""
    pass


class RelayConfigurationError(BundlerError):
    """Raised when a client is missing a key or endpoint, or batch inputs disagree."""
    pass


class BundleEncodingError(BundlerError):
    """Raised when a transaction in a bundle cannot be encoded."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class RelayRequestError(BundlerError):
    """Raised when signing, sending or reading a relay request fails."""

    def __init__(self, message: str, endpoint: Optional[str] = None):
        super().__init__(message)
        self.endpoint = endpoint


class MalformedResponseError(BundlerError):
    """Raised when a relay response does not have the expected shape."""

    def __init__(self, message: str, body: bytes = b""):
        super().__init__(f"{message}: {body.decode('utf-8', errors='replace')}")
        self.body = body


class ExecutionError(BundlerError):
    """
    A transaction in a bundle failed or reverted during execution.

    Attributes:
        error: Execution error reported by the relay ("" when absent)
        revert: Revert string reported by the relay ("" when absent)
        tx_hash: Hash of the failing transaction, when reported
    """

    def __init__(
        self,
        message: str,
        error: str = "",
        revert: str = "",
        tx_hash: Optional[str] = None,
    ):
        super().__init__(message)
        self.error = error
        self.revert = revert
        self.tx_hash = tx_hash

    @classmethod
    def from_result(cls, entry: dict) -> "ExecutionError":
        """Build from one entry of a relay's per-transaction results."""
        error = _field_str(entry.get("error"))
        revert = _field_str(entry.get("revert"))
        return cls(
            f"err: {error}, revertString: {revert}",
            error=error,
            revert=revert,
            tx_hash=entry.get("txHash"),
        )


class RelayRpcError(ExecutionError):
    """
    The relay answered with a top-level JSON-RPC error.

    Attributes:
        payload: The raw value of the response's "error" member
        code: JSON-RPC error code, when the payload is an object carrying one
    """

    def __init__(self, payload: Any):
        super().__init__(_field_str(payload), error=_field_str(payload))
        self.payload = payload
        self.code = payload.get("code") if isinstance(payload, dict) else None


def _field_str(value: Any) -> str:
    """String form of a JSON value: strings verbatim, null as "", others as compact JSON."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))
