"""
Signed transaction helpers.

Bundles carry caller-owned signed transactions. Any object exposing the
signed wire bytes as ``raw_transaction`` and its hash as ``hash`` is
accepted, so ``eth_account`` SignedTransaction objects can be passed
directly. RawTransaction wraps bytes that were signed elsewhere.
"""

from dataclasses import dataclass
from typing import Protocol, Union

from eth_utils import keccak, to_bytes, to_hex


HashLike = Union[bytes, str]


class SignedTransactionLike(Protocol):
    """Structural type for signed transactions accepted by a Bundle."""

    raw_transaction: bytes
    hash: bytes


@dataclass(frozen=True)
class RawTransaction:
    """
    An already-encoded signed transaction.

    Attributes:
        raw_transaction: Canonical binary encoding (legacy RLP or typed envelope)
    """

    raw_transaction: bytes

    @property
    def hash(self) -> bytes:
        """Transaction hash (Keccak-256 of the encoded bytes)."""
        return keccak(self.raw_transaction)

    @classmethod
    def from_hex(cls, value: str) -> "RawTransaction":
        """
        Create a RawTransaction from a hex string.

        Args:
            value: Encoded transaction, with or without "0x" prefix

        Returns:
            New RawTransaction instance
        """
        return cls(raw_transaction=to_bytes(hexstr=value))


def encode_transaction(tx: SignedTransactionLike) -> bytes:
    """
    Get the canonical binary encoding of a signed transaction.

    Raises:
        AttributeError: If the object has no raw_transaction
        TypeError: If raw_transaction is not bytes or a hex string
        ValueError: If raw_transaction is empty or not valid hex
    """
    raw = tx.raw_transaction
    if isinstance(raw, str):
        raw = to_bytes(hexstr=raw)
    if not isinstance(raw, (bytes, bytearray)):
        raise TypeError(f"raw_transaction must be bytes, got {type(raw).__name__}")
    if not raw:
        raise ValueError("raw_transaction is empty")
    return bytes(raw)


def decode_transaction(encoded: str) -> RawTransaction:
    """Inverse of the bundle's hex encoding of a transaction."""
    return RawTransaction.from_hex(encoded)


def to_hash_hex(value: HashLike) -> str:
    """
    Normalize a 32-byte hash to a "0x"-prefixed lowercase hex string.

    Args:
        value: Hash as raw bytes or hex string

    Returns:
        Hex string of exactly 64 hex digits after the prefix
    """
    if isinstance(value, str):
        value = to_bytes(hexstr=value)
    if len(value) != 32:
        raise ValueError(f"Expected a 32-byte hash, got {len(value)} bytes")
    return to_hex(bytes(value))


def transaction_hash(tx: SignedTransactionLike) -> str:
    """Get a transaction's hash as hex."""
    return to_hash_hex(tx.hash)
