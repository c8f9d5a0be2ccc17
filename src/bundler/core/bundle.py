"""
Bundle model.

Represents an ordered set of signed transactions that a relay should include
atomically in a single block, plus the bundle's validity constraints.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

import structlog

from bundler.exceptions import BundleEncodingError
from bundler.tx.transaction import (
    HashLike,
    SignedTransactionLike,
    encode_transaction,
    to_hash_hex,
    transaction_hash,
)

logger = structlog.get_logger(__name__)

BLOCK_TAG_LATEST = "latest"


def to_block_hex(block_number: int) -> str:
    """Render a block number as a "0x"-prefixed hex quantity."""
    if block_number < 0:
        raise ValueError(f"Block number must be non-negative, got {block_number}")
    return hex(block_number)


def _describe(tx: Any) -> str:
    try:
        return transaction_hash(tx)
    except (AttributeError, TypeError, ValueError):
        return "<unknown>"


def _encode_hex(tx: SignedTransactionLike) -> str:
    try:
        return "0x" + encode_transaction(tx).hex()
    except (AttributeError, TypeError, ValueError) as e:
        tx_hash = _describe(tx)
        raise BundleEncodingError(
            f"failed to encode transaction {tx_hash}: {e}",
            tx_hash=tx_hash,
        ) from e


@dataclass
class Bundle:
    """
    A set of transactions submitted to a relay as one unit.

    Attributes:
        transactions: Signed transactions, in execution order (caller-owned)
        encoded_transactions: "0x" hex encoding of each transaction, same order
        block_number: Block the bundle is valid for, as a hex quantity
        state_block_number: Block (hex) or tag whose state a simulation runs on
        min_timestamp: Earliest valid timestamp (seconds), None for any
        max_timestamp: Latest valid timestamp (seconds), None for any
        reverting_tx_hashes: Hashes of transactions allowed to revert
    """

    transactions: List[SignedTransactionLike] = field(default_factory=list)
    encoded_transactions: List[str] = field(default_factory=list)
    block_number: str = "0x0"
    state_block_number: str = BLOCK_TAG_LATEST
    min_timestamp: Optional[int] = None
    max_timestamp: Optional[int] = None
    reverting_tx_hashes: List[str] = field(default_factory=list)

    @classmethod
    def from_transactions(
        cls,
        transactions: Sequence[SignedTransactionLike],
        block_number: int,
        state_block_number: int = 0,
        min_timestamp: Optional[int] = None,
        max_timestamp: Optional[int] = None,
        reverting_tx_hashes: Optional[Iterable[HashLike]] = None,
    ) -> "Bundle":
        """
        Create a new bundle.

        Args:
            transactions: Signed transactions to include, in order
            block_number: Block number for which this bundle is valid
            state_block_number: Block number to base a simulation on, "latest" if 0
            min_timestamp: Minimum timestamp the bundle is valid at, None for any
            max_timestamp: Maximum timestamp the bundle is valid at, None for any
            reverting_tx_hashes: Transaction hashes that are allowed to revert

        Returns:
            New Bundle instance

        Raises:
            BundleEncodingError: If any transaction cannot be encoded
        """
        txs = list(transactions)
        encoded = [_encode_hex(tx) for tx in txs]

        if state_block_number == 0:
            state_block = BLOCK_TAG_LATEST
        else:
            state_block = to_block_hex(state_block_number)

        bundle = cls(
            transactions=txs,
            encoded_transactions=encoded,
            block_number=to_block_hex(block_number),
            state_block_number=state_block,
            min_timestamp=min_timestamp,
            max_timestamp=max_timestamp,
            reverting_tx_hashes=[to_hash_hex(h) for h in reverting_tx_hashes or ()],
        )
        logger.debug(
            "bundle_created",
            size=bundle.size,
            block_number=bundle.block_number,
            state_block_number=bundle.state_block_number,
        )
        return bundle

    def add_transaction(self, tx: SignedTransactionLike) -> None:
        """
        Append a transaction to the bundle.

        The encoding is derived before anything is appended, so a failure
        leaves the bundle unchanged.

        Raises:
            BundleEncodingError: If the transaction cannot be encoded
        """
        encoded = _encode_hex(tx)
        self.transactions.append(tx)
        self.encoded_transactions.append(encoded)

    def copy(self) -> "Bundle":
        """Get an independent copy that can be mutated without affecting this bundle."""
        return Bundle(
            transactions=list(self.transactions),
            encoded_transactions=list(self.encoded_transactions),
            block_number=self.block_number,
            state_block_number=self.state_block_number,
            min_timestamp=self.min_timestamp,
            max_timestamp=self.max_timestamp,
            reverting_tx_hashes=list(self.reverting_tx_hashes),
        )

    @property
    def size(self) -> int:
        """Get the number of transactions in this bundle."""
        return len(self.transactions)

    @property
    def is_empty(self) -> bool:
        """Check if bundle has no transactions."""
        return len(self.transactions) == 0

    def __len__(self) -> int:
        return self.size

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the relay's bundle object.

        Unset optional fields are omitted rather than sent as null.
        """
        data: Dict[str, Any] = {
            "txs": list(self.encoded_transactions),
            "blockNumber": self.block_number,
        }
        if self.state_block_number:
            data["stateBlockNumber"] = self.state_block_number
        if self.min_timestamp is not None:
            data["minTimestamp"] = self.min_timestamp
        if self.max_timestamp is not None:
            data["maxTimestamp"] = self.max_timestamp
        if self.reverting_tx_hashes:
            data["revertingTxHashes"] = list(self.reverting_tx_hashes)
        return data

    def to_json(self) -> str:
        """Serialize to compact JSON."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    def __repr__(self) -> str:
        return (
            f"Bundle(size={self.size}, block_number={self.block_number}, "
            f"state_block_number={self.state_block_number})"
        )
