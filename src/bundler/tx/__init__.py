"""
Transaction module.

Handles signed transaction encoding and relay request signing.
"""

from bundler.tx.signer import RequestSigner, recover_signer
from bundler.tx.transaction import RawTransaction, decode_transaction, encode_transaction

__all__ = [
    "RawTransaction",
    "RequestSigner",
    "decode_transaction",
    "encode_transaction",
    "recover_signer",
]
