"""
Request Signer - authenticates relay requests.

Relays recover the sender's address from the X-Flashbots-Signature header and
use it for reputation and flow control. The signature is an EIP-191 personal
message signature over the hex Keccak-256 digest of the exact request body.
"""

from typing import Optional, Tuple, Union

import structlog

from eth_account import Account
from eth_account.messages import SignableMessage, encode_defunct
from eth_account.signers.local import LocalAccount
from eth_utils import keccak, to_bytes, to_hex

from bundler.config import RelayConfig, get_config
from bundler.exceptions import RelayConfigurationError

logger = structlog.get_logger(__name__)

SIGNATURE_HEADER = "X-Flashbots-Signature"

# eth_account reports v as 27/28; relays expect the raw recovery id
V_OFFSET = 27

KeyLike = Union[str, bytes, LocalAccount]


def _payload_message(payload: bytes) -> SignableMessage:
    """
    Build the personal message for a request body.

    The digest is rendered as "0x"-prefixed hex and that text is what gets
    signed, so the length in the EIP-191 prefix is the hex string's length (66).
    """
    digest_hex = to_hex(keccak(payload))
    return encode_defunct(text=digest_hex)


class RequestSigner:
    """
    Signs relay request bodies with a fixed signing identity.

    The signing key can be any valid private key; it does not need to hold
    funds or match the signers of the bundled transactions.
    """

    def __init__(self, account: LocalAccount):
        """
        Initialize the request signer.

        Args:
            account: Local account holding the signing key
        """
        self._account = account

    @classmethod
    def from_key(cls, key: Optional[KeyLike]) -> "RequestSigner":
        """
        Create a signer from a private key.

        Args:
            key: Hex string, raw 32 bytes, or an existing LocalAccount

        Returns:
            New RequestSigner instance

        Raises:
            RelayConfigurationError: If no key is given or it is not a valid key
        """
        if key is None or (isinstance(key, (str, bytes)) and not key):
            raise RelayConfigurationError("must provide a signing private key")
        if isinstance(key, LocalAccount):
            return cls(key)

        try:
            account = Account.from_key(key)
        except (ValueError, TypeError) as e:
            raise RelayConfigurationError("invalid signing private key") from e

        logger.debug("signing_key_loaded", address=account.address)
        return cls(account)

    @classmethod
    def from_config(cls, config: Optional[RelayConfig] = None) -> "RequestSigner":
        """Load the signing key from configuration."""
        config = config or get_config()
        if config.signing_key is None:
            raise RelayConfigurationError("No signing key configured")
        return cls.from_key(config.signing_key.get_secret_value())

    @property
    def address(self) -> str:
        """Checksummed address of the signing key."""
        return self._account.address

    def sign_payload(self, payload: bytes) -> str:
        """
        Sign a request body.

        Args:
            payload: Exact bytes that will be sent as the HTTP body

        Returns:
            65-byte signature (r || s || recovery id) as "0x" hex
        """
        signed = self._account.sign_message(_payload_message(payload))
        signature = (
            signed.r.to_bytes(32, "big")
            + signed.s.to_bytes(32, "big")
            + bytes([signed.v - V_OFFSET])
        )
        return to_hex(signature)

    def signature_header(self, payload: bytes) -> str:
        """Get the X-Flashbots-Signature header value for a request body."""
        return f"{self.address}:{self.sign_payload(payload)}"


def parse_signature_header(value: str) -> Tuple[str, str]:
    """Split an X-Flashbots-Signature header into (address, signature)."""
    address, sep, signature = value.partition(":")
    if not sep or not address or not signature:
        raise ValueError(f"Malformed signature header: {value!r}")
    return address, signature


def recover_signer(payload: bytes, signature: str) -> str:
    """
    Recover the address that signed a request body.

    Args:
        payload: Request body bytes
        signature: Signature as produced by RequestSigner.sign_payload

    Returns:
        Checksummed address of the signer
    """
    raw = to_bytes(hexstr=signature)
    if len(raw) != 65:
        raise ValueError(f"Expected a 65-byte signature, got {len(raw)} bytes")

    r = int.from_bytes(raw[:32], "big")
    s = int.from_bytes(raw[32:64], "big")
    v = raw[64]
    if v < V_OFFSET:
        v += V_OFFSET
    return Account.recover_message(_payload_message(payload), vrs=(v, r, s))
