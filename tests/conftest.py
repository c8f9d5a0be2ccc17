"""
Pytest configuration and shared fixtures for the test suite.
"""

import json
from datetime import timedelta
from typing import Callable, List, Optional, Tuple

import httpx
import pytest
from eth_account import Account

from bundler.config import RelayConfig, set_config
from bundler.core.bundle import Bundle
from bundler.core.response import BundleStats, parse_bundle_stats
from bundler.relay.interface import RelayInterface, RelayResponse, SendBundleResponse
from bundler.tx.transaction import RawTransaction


# ============================================================================
# Test Keys and Transactions
# ============================================================================

TEST_PRIVATE_KEY = "0x9c03d71f2cab3ac367e407e25ed213c56b50957a1f75d9f6b4f9be00066d6963"
TEST_ADDRESS = "0xb73C1b61eECdD422A095E619d121C3162fd9fD51"

OTHER_PRIVATE_KEY = "0x" + "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"

# Legacy (EIP-155, chain id 1) signed transaction
SAMPLE_RAW_TX = "0xf903068080830c350094111111111111111111111111111111111111111180b902a4589b65e900000000000000000000000000000000000000000000000000000000000000200000000000000000000000001e0447b19bb6ecfdae1e4ae1694b0c3659614e4e0000000000000000000000006b5194d22231a3b030ddad0668db8984833926d6000000000000000000000000a0b86991c6218b36c1d19d4a2e9eb0ce3606eb48000000000000000000000000c02aaa39b223fe8d0a0e5c4f27ead9083c756cc2000000000000000000000000000000000000000000000000000000000000000200000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000b77ede0000000000000000000000000000000000000000000000000011e0d95d7f154a000000000000000000000000e592427a0aece92de3edee1f18e0157c0586156400000000000000000000000000000000000000000000000000000000000001400000000000000000000000000000000000000000000000000000000000000104db3e2198000000000000000000000000c02aaa39b223fe8d0a0e5c4f27ead9083c756cc2000000000000000000000000a0b86991c6218b36c1d19d4a2e9eb0ce3606eb480000000000000000000000000000000000000000000000000000000000000bb80000000000000000000000006951b5bd815043e3f842c1b026b0fa888cc2dd850000000000000000000000000000000000000000000000000000000060c251690000000000000000000000000000000000000000000000000000000000b77ee20000000000000000000000000000000000000000000000000011e0d95d7f154a00000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000000025a03ed2623ec91dec66a8167fd2e93928d04c2f5b763c060e18f7f5ed636f84bc29a00322ef1ae2dbccffdf35a86f7fc06f5a2490086136c5854517945bf03b690d08"

SUBMISSION_ENDPOINT = "https://relay.example/rpc"
SIMULATION_ENDPOINT = "https://sim.example/rpc"


def sign_transfer(nonce: int, private_key: str = TEST_PRIVATE_KEY, typed: bool = False):
    """Sign a zero-value self transfer on chain id 1."""
    account = Account.from_key(private_key)
    tx = {
        "chainId": 1,
        "nonce": nonce,
        "to": account.address,
        "value": 0,
        "gas": 21_000,
    }
    if typed:
        tx.update(type=2, maxFeePerGas=30_000_000_000, maxPriorityFeePerGas=1_000_000_000)
    else:
        tx["gasPrice"] = 20_000_000_000
    return account.sign_transaction(tx)


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> RelayConfig:
    """Create a test configuration."""
    return RelayConfig(
        _env_file=None,
        signing_key=TEST_PRIVATE_KEY,
        relay_name="test-relay",
        relay_url=SUBMISSION_ENDPOINT,
        simulation_url=SIMULATION_ENDPOINT,
        request_timeout_seconds=5,
        log_level="DEBUG",
    )


@pytest.fixture(autouse=True)
def isolated_config(test_config):
    """Install the test configuration as the global config."""
    set_config(test_config)
    yield test_config
    set_config(None)


# ============================================================================
# Transaction and Bundle Fixtures
# ============================================================================

@pytest.fixture
def sample_raw_tx() -> RawTransaction:
    """The sample legacy transaction as a RawTransaction."""
    return RawTransaction.from_hex(SAMPLE_RAW_TX)


@pytest.fixture
def signed_transactions() -> list:
    """A legacy and a dynamic-fee transaction signed by the test key."""
    return [sign_transfer(0), sign_transfer(1, typed=True)]


@pytest.fixture
def sample_bundle(signed_transactions) -> Bundle:
    """A two-transaction bundle for block 12639480."""
    return Bundle.from_transactions(signed_transactions, block_number=12_639_480)


# ============================================================================
# HTTP Transport Stubs
# ============================================================================

SIMULATION_SUCCESS = {
    "id": 1,
    "jsonrpc": "2.0",
    "result": {
        "bundleHash": "0x0d1b53154e2910960564190ad0c5ef34c49befb865e3d56374adbf2b1160aa65",
        "results": [{"txHash": "0x0a9e21a9c0dd6b868b1d26d9bc6b11a549fac1fb70bc2c10ebf925c43def862c"}],
        "totalGasUsed": 243051,
    },
}


class RecordingTransport:
    """
    httpx transport stub that records every request.

    Responds with a fixed body unless a custom handler is given.
    """

    def __init__(
        self,
        body: bytes = json.dumps(SIMULATION_SUCCESS).encode(),
        status_code: int = 200,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ):
        self.requests: List[httpx.Request] = []
        self._body = body
        self._status_code = status_code
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._handler is not None:
            return self._handler(request)
        return httpx.Response(self._status_code, content=self._body)

    def client(self) -> httpx.Client:
        """Create an httpx.Client that routes through this stub."""
        return httpx.Client(transport=httpx.MockTransport(self))

    @property
    def last_payload(self) -> dict:
        """JSON body of the most recent request."""
        return json.loads(self.requests[-1].content)


@pytest.fixture
def recording_transport() -> RecordingTransport:
    """Create a transport stub answering with a successful simulation."""
    return RecordingTransport()


# ============================================================================
# Mock Relay Interface
# ============================================================================

class MockRelay(RelayInterface):
    """Mock relay for testing batch fan-out."""

    def __init__(self, name: str, body: bytes = b'{"result":{"bundleHash":"0x01"}}', error: Optional[Exception] = None):
        self._name = name
        self._body = body
        self._error = error
        self.sent: List[Bundle] = []
        self.closed = False

    @property
    def name(self) -> str:
        return self._name

    def send_bundle(self, bundle: Bundle) -> SendBundleResponse:
        self.sent.append(bundle)
        if self._error is not None:
            return SendBundleResponse(error=self._error)
        return SendBundleResponse(response_bytes=self._body, duration=timedelta(milliseconds=5))

    def simulate_bundle(self, bundle: Bundle) -> RelayResponse:
        return RelayResponse(response_bytes=self._body, duration=timedelta(milliseconds=5))

    def get_bundle_stats(self, bundle_hash: str, block_number: str) -> Tuple[BundleStats, timedelta]:
        stats = parse_bundle_stats(b'{"id":1,"jsonrpc":"2.0","result":{}}')
        return stats, timedelta(0)

    def close(self) -> None:
        self.closed = True
