"""
Relay response interpretation.

Relays answer with JSON whose shape depends on the outcome:

- success: {"result": {"bundleHash": ..., "totalGasUsed": ..., "results": [...]}}
- JSON-RPC error: {"error": {"code": ..., "message": ...}}
- execution failure: a success shape whose per-transaction "results"
  entries carry "error" and/or "revert"

Bodies are first classified into a ResultResponse or ErrorResponse; anything
else is a MalformedResponseError. Extraction then works on the typed variant.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bundler.exceptions import ExecutionError, MalformedResponseError, RelayRpcError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ResultResponse:
    """A response carrying a top-level result object."""
    result: Dict[str, Any]
    body: bytes


@dataclass(frozen=True)
class ErrorResponse:
    """A response carrying a top-level JSON-RPC error (any JSON value)."""
    error: Any
    body: bytes


RelayResult = Union[ResultResponse, ErrorResponse]


def _as_bytes(body: Union[bytes, str]) -> bytes:
    return body.encode("utf-8") if isinstance(body, str) else bytes(body)


def _decode_object(body: bytes) -> Dict[str, Any]:
    try:
        data = json.loads(body)
    except ValueError as e:
        raise MalformedResponseError("failed to decode relay response", body) from e
    if not isinstance(data, dict):
        raise MalformedResponseError("relay response is not a JSON object", body)
    return data


def classify_response(body: Union[bytes, str]) -> RelayResult:
    """
    Classify a raw relay response.

    A result object takes precedence over an error member, matching how
    relays populate one or the other.

    Args:
        body: Raw response bytes

    Returns:
        ResultResponse or ErrorResponse

    Raises:
        MalformedResponseError: If the body is not JSON, not an object, or
            has neither a result object nor an error member
    """
    body = _as_bytes(body)
    data = _decode_object(body)

    result = data.get("result")
    if isinstance(result, dict):
        return ResultResponse(result=result, body=body)
    if "error" in data:
        return ErrorResponse(error=data["error"], body=body)

    raise MalformedResponseError("relay response has neither a result object nor an error", body)


def _require_result(body: Union[bytes, str]) -> ResultResponse:
    response = classify_response(body)
    if isinstance(response, ErrorResponse):
        raise RelayRpcError(response.error)
    return response


def extract_gas_used(body: Union[bytes, str]) -> int:
    """
    Get result.totalGasUsed from a simulation response.

    Raises:
        RelayRpcError: If the relay returned a JSON-RPC error
        MalformedResponseError: If totalGasUsed is missing or not a number
    """
    response = _require_result(body)
    gas_used = response.result.get("totalGasUsed")

    if isinstance(gas_used, bool) or not isinstance(gas_used, (int, float)):
        raise MalformedResponseError("missing or invalid result.totalGasUsed", response.body)
    if isinstance(gas_used, float):
        if not gas_used.is_integer():
            raise MalformedResponseError("non-integral result.totalGasUsed", response.body)
        gas_used = int(gas_used)
    return gas_used


def extract_bundle_hash(body: Union[bytes, str]) -> str:
    """
    Get result.bundleHash from a send or simulation response.

    Raises:
        RelayRpcError: If the relay returned a JSON-RPC error
        MalformedResponseError: If bundleHash is missing or not a string
    """
    response = _require_result(body)
    bundle_hash = response.result.get("bundleHash")

    if not isinstance(bundle_hash, str):
        raise MalformedResponseError("missing or invalid result.bundleHash", response.body)
    return bundle_hash


def extract_execution_errors(body: Union[bytes, str]) -> List[ExecutionError]:
    """
    Collect execution errors from a send or simulation response.

    Returns:
        Empty list on success. A single RelayRpcError when the relay returned
        a top-level error. Otherwise one ExecutionError per result entry that
        reports an error and/or revert, in result order.

    Raises:
        MalformedResponseError: If the body cannot be classified
    """
    response = classify_response(body)
    if isinstance(response, ErrorResponse):
        rpc_error = RelayRpcError(response.error)
        logger.debug("relay_rpc_error", code=rpc_error.code, message=str(rpc_error))
        return [rpc_error]

    results = response.result.get("results")
    if not isinstance(results, list):
        return []

    errors: List[ExecutionError] = []
    for entry in results:
        if not isinstance(entry, dict):
            raise MalformedResponseError("unexpected entry in result.results", response.body)
        if "error" in entry or "revert" in entry:
            errors.append(ExecutionError.from_result(entry))

    if errors:
        logger.debug("bundle_execution_errors", count=len(errors))
    return errors


# ============================================================================
# Bundle Stats
# ============================================================================

class BundleStatsResult(BaseModel):
    """Relay-side state of a submitted bundle."""

    model_config = ConfigDict(populate_by_name=True)

    is_high_priority: bool = Field(default=False, alias="isHighPriority")
    is_sent_to_miners: bool = Field(default=False, alias="isSentToMiners")
    is_simulated: bool = Field(default=False, alias="isSimulated")
    sent_to_miners_at: Optional[datetime] = Field(default=None, alias="sentToMinersAt")
    simulated_at: Optional[datetime] = Field(default=None, alias="simulatedAt")
    submitted_at: Optional[datetime] = Field(default=None, alias="submittedAt")


class BundleStats(BaseModel):
    """Response to flashbots_getBundleStats."""

    id: int = 0
    jsonrpc: str = "2.0"
    result: BundleStatsResult

    @field_validator("jsonrpc", mode="before")
    @classmethod
    def _jsonrpc_to_str(cls, value: Any) -> Any:
        # some relays send the version as a number
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


def parse_bundle_stats(body: Union[bytes, str]) -> BundleStats:
    """
    Decode a flashbots_getBundleStats response.

    Raises:
        MalformedResponseError: If the body does not match BundleStats
    """
    body = _as_bytes(body)
    try:
        return BundleStats.model_validate_json(body)
    except ValidationError as e:
        raise MalformedResponseError("failed to decode bundle stats", body) from e
