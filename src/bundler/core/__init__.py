"""
Core bundle components.

This module contains the bundle model and the interpretation of relay
responses.
"""

from bundler.core.bundle import BLOCK_TAG_LATEST, Bundle
from bundler.core.response import (
    BundleStats,
    BundleStatsResult,
    ErrorResponse,
    ResultResponse,
    classify_response,
    extract_bundle_hash,
    extract_execution_errors,
    extract_gas_used,
    parse_bundle_stats,
)

__all__ = [
    "BLOCK_TAG_LATEST",
    "Bundle",
    "BundleStats",
    "BundleStatsResult",
    "ErrorResponse",
    "ResultResponse",
    "classify_response",
    "extract_bundle_hash",
    "extract_execution_errors",
    "extract_gas_used",
    "parse_bundle_stats",
]
