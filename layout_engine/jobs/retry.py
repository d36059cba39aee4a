"""Dispatch failure classification and backoff for the layout poller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

# Network-level failures: the generation endpoint is unreachable, so retrying in-cycle is pointless.
TRANSPORT_ERROR_CODES: Final[frozenset[str]] = frozenset({"ECONNREFUSED", "ETIMEDOUT", "ENOTFOUND", "ECONNRESET"})


@dataclass(frozen=True)
class FailureSignal:
  """Transport-neutral description of a failed dispatch attempt."""

  message: str
  code: str | None = None
  status_code: int | None = None


@dataclass(frozen=True)
class DispatchFailureClassification:
  """Classification result for a dispatch failure."""

  retryable: bool
  reason: str
  category: str
  code: str | None = None


def classify_dispatch_failure(signal: FailureSignal) -> DispatchFailureClassification:
  """
  Classify a dispatch failure as retryable or non-retryable.

  Non-retryable (transport):
    - ECONNREFUSED, ETIMEDOUT, ENOTFOUND, ECONNRESET

  Retryable (application):
    - non-2xx responses
    - anything else without a transport code
  """
  if signal.code in TRANSPORT_ERROR_CODES:
    return DispatchFailureClassification(retryable=False, reason=f"Transport failure ({signal.code}): {signal.message}", category="transport_error", code=signal.code)

  if signal.status_code is not None:
    return DispatchFailureClassification(retryable=True, reason=f"Endpoint returned {signal.status_code}: {signal.message}", category="http_error", code=signal.code)

  return DispatchFailureClassification(retryable=True, reason=f"Dispatch failed: {signal.message}", category="application_error", code=signal.code)


def backoff_delay_ms(attempt: int, base_ms: int) -> int:
  """Linear backoff: the wait after failed attempt `attempt` (1-based)."""
  if attempt < 1:
    raise ValueError("attempt must be >= 1")
  return base_ms * attempt
