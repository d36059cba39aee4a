"""Unit tests for dispatch failure classification and the HTTP dispatcher."""

from __future__ import annotations

import json
from dataclasses import replace

import httpx
import pytest

from layout_engine.jobs.dispatcher import DispatchError, LayoutDispatcher, failure_signal_from_exception
from layout_engine.jobs.retry import TRANSPORT_ERROR_CODES, FailureSignal, backoff_delay_ms, classify_dispatch_failure


@pytest.mark.parametrize("code", sorted(TRANSPORT_ERROR_CODES))
def test_transport_codes_are_not_retryable(code: str) -> None:
  classification = classify_dispatch_failure(FailureSignal(message="boom", code=code))
  assert classification.retryable is False
  assert classification.category == "transport_error"
  assert classification.code == code


def test_http_errors_are_retryable() -> None:
  classification = classify_dispatch_failure(FailureSignal(message="AI response parsing failed", status_code=500))
  assert classification.retryable is True
  assert classification.category == "http_error"


def test_unknown_failures_are_retryable() -> None:
  classification = classify_dispatch_failure(FailureSignal(message="weird", code="EPIPE"))
  assert classification.retryable is True
  assert classification.category == "application_error"


def test_backoff_is_linear() -> None:
  assert [backoff_delay_ms(attempt, 2000) for attempt in range(1, 5)] == [2000, 4000, 6000, 8000]
  with pytest.raises(ValueError):
    backoff_delay_ms(0, 2000)


def test_httpx_exceptions_map_to_transport_codes() -> None:
  assert failure_signal_from_exception(httpx.ConnectError("[Errno 111] Connection refused")).code == "ECONNREFUSED"
  assert failure_signal_from_exception(httpx.ConnectError("[Errno -2] Name or service not known")).code == "ENOTFOUND"
  assert failure_signal_from_exception(httpx.ReadTimeout("timed out")).code == "ETIMEDOUT"
  assert failure_signal_from_exception(httpx.ConnectTimeout("timed out")).code == "ETIMEDOUT"
  assert failure_signal_from_exception(httpx.RemoteProtocolError("Server disconnected")).code == "ECONNRESET"
  assert failure_signal_from_exception(httpx.ReadError("reset by peer")).code == "ECONNRESET"


@pytest.mark.anyio
async def test_dispatcher_posts_course_id_with_long_timeout(settings) -> None:
  seen: list[httpx.Request] = []

  def handler(request: httpx.Request) -> httpx.Response:
    seen.append(request)
    return httpx.Response(200, json={"success": True})

  settings = replace(settings, deployed_url="http://layout.internal", dispatch_timeout_seconds=1800.0)
  async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
    await LayoutDispatcher(settings, client=client).dispatch("c1")

  assert len(seen) == 1
  assert str(seen[0].url) == "http://layout.internal/api/generate-course-layout"
  assert json.loads(seen[0].content) == {"courseId": "c1"}
  assert seen[0].extensions["timeout"]["read"] == 1800.0


@pytest.mark.anyio
async def test_dispatcher_wraps_error_responses(settings) -> None:
  def handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(500, json={"success": False, "error": "AI response parsing failed. Please try again."})

  async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
    with pytest.raises(DispatchError) as exc_info:
      await LayoutDispatcher(settings, client=client).dispatch("c1")

  assert exc_info.value.signal.status_code == 500
  assert classify_dispatch_failure(exc_info.value.signal).retryable is True


@pytest.mark.anyio
async def test_dispatcher_wraps_connection_refused(settings) -> None:
  def handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

  async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
    with pytest.raises(DispatchError) as exc_info:
      await LayoutDispatcher(settings, client=client).dispatch("c1")

  assert exc_info.value.signal.code == "ECONNREFUSED"
  assert classify_dispatch_failure(exc_info.value.signal).retryable is False
