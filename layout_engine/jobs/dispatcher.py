"""HTTP dispatch of course layout generation requests."""

from __future__ import annotations

import logging
import socket

import httpx

from layout_engine.config import Settings
from layout_engine.jobs.retry import FailureSignal

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/generate-course-layout"


class DispatchError(RuntimeError):
  """Raised when a dispatch attempt does not end in a 2xx response."""

  def __init__(self, signal: FailureSignal) -> None:
    self.signal = signal
    super().__init__(signal.message)


def _is_name_resolution_failure(exc: BaseException) -> bool:
  current: BaseException | None = exc
  while current is not None:
    if isinstance(current, socket.gaierror):
      return True
    current = current.__cause__ or current.__context__
  message = str(exc).lower()
  return "name or service not known" in message or "nodename nor servname" in message or "getaddrinfo" in message


def failure_signal_from_exception(exc: httpx.HTTPError) -> FailureSignal:
  """Map an httpx failure onto the transport-neutral signal used for classification."""
  message = str(exc) or type(exc).__name__

  if isinstance(exc, httpx.HTTPStatusError):
    return FailureSignal(message=exc.response.text or message, status_code=exc.response.status_code)

  if isinstance(exc, httpx.TimeoutException):
    return FailureSignal(message=message, code="ETIMEDOUT")

  if isinstance(exc, httpx.ConnectError):
    code = "ENOTFOUND" if _is_name_resolution_failure(exc) else "ECONNREFUSED"
    return FailureSignal(message=message, code=code)

  if isinstance(exc, (httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError)):
    return FailureSignal(message=message, code="ECONNRESET")

  return FailureSignal(message=message)


class LayoutDispatcher:
  """POSTs `{courseId}` to the layout generation endpoint and waits for it to finish."""

  def __init__(self, settings: Settings, *, client: httpx.AsyncClient | None = None) -> None:
    self.settings = settings
    self._client = client

  @property
  def url(self) -> str:
    return f"{self.settings.deployed_url.rstrip('/')}{GENERATE_PATH}"

  def _build_client(self) -> httpx.AsyncClient:
    # Never trust environment proxy variables for internal dispatch.
    return httpx.AsyncClient(trust_env=False)

  async def dispatch(self, course_id: str) -> None:
    """Dispatch one generation request, raising `DispatchError` on any failure."""
    try:
      if self._client is not None:
        await self._post(self._client, course_id)
        return

      async with self._build_client() as client:
        await self._post(client, course_id)

    except httpx.HTTPStatusError as e:
      logger.error("Layout dispatch returned %s for course %s: %s", e.response.status_code, course_id, e.response.text)
      raise DispatchError(failure_signal_from_exception(e)) from e
    except httpx.HTTPError as e:
      logger.error("Failed to dispatch layout generation for course %s: %s", course_id, e)
      raise DispatchError(failure_signal_from_exception(e)) from e

  async def _post(self, client: httpx.AsyncClient, course_id: str) -> None:
    # The endpoint generates synchronously, so the deadline has to cover a whole generation.
    logger.info("Dispatching layout generation for course %s to %s", course_id, self.url)
    response = await client.post(self.url, json={"courseId": course_id}, timeout=self.settings.dispatch_timeout_seconds)
    response.raise_for_status()
