"""Periodic sweep that claims PENDING courses and drives layout generation."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from layout_engine.config import Settings
from layout_engine.jobs.dispatcher import DispatchError, LayoutDispatcher
from layout_engine.jobs.retry import backoff_delay_ms, classify_dispatch_failure
from layout_engine.jobs.state_machine import CourseStatusMachine
from layout_engine.schema.courses import CourseStatus
from layout_engine.storage.courses_repo import CoursesRepository

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class SweepOutcome(str, enum.Enum):
  IDLE = "idle"
  CLAIM_LOST = "claim_lost"
  DISPATCHED = "dispatched"
  RELEASED = "released"
  FAILED = "failed"
  ABANDONED = "abandoned"
  REVERTED = "reverted"
  ERRORED = "errored"


class LayoutPoller:
  """Claim the oldest PENDING course and dispatch it to the generation endpoint with retries."""

  def __init__(self, repo: CoursesRepository, dispatcher: LayoutDispatcher, *, max_attempts: int = 5, backoff_ms: int = 2000, sleep: SleepFn = asyncio.sleep) -> None:
    self._repo = repo
    self._machine = CourseStatusMachine(repo)
    self._dispatcher = dispatcher
    self._max_attempts = max_attempts
    self._backoff_ms = backoff_ms
    self._sleep = sleep

  @classmethod
  def from_settings(cls, repo: CoursesRepository, settings: Settings) -> LayoutPoller:
    return cls(repo, LayoutDispatcher(settings), max_attempts=settings.dispatch_max_attempts, backoff_ms=settings.dispatch_backoff_ms)

  async def sweep(self) -> SweepOutcome:
    """Run one poll cycle."""
    claimed_id: str | None = None

    try:
      course = await self._repo.find_oldest_pending()
      if course is None:
        logger.info("No PENDING course layout tasks.")
        return SweepOutcome.IDLE

      logger.info("Found course layout task for course %s.", course.id)

      if not await self._machine.claim(course.id):
        logger.info("Course layout task for course %s is already picked by another instance.", course.id)
        return SweepOutcome.CLAIM_LOST

      claimed_id = course.id
      logger.info("Started course layout generation for course %s.", course.id)
      return await self._dispatch_with_retry(course.id)

    except Exception as exc:  # noqa: BLE001
      logger.error("Unexpected error in course layout sweep: %s", exc, exc_info=True)
      if claimed_id is None:
        return SweepOutcome.ERRORED

      await self._revert(claimed_id)
      return SweepOutcome.REVERTED

  async def _dispatch_with_retry(self, course_id: str) -> SweepOutcome:
    attempt = 0

    while attempt < self._max_attempts:
      # The endpoint releases the course on its own failures, so take it back before trying again.
      if attempt > 0 and not await self._reassert_claim(course_id):
        logger.info("Stopped retrying course %s: claim is no longer held.", course_id)
        return SweepOutcome.ABANDONED

      attempt += 1
      try:
        await self._dispatcher.dispatch(course_id)

      except DispatchError as exc:
        classification = classify_dispatch_failure(exc.signal)
        logger.error("Attempt %s failed for course %s: %s", attempt, course_id, classification.reason)

        if not classification.retryable:
          logger.error("Network error (%s) for course %s. Retrying will not help; releasing to PENDING.", classification.code, course_id)
          await self._machine.release(course_id)
          return SweepOutcome.RELEASED

        if attempt < self._max_attempts:
          delay_ms = backoff_delay_ms(attempt, self._backoff_ms)
          logger.info("Retrying course %s in %s seconds.", course_id, delay_ms / 1000)
          await self._sleep(delay_ms / 1000)
        continue

      logger.info("Course layout processed successfully for course %s.", course_id)
      return SweepOutcome.DISPATCHED

    if not await self._reassert_claim(course_id):
      logger.info("Course %s changed state after %s attempts; leaving it as is.", course_id, self._max_attempts)
      return SweepOutcome.ABANDONED

    await self._machine.fail(course_id)
    logger.error("Course layout %s marked as LAYOUT_FAILED after %s attempts.", course_id, self._max_attempts)
    return SweepOutcome.FAILED

  async def _reassert_claim(self, course_id: str) -> bool:
    course = await self._repo.get_course(course_id)
    if course is None:
      return False

    if course.status is CourseStatus.LAYOUT_PROCESSING:
      return True

    if course.status is CourseStatus.PENDING:
      return await self._machine.claim(course_id)

    return False

  async def _revert(self, course_id: str) -> None:
    try:
      if await self._machine.release(course_id):
        logger.info("Reset course %s to PENDING due to an unexpected error.", course_id)

    except Exception as exc:  # noqa: BLE001
      logger.error("Failed to reset course %s to PENDING: %s", course_id, exc, exc_info=True)


def _log_tick_failure(task: asyncio.Task[Any]) -> None:
  """Log unexpected failures from sweep tasks."""
  if task.cancelled():
    return

  exc = task.exception()
  if exc is not None:
    logger.error("Course layout sweep task failed: %s", exc, exc_info=exc)


class LayoutPollScheduler:
  """Fire `LayoutPoller.sweep` on a fixed cadence, skipping ticks while a sweep is still running."""

  def __init__(self, poller: LayoutPoller, *, interval_seconds: float = 60.0) -> None:
    self._poller = poller
    self._interval_seconds = interval_seconds
    self._lock = asyncio.Lock()
    self._loop_task: asyncio.Task[None] | None = None
    self._tick_tasks: set[asyncio.Task[bool]] = set()

  @property
  def running(self) -> bool:
    return self._loop_task is not None and not self._loop_task.done()

  async def tick(self) -> bool:
    """Run one sweep unless another is in flight. Returns False when the tick was skipped."""
    if self._lock.locked():
      logger.debug("Skipping course layout sweep: previous sweep still running.")
      return False

    async with self._lock:
      await self._poller.sweep()
    return True

  def start(self) -> None:
    # Avoid spawning multiple loops if lifespan runs more than once.
    if self.running:
      return

    loop = asyncio.get_running_loop()
    self._loop_task = loop.create_task(self._run())
    self._loop_task.add_done_callback(_log_tick_failure)
    logger.info("Course layout poller started (interval %ss).", self._interval_seconds)

  async def stop(self) -> None:
    if self._loop_task is None:
      return

    # Cancel the clock and any in-flight sweep to stop promptly on shutdown.
    pending = [self._loop_task, *self._tick_tasks]
    for task in pending:
      task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    self._loop_task = None
    self._tick_tasks.clear()
    logger.info("Course layout poller stopped.")

  async def _run(self) -> None:
    while True:
      await asyncio.sleep(self._interval_seconds)

      # Each tick is its own task so a slow sweep does not delay the clock.
      task = asyncio.create_task(self.tick())
      self._tick_tasks.add(task)
      task.add_done_callback(self._tick_tasks.discard)
      task.add_done_callback(_log_tick_failure)
