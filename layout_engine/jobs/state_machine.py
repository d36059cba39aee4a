"""Guarded status transitions for course layout jobs.

The course `status` column doubles as the workflow state. Every transition is a
single compare-and-set write against the repository, so the table below is the
only place that decides which moves are legal:

  claim    PENDING            -> LAYOUT_PROCESSING
  succeed  LAYOUT_PROCESSING  -> LAYOUT_SUCCESS (layout written in the same update)
  fail     LAYOUT_PROCESSING  -> LAYOUT_FAILED
  release  LAYOUT_PROCESSING  -> PENDING
  reset    LAYOUT_FAILED      -> PENDING

`layout` is written only by `succeed` and cleared by every other move, which keeps
"layout is set iff status is LAYOUT_SUCCESS" true at the row level.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Final

from layout_engine.schema.courses import CourseStatus
from layout_engine.storage.courses_repo import CoursesRepository

logger = logging.getLogger(__name__)


class CourseEvent(str, enum.Enum):
  CLAIM = "claim"
  SUCCEED = "succeed"
  FAIL = "fail"
  RELEASE = "release"
  RESET = "reset"


TRANSITIONS: Final[dict[CourseEvent, tuple[CourseStatus, CourseStatus]]] = {
  CourseEvent.CLAIM: (CourseStatus.PENDING, CourseStatus.LAYOUT_PROCESSING),
  CourseEvent.SUCCEED: (CourseStatus.LAYOUT_PROCESSING, CourseStatus.LAYOUT_SUCCESS),
  CourseEvent.FAIL: (CourseStatus.LAYOUT_PROCESSING, CourseStatus.LAYOUT_FAILED),
  CourseEvent.RELEASE: (CourseStatus.LAYOUT_PROCESSING, CourseStatus.PENDING),
  CourseEvent.RESET: (CourseStatus.LAYOUT_FAILED, CourseStatus.PENDING),
}


class IllegalTransitionError(RuntimeError):
  """Raised when a guarded transition does not apply to the course's current status."""

  def __init__(self, course_id: str, event: CourseEvent, expected: CourseStatus) -> None:
    self.course_id = course_id
    self.event = event
    self.expected = expected
    super().__init__(f"Cannot {event.value} course {course_id}: status is no longer {expected.value}")


class CourseStatusMachine:
  """Apply guarded status transitions through a repository's compare-and-set primitive."""

  def __init__(self, repo: CoursesRepository) -> None:
    self._repo = repo

  async def claim(self, course_id: str) -> bool:
    """Try to take exclusive ownership of a PENDING course.

    Losing the race is an expected outcome, so this returns False instead of raising.
    """
    return await self._apply(course_id, CourseEvent.CLAIM)

  async def succeed(self, course_id: str, layout: dict[str, Any]) -> None:
    if not layout:
      raise ValueError("A successful transition requires a non-empty layout.")
    await self.transition(course_id, CourseEvent.SUCCEED, layout=layout)

  async def fail(self, course_id: str) -> None:
    await self.transition(course_id, CourseEvent.FAIL)

  async def release(self, course_id: str) -> bool:
    """Best-effort revert of a claimed course back to PENDING."""
    return await self.try_transition(course_id, CourseEvent.RELEASE)

  async def reset(self, course_id: str) -> None:
    await self.transition(course_id, CourseEvent.RESET)

  async def transition(self, course_id: str, event: CourseEvent, *, layout: dict[str, Any] | None = None) -> None:
    """Apply a transition or raise `IllegalTransitionError` when the guard does not match."""
    if not await self._apply(course_id, event, layout=layout):
      raise IllegalTransitionError(course_id, event, TRANSITIONS[event][0])

  async def try_transition(self, course_id: str, event: CourseEvent, *, layout: dict[str, Any] | None = None) -> bool:
    applied = await self._apply(course_id, event, layout=layout)
    if not applied:
      logger.info("Skipped %s for course %s: status is no longer %s", event.value, course_id, TRANSITIONS[event][0].value)
    return applied

  async def _apply(self, course_id: str, event: CourseEvent, *, layout: dict[str, Any] | None = None) -> bool:
    expected, target = TRANSITIONS[event]
    if target is not CourseStatus.LAYOUT_SUCCESS:
      layout = None
    applied = await self._repo.compare_and_set_status(course_id, expected=expected, target=target, layout=layout)
    if applied:
      logger.debug("Course %s: %s -> %s (%s)", course_id, expected.value, target.value, event.value)
    return applied
