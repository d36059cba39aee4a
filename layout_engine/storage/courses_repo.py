"""Storage interfaces for course layout jobs."""

from __future__ import annotations

from typing import Any, Protocol

from layout_engine.jobs.models import CourseRecord, ProcessingCourseRecord
from layout_engine.schema.courses import CourseStatus


class CoursesRepository(Protocol):
  """Repository contract for course persistence."""

  async def get_course(self, course_id: str) -> CourseRecord | None:
    """Fetch a course by identifier."""

  async def find_oldest_pending(self) -> CourseRecord | None:
    """Return the oldest PENDING course by creation time."""

  async def compare_and_set_status(self, course_id: str, *, expected: CourseStatus, target: CourseStatus, layout: dict[str, Any] | None = None) -> bool:
    """Atomically move a course from `expected` to `target`, writing `layout` in the same statement.

    Returns False when no row matched, i.e. the course is missing or its status changed underneath.
    """

  async def list_processing(self) -> list[ProcessingCourseRecord]:
    """List LAYOUT_PROCESSING courses oldest first, with their submitter."""
