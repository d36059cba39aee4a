"""Domain records for course layout generation jobs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from layout_engine.schema.courses import CourseStatus


@dataclass(frozen=True)
class CourseRecord:
  """Snapshot of a course row as seen by the poller and the generator."""

  id: str
  status: CourseStatus
  title: str | None
  description: str | None
  difficulty: str | None
  created_at: datetime
  user_id: str | None = None
  layout: dict[str, Any] | None = None


@dataclass(frozen=True)
class SubmitterRecord:
  id: str
  name: str | None
  email: str


@dataclass(frozen=True)
class ProcessingCourseRecord:
  """Row of the operational listing of courses currently in LAYOUT_PROCESSING."""

  id: str
  title: str | None
  description: str | None
  difficulty: str | None
  user: SubmitterRecord | None
