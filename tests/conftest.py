"""Shared fixtures for the course layout engine tests."""

from __future__ import annotations

import os

# Ensure required settings are available before importing the app.
os.environ.setdefault("LAYOUT_ALLOWED_ORIGINS", "http://localhost")
os.environ["LAYOUT_POLLER_ENABLED"] = "0"

from dataclasses import replace  # noqa: E402
from datetime import UTC, datetime, timedelta  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402

from layout_engine.ai.providers.base import AIModel, SimpleModelResponse  # noqa: E402
from layout_engine.config import get_settings  # noqa: E402
from layout_engine.jobs.models import CourseRecord, ProcessingCourseRecord, SubmitterRecord  # noqa: E402
from layout_engine.schema.courses import CourseStatus  # noqa: E402

VALID_LAYOUT_TEXT = """{
  "courseTitle": "Intro to X",
  "courseDescription": "A first look at X.",
  "difficultyLevel": "Beginner",
  "courseStructure": [
    {
      "chapterTitle": "Basics",
      "chapterDescription": "Core ideas.",
      "topicsCovered": [
        {"topicTitle": "What is X", "topicDescription": "Definitions.", "subtopics": ["History", "Terminology"]}
      ]
    }
  ]
}"""


class InMemoryCoursesRepo:
  """In-memory courses repository with compare-and-set semantics."""

  def __init__(self) -> None:
    self._courses: dict[str, CourseRecord] = {}
    self._users: dict[str, SubmitterRecord] = {}
    self.cas_calls: list[tuple[str, CourseStatus, CourseStatus]] = []
    self._clock = datetime(2024, 1, 1, tzinfo=UTC)

  def add(self, course_id: str, *, title: str | None = "Intro to X", status: CourseStatus = CourseStatus.PENDING, description: str | None = None, difficulty: str | None = None, user: SubmitterRecord | None = None) -> CourseRecord:
    # Strictly increasing creation times keep "oldest first" deterministic.
    self._clock += timedelta(seconds=1)
    if user is not None:
      self._users[user.id] = user
    record = CourseRecord(id=course_id, status=status, title=title, description=description, difficulty=difficulty, created_at=self._clock, user_id=user.id if user else None)
    self._courses[course_id] = record
    return record

  def status_of(self, course_id: str) -> CourseStatus:
    return self._courses[course_id].status

  def layout_of(self, course_id: str) -> dict[str, Any] | None:
    return self._courses[course_id].layout

  async def get_course(self, course_id: str) -> CourseRecord | None:
    return self._courses.get(course_id)

  async def find_oldest_pending(self) -> CourseRecord | None:
    pending = [course for course in self._courses.values() if course.status is CourseStatus.PENDING]
    if not pending:
      return None
    return min(pending, key=lambda course: course.created_at)

  async def compare_and_set_status(self, course_id: str, *, expected: CourseStatus, target: CourseStatus, layout: dict[str, Any] | None = None) -> bool:
    self.cas_calls.append((course_id, expected, target))
    record = self._courses.get(course_id)
    if record is None or record.status is not expected:
      return False
    self._courses[course_id] = replace(record, status=target, layout=layout)
    return True

  async def list_processing(self) -> list[ProcessingCourseRecord]:
    processing = sorted((course for course in self._courses.values() if course.status is CourseStatus.LAYOUT_PROCESSING), key=lambda course: course.created_at)
    return [
      ProcessingCourseRecord(id=course.id, title=course.title, description=course.description, difficulty=course.difficulty, user=self._users.get(course.user_id) if course.user_id else None)
      for course in processing
    ]


class FakeModel(AIModel):
  """Model double returning canned text or raising a configured error."""

  def __init__(self, content: str = VALID_LAYOUT_TEXT, *, error: Exception | None = None) -> None:
    self.name = "fake-model"
    self._content = content
    self._error = error
    self.prompts: list[str] = []

  async def generate(self, prompt: str) -> SimpleModelResponse:
    self.prompts.append(prompt)
    if self._error is not None:
      raise self._error
    return SimpleModelResponse(content=self._content)


@pytest.fixture
def anyio_backend() -> str:
  return "asyncio"


@pytest.fixture
def courses_repo() -> InMemoryCoursesRepo:
  return InMemoryCoursesRepo()


@pytest.fixture
def settings():
  # Bypass the cache so each test sees the current environment.
  return get_settings.__wrapped__()


@pytest.fixture
def valid_layout_text() -> str:
  return VALID_LAYOUT_TEXT


@pytest.fixture
def make_model():
  """Build a `FakeModel`; tests pass the canned content or error they need."""
  return FakeModel
