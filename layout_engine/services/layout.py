"""Course layout generation: prompt, model call, validation and persistence."""

from __future__ import annotations

import enum
import logging

from layout_engine.ai.layout_parser import LayoutParseError, parse_course_layout
from layout_engine.ai.prompts import build_course_layout_prompt
from layout_engine.ai.providers.base import AIModel
from layout_engine.config import Settings
from layout_engine.jobs.models import CourseRecord, ProcessingCourseRecord
from layout_engine.jobs.state_machine import CourseStatusMachine, IllegalTransitionError
from layout_engine.schema.courses import CourseStatus
from layout_engine.storage.courses_repo import CoursesRepository

logger = logging.getLogger(__name__)


class LayoutGenerationError(Exception):
  """A failure that maps onto a client-visible status code and message."""

  status_code = 500
  message = "Internal Server Error"

  def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
    if message is not None:
      self.message = message
    if status_code is not None:
      self.status_code = status_code
    super().__init__(self.message)


class CourseIdMissingError(LayoutGenerationError):
  status_code = 400
  message = "courseId is required"


class CourseNotFoundError(LayoutGenerationError):
  status_code = 404
  message = "Course not found"


class CourseTitleMissingError(LayoutGenerationError):
  status_code = 404
  message = "Course title is missing"


class CourseConflictError(LayoutGenerationError):
  status_code = 409
  message = "Course is not available for layout generation"


class ModelResponseError(LayoutGenerationError):
  """The model was unavailable or returned nothing usable."""


class LayoutParsingError(LayoutGenerationError):
  message = "AI response parsing failed. Please try again."


class LayoutStoreError(LayoutGenerationError):
  message = "Database Error"


class GenerationOutcome(str, enum.Enum):
  GENERATED = "generated"
  ALREADY_GENERATED = "already_generated"


async def _release(machine: CourseStatusMachine, course_id: str) -> None:
  """Hand the course back to the poller; a failing revert is logged, not raised."""
  try:
    if await machine.release(course_id):
      logger.info("Reset course %s to PENDING.", course_id)

  except Exception as exc:  # noqa: BLE001
    logger.error("Failed to reset course %s to PENDING: %s", course_id, exc, exc_info=True)


async def _load_course(repo: CoursesRepository, course_id: str) -> CourseRecord:
  course = await repo.get_course(course_id)
  if course is None:
    logger.warning("Course not found with courseId %s.", course_id)
    raise CourseNotFoundError()

  if not course.title:
    logger.warning("Course title of courseId %s is missing.", course_id)
    raise CourseTitleMissingError()

  return course


async def _take_ownership(machine: CourseStatusMachine, course: CourseRecord) -> None:
  """Leave the course held in LAYOUT_PROCESSING by this call or raise a conflict."""
  if course.status is CourseStatus.LAYOUT_PROCESSING:
    return

  if course.status is CourseStatus.LAYOUT_FAILED:
    try:
      await machine.reset(course.id)
    except IllegalTransitionError as exc:
      logger.info("Course %s changed status before it could be retried.", course.id)
      raise CourseConflictError() from exc
    logger.info("Reset failed course %s to PENDING for another attempt.", course.id)

  if await machine.claim(course.id):
    return

  logger.info("Course %s was claimed by another worker.", course.id)
  raise CourseConflictError()


async def generate_course_layout(course_id: str | None, *, repo: CoursesRepository, model: AIModel | None, settings: Settings) -> GenerationOutcome:
  """
  Generate, validate and persist the layout for one course.

  Raises `LayoutGenerationError` subclasses for every client-visible failure. Once the
  course is held in LAYOUT_PROCESSING, every failure releases it back to PENDING.
  """
  if not course_id:
    logger.error("courseId is missing in the request.")
    raise CourseIdMissingError()

  logger.info("Received request to generate course layout for courseId %s.", course_id)

  course = await _load_course(repo, course_id)

  if course.status is CourseStatus.LAYOUT_SUCCESS:
    logger.info("Course %s already has a layout; skipping generation.", course_id)
    return GenerationOutcome.ALREADY_GENERATED

  if model is None:
    logger.error("No AI model configured; set GEMINI_API_KEY to generate layouts.")
    raise ModelResponseError()

  machine = CourseStatusMachine(repo)
  await _take_ownership(machine, course)

  try:
    logger.info("Generating layout for course %r (courseId %s).", course.title, course_id)
    prompt = build_course_layout_prompt(course.title, course.description, course.difficulty, max_chapters=settings.max_chapters)
    response = await model.generate(prompt)

    if not response.content or not response.content.strip():
      logger.error("AI response is missing from %s for courseId %s.", model.name, course_id)
      raise ModelResponseError()

    logger.info("AI response received from %s for courseId %s.", model.name, course_id)

    try:
      layout = parse_course_layout(response.content)
    except LayoutParseError as exc:
      logger.error("Failed to parse AI response for courseId %s: %s %s", course_id, exc, exc.errors)
      raise LayoutParsingError() from exc

    logger.info("Valid course layout generated for courseId %s.", course_id)

    try:
      await machine.succeed(course_id, layout.model_dump(mode="json"))
    except Exception as exc:  # noqa: BLE001
      logger.error("Failed to save course layout for courseId %s: %s", course_id, exc, exc_info=True)
      raise LayoutStoreError() from exc

  except LayoutGenerationError:
    await _release(machine, course_id)
    raise

  except Exception:
    logger.error("Failed to generate course layout for courseId %s.", course_id, exc_info=True)
    await _release(machine, course_id)
    raise

  logger.info("Course layout saved to the database for courseId %s.", course_id)
  return GenerationOutcome.GENERATED


async def list_processing_courses(repo: CoursesRepository) -> list[ProcessingCourseRecord]:
  """Return every course currently held in LAYOUT_PROCESSING, oldest first."""
  return await repo.list_processing()
