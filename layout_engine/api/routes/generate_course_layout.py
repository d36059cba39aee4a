from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from layout_engine.ai.providers.base import AIModel
from layout_engine.api.deps import get_ai_model, get_courses_repo
from layout_engine.api.models import ErrorResponse, GenerateCourseLayoutRequest, GenerateCourseLayoutResponse, ProcessingCourseResponse, SubmitterResponse
from layout_engine.config import Settings, get_settings
from layout_engine.services.layout import generate_course_layout, list_processing_courses
from layout_engine.storage.courses_repo import CoursesRepository

router = APIRouter()
logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
  status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
  status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
  status.HTTP_409_CONFLICT: {"model": ErrorResponse},
  status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


@router.get("", response_model=list[ProcessingCourseResponse])
async def list_processing_courses_endpoint(repo: CoursesRepository = Depends(get_courses_repo)) -> list[ProcessingCourseResponse] | JSONResponse:  # noqa: B008
  """List courses currently in LAYOUT_PROCESSING with their submitter."""
  try:
    courses = await list_processing_courses(repo)
  except Exception as exc:  # noqa: BLE001
    logger.error("Error fetching courses: %s", exc, exc_info=True)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "Internal Server Error"})

  return [
    ProcessingCourseResponse(
      id=course.id,
      title=course.title,
      description=course.description,
      difficulty=course.difficulty,
      user=SubmitterResponse(id=course.user.id, name=course.user.name, email=course.user.email) if course.user else None,
    )
    for course in courses
  ]


@router.post("", response_model=GenerateCourseLayoutResponse, responses=_ERROR_RESPONSES)
async def generate_course_layout_endpoint(
  payload: GenerateCourseLayoutRequest | None = Body(default=None),  # noqa: B008
  settings: Settings = Depends(get_settings),  # noqa: B008
  repo: CoursesRepository = Depends(get_courses_repo),  # noqa: B008
  model: AIModel | None = Depends(get_ai_model),  # noqa: B008
) -> GenerateCourseLayoutResponse:
  """Generate, validate and persist the layout for one course."""
  course_id = payload.courseId if payload else None
  outcome = await generate_course_layout(course_id, repo=repo, model=model, settings=settings)
  logger.info("Course layout request for courseId %s finished: %s", course_id, outcome.value)
  return GenerateCourseLayoutResponse(success=True)
