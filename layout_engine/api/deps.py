"""Shared FastAPI dependencies for storage and model access."""

from __future__ import annotations

import logging

from fastapi import Depends

from layout_engine.ai.providers.base import AIModel
from layout_engine.ai.providers.gemini import get_layout_model
from layout_engine.config import Settings, get_settings
from layout_engine.storage.courses_repo import CoursesRepository
from layout_engine.storage.factory import _get_courses_repo

logger = logging.getLogger(__name__)


def get_courses_repo(settings: Settings = Depends(get_settings)) -> CoursesRepository:  # noqa: B008
  """Dependency to get the courses repository."""
  return _get_courses_repo(settings)


def get_ai_model(settings: Settings = Depends(get_settings)) -> AIModel | None:  # noqa: B008
  """Resolve the layout model, or None when no API key is configured."""
  if not settings.gemini_api_key:
    logger.warning("GEMINI_API_KEY is not set; layout generation is unavailable.")
    return None
  return get_layout_model(settings.gemini_api_key, settings.gemini_model)
