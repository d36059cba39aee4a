"""Parse and validate raw model output into a `CourseLayout`."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from layout_engine.schema.layout import CourseLayout

_LEVEL_MESSAGES = {
  0: "Parsed JSON is missing required fields",
  1: "Invalid chapter structure in AI response",
  2: "Invalid topic structure in AI response",
}


class LayoutParseError(ValueError):
  """Raised when model output cannot be turned into a valid course layout."""

  def __init__(self, message: str, *, errors: list[str] | None = None) -> None:
    super().__init__(message)
    self.errors = errors or []


def strip_markdown_fence(raw: str) -> str:
  """Remove a leading ```json fence and its closing ``` when present."""
  text = raw.strip()
  if text.startswith("```json"):
    text = text[len("```json") :].strip()
    if text.endswith("```"):
      text = text[:-3].strip()
  return text


def _structure_level(loc: tuple[Any, ...]) -> int:
  # ("courseStructure", i, "topicsCovered", j, ...) points inside a topic.
  if len(loc) >= 4 and loc[0] == "courseStructure" and loc[2] == "topicsCovered":
    return 2
  if len(loc) >= 2 and loc[0] == "courseStructure":
    return 1
  return 0


def parse_course_layout(raw: str) -> CourseLayout:
  """
  Turn raw model text into a validated `CourseLayout`.

  The text must be a single JSON object, optionally wrapped in a ```json fence.
  Anything else is rejected before JSON decoding is attempted.
  """
  text = strip_markdown_fence(raw)

  if not text.startswith("{") or not text.endswith("}"):
    raise LayoutParseError("Invalid JSON format received from the model")

  # JSONDecodeError is a ValueError; oversized integers and deep nesting raise the others.
  try:
    payload = json.loads(text)
  except (ValueError, RecursionError) as exc:
    raise LayoutParseError(f"Model output is not valid JSON: {exc}") from exc

  try:
    return CourseLayout.model_validate(payload)
  except ValidationError as exc:
    errors = []
    level = 2
    for err in exc.errors():
      loc = tuple(err["loc"])
      errors.append(f"{'.'.join(str(x) for x in loc)}: {err['msg']}")
      level = min(level, _structure_level(loc))
    raise LayoutParseError(_LEVEL_MESSAGES[level], errors=errors) from exc
