"""Typed course layout models with strict validation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class LayoutBaseModel(BaseModel):
  """Base model keeping unknown keys so the stored layout mirrors the generated payload."""

  model_config = ConfigDict(extra="allow")


class Topic(LayoutBaseModel):
  """A topic inside a chapter."""

  topicTitle: StrictStr = Field(min_length=1)
  topicDescription: StrictStr = Field(min_length=1)
  subtopics: list[StrictStr]


class Chapter(LayoutBaseModel):
  """A chapter of the course outline."""

  chapterTitle: StrictStr = Field(min_length=1)
  chapterDescription: StrictStr = Field(min_length=1)
  topicsCovered: list[Topic]


class CourseLayout(LayoutBaseModel):
  """Structured course outline produced by the generation step."""

  courseTitle: StrictStr = Field(min_length=1)
  courseDescription: StrictStr = Field(min_length=1)
  difficultyLevel: StrictStr = Field(min_length=1)
  courseStructure: list[Chapter]
