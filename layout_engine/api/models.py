from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class GenerateCourseLayoutRequest(BaseModel):
  """Request body for layout generation; a missing courseId is reported as 400 by the service."""

  courseId: StrictStr | None = Field(default=None, description="Identifier of the course to generate a layout for.", examples=["c1"])
  model_config = ConfigDict(extra="ignore")


class GenerateCourseLayoutResponse(BaseModel):
  success: bool = True


class ErrorResponse(BaseModel):
  """Error envelope shared by every failing response."""

  success: bool = False
  error: str
  requestId: str | None = None


class SubmitterResponse(BaseModel):
  id: str
  name: str | None
  email: str


class ProcessingCourseResponse(BaseModel):
  """A course currently held in LAYOUT_PROCESSING."""

  id: str
  title: str | None
  description: str | None
  difficulty: str | None
  user: SubmitterResponse | None
