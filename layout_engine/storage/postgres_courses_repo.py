"""Postgres-backed repository for course layout jobs using SQLAlchemy."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from layout_engine.core.database import get_session_factory
from layout_engine.jobs.models import CourseRecord, ProcessingCourseRecord, SubmitterRecord
from layout_engine.schema.courses import Course, CourseStatus
from layout_engine.storage.courses_repo import CoursesRepository


class PostgresCoursesRepository(CoursesRepository):
  """Persist course status transitions and layouts to Postgres using SQLAlchemy."""

  def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
    self._session_factory = session_factory or get_session_factory()
    if self._session_factory is None:
      raise RuntimeError("Database not initialized")

  async def get_course(self, course_id: str) -> CourseRecord | None:
    async with self._session_factory() as session:
      row = await session.get(Course, course_id)
      if row is None:
        return None
      return self._model_to_record(row)

  async def find_oldest_pending(self) -> CourseRecord | None:
    async with self._session_factory() as session:
      stmt = select(Course).where(Course.status == CourseStatus.PENDING).order_by(Course.created_at.asc()).limit(1)
      row = (await session.execute(stmt)).scalar_one_or_none()
      if row is None:
        return None
      return self._model_to_record(row)

  async def compare_and_set_status(self, course_id: str, *, expected: CourseStatus, target: CourseStatus, layout: dict[str, Any] | None = None) -> bool:
    async with self._session_factory() as session:
      # The status predicate is what makes the write a compare-and-set; rowcount tells us who won.
      stmt = update(Course).where(Course.id == course_id, Course.status == expected).values(status=target, layout=layout, updated_at=func.now()).execution_options(synchronize_session=False)
      result = await session.execute(stmt)
      await session.commit()
      return int(result.rowcount or 0) == 1

  async def list_processing(self) -> list[ProcessingCourseRecord]:
    async with self._session_factory() as session:
      stmt = select(Course).options(selectinload(Course.user)).where(Course.status == CourseStatus.LAYOUT_PROCESSING).order_by(Course.created_at.asc())
      rows = (await session.execute(stmt)).scalars().all()
      return [self._model_to_processing_record(row) for row in rows]

  def _model_to_record(self, row: Course) -> CourseRecord:
    return CourseRecord(
      id=row.id,
      status=CourseStatus(row.status),
      title=row.title,
      description=row.description,
      difficulty=row.difficulty,
      created_at=row.created_at,
      user_id=row.user_id,
      layout=row.layout,
    )

  def _model_to_processing_record(self, row: Course) -> ProcessingCourseRecord:
    user = None
    if row.user is not None:
      user = SubmitterRecord(id=row.user.id, name=row.user.name, email=row.user.email)
    return ProcessingCourseRecord(id=row.id, title=row.title, description=row.description, difficulty=row.difficulty, user=user)
