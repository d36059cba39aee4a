from layout_engine.config import Settings
from layout_engine.storage.courses_repo import CoursesRepository
from layout_engine.storage.postgres_courses_repo import PostgresCoursesRepository


def _get_courses_repo(settings: Settings) -> CoursesRepository:
  """Return the active courses repository."""

  # Enforce Postgres-backed storage for courses.

  if not settings.pg_dsn:
    raise ValueError("LAYOUT_PG_DSN must be set to enable Postgres persistence.")

  return PostgresCoursesRepository()
