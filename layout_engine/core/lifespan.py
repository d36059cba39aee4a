import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from layout_engine.config import Settings
from layout_engine.core.database import dispose_engine
from layout_engine.core.logging import _initialize_logging
from layout_engine.jobs.poller import LayoutPoller, LayoutPollScheduler
from layout_engine.storage.factory import _get_courses_repo

# Track the poll scheduler for lifecycle management.
_SCHEDULER: LayoutPollScheduler | None = None


def _start_poller(active_settings: Settings) -> None:
  """Start the periodic sweep of PENDING courses."""
  global _SCHEDULER
  logger = logging.getLogger("layout_engine.core.lifespan")

  if _SCHEDULER is not None and _SCHEDULER.running:
    return

  if not active_settings.poller_enabled:
    logger.info("Course layout poller disabled (LAYOUT_POLLER_ENABLED=0).")
    return

  if not active_settings.pg_dsn:
    logger.warning("Course layout poller not started: LAYOUT_PG_DSN is not set.")
    return

  poller = LayoutPoller.from_settings(_get_courses_repo(active_settings), active_settings)
  _SCHEDULER = LayoutPollScheduler(poller, interval_seconds=active_settings.poll_interval_seconds)
  _SCHEDULER.start()


async def _stop_poller() -> None:
  global _SCHEDULER
  if _SCHEDULER is None:
    return

  await _SCHEDULER.stop()
  _SCHEDULER = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Set up logging and the background poller for the lifetime of the app."""
  from layout_engine.config import get_settings

  settings = get_settings()
  logger = logging.getLogger("layout_engine.core.lifespan")

  try:
    _initialize_logging(settings)
    logger.info("Startup complete - logging verified.")

  except Exception:
    logger.warning("Initial logging setup failed; continuing with default handlers.", exc_info=True)

  _start_poller(settings)

  yield

  await _stop_poller()
  await dispose_engine()
