"""Unit tests for guarded course status transitions."""

from __future__ import annotations

import asyncio

import pytest

from layout_engine.jobs.state_machine import TRANSITIONS, CourseEvent, CourseStatusMachine, IllegalTransitionError
from layout_engine.schema.courses import CourseStatus


def test_transition_table_covers_every_event() -> None:
  assert set(TRANSITIONS) == set(CourseEvent)
  assert TRANSITIONS[CourseEvent.CLAIM] == (CourseStatus.PENDING, CourseStatus.LAYOUT_PROCESSING)
  assert TRANSITIONS[CourseEvent.RESET] == (CourseStatus.LAYOUT_FAILED, CourseStatus.PENDING)


@pytest.mark.anyio
async def test_racing_claims_have_exactly_one_winner(courses_repo) -> None:
  """Two workers claiming the same PENDING course: only one gets it."""
  courses_repo.add("c1")
  first, second = CourseStatusMachine(courses_repo), CourseStatusMachine(courses_repo)

  results = await asyncio.gather(first.claim("c1"), second.claim("c1"))

  assert sorted(results) == [False, True]
  assert courses_repo.status_of("c1") is CourseStatus.LAYOUT_PROCESSING


@pytest.mark.anyio
async def test_succeed_writes_layout_and_other_moves_clear_it(courses_repo) -> None:
  courses_repo.add("c1", status=CourseStatus.LAYOUT_PROCESSING)
  machine = CourseStatusMachine(courses_repo)

  await machine.succeed("c1", {"courseTitle": "X"})
  assert courses_repo.status_of("c1") is CourseStatus.LAYOUT_SUCCESS
  assert courses_repo.layout_of("c1") == {"courseTitle": "X"}

  courses_repo.add("c2", status=CourseStatus.LAYOUT_PROCESSING)
  await machine.transition("c2", CourseEvent.FAIL, layout={"ignored": True})
  assert courses_repo.status_of("c2") is CourseStatus.LAYOUT_FAILED
  assert courses_repo.layout_of("c2") is None


@pytest.mark.anyio
async def test_succeed_requires_a_layout(courses_repo) -> None:
  courses_repo.add("c1", status=CourseStatus.LAYOUT_PROCESSING)
  with pytest.raises(ValueError):
    await CourseStatusMachine(courses_repo).succeed("c1", {})
  assert courses_repo.status_of("c1") is CourseStatus.LAYOUT_PROCESSING


@pytest.mark.anyio
async def test_transition_raises_when_guard_does_not_match(courses_repo) -> None:
  courses_repo.add("c1", status=CourseStatus.PENDING)
  machine = CourseStatusMachine(courses_repo)

  with pytest.raises(IllegalTransitionError) as exc_info:
    await machine.fail("c1")

  assert exc_info.value.expected is CourseStatus.LAYOUT_PROCESSING
  assert courses_repo.status_of("c1") is CourseStatus.PENDING


@pytest.mark.anyio
async def test_release_is_best_effort(courses_repo) -> None:
  courses_repo.add("c1", status=CourseStatus.LAYOUT_SUCCESS)
  machine = CourseStatusMachine(courses_repo)

  assert await machine.release("c1") is False
  assert await machine.release("missing") is False
  assert courses_repo.status_of("c1") is CourseStatus.LAYOUT_SUCCESS


@pytest.mark.anyio
async def test_reset_returns_failed_course_to_pending(courses_repo) -> None:
  courses_repo.add("c1", status=CourseStatus.LAYOUT_FAILED)
  await CourseStatusMachine(courses_repo).reset("c1")
  assert courses_repo.status_of("c1") is CourseStatus.PENDING
