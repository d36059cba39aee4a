"""Minimal `.env` support so local runs pick up LAYOUT_* settings without exporting them."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

_QUOTES = ('"', "'")


def default_env_path() -> Path:
  """`LAYOUT_ENV_FILE` when set, else `.env` next to the `layout_engine` package."""
  explicit = os.getenv("LAYOUT_ENV_FILE")
  if explicit:
    return Path(explicit).expanduser()
  return Path(__file__).resolve().parents[2] / ".env"


def _unquote(value: str) -> str:
  if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
    return value[1:-1]
  # Unquoted values may carry a trailing " # comment".
  return value.split(" #", 1)[0].rstrip()


def parse_env_lines(lines: Iterable[str]) -> dict[str, str]:
  """Parse `KEY=value` lines; blanks, comments and malformed lines are skipped."""
  parsed: dict[str, str] = {}
  for raw_line in lines:
    line = raw_line.strip()
    if not line or line.startswith("#"):
      continue

    line = line.removeprefix("export ").lstrip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
      continue

    parsed[key] = _unquote(value.strip())
  return parsed


def load_env_file(path: Path, *, override: bool = False) -> dict[str, str]:
  """Apply a `.env` file to `os.environ`, returning the values that were set."""
  if not path.is_file():
    return {}

  applied: dict[str, str] = {}
  for key, value in parse_env_lines(path.read_text(encoding="utf-8").splitlines()).items():
    if not override and key in os.environ:
      continue
    os.environ[key] = value
    applied[key] = value
  return applied
