from __future__ import annotations

from pathlib import Path

import pytest

from layout_engine.utils.env import default_env_path, load_env_file, parse_env_lines


def test_parse_env_lines_handles_quotes_comments_and_export() -> None:
  lines = [
    "# comment",
    "",
    "export LAYOUT_ENV=staging",
    'GEMINI_API_KEY="abc#123"',
    "LAYOUT_DEPLOYED_URL=http://localhost:3000 # local",
    "not-a-pair",
    "=missing-key",
  ]
  assert parse_env_lines(lines) == {"LAYOUT_ENV": "staging", "GEMINI_API_KEY": "abc#123", "LAYOUT_DEPLOYED_URL": "http://localhost:3000"}


def test_load_env_file_keeps_existing_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
  env_file = tmp_path / ".env"
  env_file.write_text("LAYOUT_MAX_CHAPTERS=12\nLAYOUT_GEMINI_MODEL=gemini-2.5-flash\n", encoding="utf-8")
  monkeypatch.setenv("LAYOUT_MAX_CHAPTERS", "30")
  # Register the variable with monkeypatch so the value written by the loader is undone.
  monkeypatch.setenv("LAYOUT_GEMINI_MODEL", "placeholder")
  monkeypatch.delenv("LAYOUT_GEMINI_MODEL")

  applied = load_env_file(env_file)

  assert applied == {"LAYOUT_GEMINI_MODEL": "gemini-2.5-flash"}
  assert load_env_file(tmp_path / "missing.env") == {}


def test_default_env_path_honours_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("LAYOUT_ENV_FILE", str(tmp_path / "custom.env"))
  assert default_env_path() == tmp_path / "custom.env"
