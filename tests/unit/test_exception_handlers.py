"""Unit tests for API exception sanitization behavior."""

from __future__ import annotations

from layout_engine.core.exceptions import _error_payload, _sanitize_validation_errors


def test_sanitize_validation_errors_removes_input_and_serializes_exception_ctx() -> None:
  """Ensure validation errors stay JSON-serializable and redact raw request payloads."""
  errors = [{"type": "string_type", "loc": ("body", "courseId"), "msg": "Input should be a valid string", "input": 42, "ctx": {"error": ValueError("not a string"), "input": 42}}]
  sanitized = _sanitize_validation_errors(errors)
  assert "input" not in sanitized[0]
  assert sanitized[0]["loc"] == ["body", "courseId"]
  assert sanitized[0]["ctx"]["error"] == "ValueError: not a string"
  assert "input" not in sanitized[0]["ctx"]


def test_error_payload_uses_success_envelope() -> None:
  assert _error_payload("Course not found") == {"success": False, "error": "Course not found"}
  assert _error_payload("Internal Server Error", request_id="r1") == {"success": False, "error": "Internal Server Error", "requestId": "r1"}
