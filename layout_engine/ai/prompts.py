"""Prompt construction for course layout generation."""

from __future__ import annotations

LAYOUT_JSON_STRUCTURE = """{
  "courseTitle": "...",
  "courseDescription": "...",
  "difficultyLevel": "...",
  "courseStructure": [
    {
      "chapterTitle": "...",
      "chapterDescription": "...",
      "topicsCovered": [
        {
          "topicTitle": "...",
          "topicDescription": "...",
          "subtopics": ["...", "..."]
        }
      ]
    }
  ]
}"""

VALIDATION_CRITERIA = """- courseTitle, courseDescription and difficultyLevel are non-empty strings and courseStructure is an array.
- Every chapter has a non-empty chapterTitle and chapterDescription, and topicsCovered is an array.
- Every topic has a non-empty topicTitle and topicDescription, and subtopics is an array of strings."""


def _or_na(value: str | None) -> str:
  if value is None or not value.strip():
    return "N/A"
  return value


def build_course_layout_prompt(title: str, description: str | None, difficulty: str | None, *, max_chapters: int = 25) -> str:
  """Render the generation prompt for a single course."""
  return f"""Generate a structured course outline based on the following details:
Course Title: {title}
Course Description: {_or_na(description)}
Difficulty Level: {_or_na(difficulty)}

The structure should include:
- Chapters (up to {max_chapters}), each with:
  - Chapter Title
  - Chapter Description
  - Topics Covered:
    - Topic Title
    - Topic Description
    - Subtopics (detailed breakdown)

Format the response strictly as JSON with this structure:

{LAYOUT_JSON_STRUCTURE}

Strictly return only JSON data.

The course outline will be validated using the following criteria:
{VALIDATION_CRITERIA}
"""
