"""Schema package exports."""

from .courses import Course, CourseStatus, User
from .layout import Chapter, CourseLayout, Topic

__all__ = ["Chapter", "Course", "CourseLayout", "CourseStatus", "Topic", "User"]
