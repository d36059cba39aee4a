from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Index, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from layout_engine.core.database import Base


class CourseStatus(str, enum.Enum):
  PENDING = "PENDING"
  LAYOUT_PROCESSING = "LAYOUT_PROCESSING"
  LAYOUT_SUCCESS = "LAYOUT_SUCCESS"
  LAYOUT_FAILED = "LAYOUT_FAILED"


class User(Base):
  __tablename__ = "users"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  name: Mapped[str | None] = mapped_column(String, nullable=True)
  email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

  courses: Mapped[list[Course]] = relationship(back_populates="user")


class Course(Base):
  __tablename__ = "courses"
  __table_args__ = (Index("ix_courses_status_created_at", "status", "created_at"),)

  id: Mapped[str] = mapped_column(String, primary_key=True)
  user_id: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
  title: Mapped[str | None] = mapped_column(String, nullable=True)
  description: Mapped[str | None] = mapped_column(Text, nullable=True)
  difficulty: Mapped[str | None] = mapped_column(String, nullable=True)
  status: Mapped[CourseStatus] = mapped_column(SAEnum(CourseStatus, name="course_status"), nullable=False, default=CourseStatus.PENDING, server_default=CourseStatus.PENDING.value)
  layout: Mapped[dict[str, Any] | None] = mapped_column(JSONB(none_as_null=True), nullable=True)
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
  updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

  user: Mapped[User | None] = relationship(back_populates="courses")
