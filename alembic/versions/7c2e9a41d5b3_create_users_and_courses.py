"""Create users and courses

Revision ID: 7c2e9a41d5b3
Revises:
Create Date: 2026-10-19 10:12:41.318204

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "7c2e9a41d5b3"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

course_status = postgresql.ENUM("PENDING", "LAYOUT_PROCESSING", "LAYOUT_SUCCESS", "LAYOUT_FAILED", name="course_status", create_type=False)


def upgrade() -> None:
  """Upgrade schema."""
  course_status.create(op.get_bind(), checkfirst=True)

  op.create_table(
    "users",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("name", sa.String(), nullable=True),
    sa.Column("email", sa.String(), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

  op.create_table(
    "courses",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("user_id", sa.String(), nullable=True),
    sa.Column("title", sa.String(), nullable=True),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("difficulty", sa.String(), nullable=True),
    sa.Column("status", course_status, server_default="PENDING", nullable=False),
    sa.Column("layout", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_courses_user_id"), "courses", ["user_id"], unique=False)
  op.create_index("ix_courses_status_created_at", "courses", ["status", "created_at"], unique=False)


def downgrade() -> None:
  """Downgrade schema."""
  op.drop_index("ix_courses_status_created_at", table_name="courses")
  op.drop_index(op.f("ix_courses_user_id"), table_name="courses")
  op.drop_table("courses")
  op.drop_index(op.f("ix_users_email"), table_name="users")
  op.drop_table("users")
  course_status.drop(op.get_bind(), checkfirst=True)
