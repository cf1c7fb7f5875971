"""Initial schema: users, news, research, LMS, bookmarks, onboarding, badges, analytics.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# SQLite only autoincrements INTEGER PRIMARY KEY columns
BIGINT_PK = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
JSON_DOC = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _pk() -> sa.Column:
    return sa.Column("id", BIGINT_PK, primary_key=True, autoincrement=True)


def _ts(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def _user_fk(name: str = "user_id", ondelete: str = "CASCADE", nullable: bool = False) -> sa.Column:
    return sa.Column(
        name, sa.BigInteger, sa.ForeignKey("users.id", ondelete=ondelete), nullable=nullable
    )


def upgrade() -> None:
    # --- Users ---
    op.create_table(
        "users",
        _pk(),
        sa.Column("clerk_user_id", sa.String(128), nullable=False, unique=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("first_name", sa.String(128), nullable=True),
        sa.Column("last_name", sa.String(128), nullable=True),
        sa.Column("role", sa.String(16), nullable=False, server_default="free"),
        _ts("created_at"),
        _ts("updated_at"),
        _ts("deleted_at", nullable=True),
    )
    op.create_index("idx_users_role", "users", ["role"])

    # --- News ---
    op.create_table(
        "news",
        _pk(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("slug", sa.String(320), nullable=False, unique=True),
        sa.Column("summary", sa.Text, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("tags", JSON_DOC, nullable=False),
        sa.Column("source_url", sa.Text, nullable=True),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column("is_premium", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.false()),
        _ts("published_at", nullable=True),
        sa.Column("created_by", sa.BigInteger, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("view_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("like_count", sa.Integer, nullable=False, server_default="0"),
        _ts("created_at"),
        _ts("updated_at"),
        _ts("deleted_at", nullable=True),
    )
    op.create_index("idx_news_published", "news", ["is_published", "published_at"])
    op.create_index("idx_news_created_by", "news", ["created_by"])

    # --- Research ---
    op.create_table(
        "research",
        _pk(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("slug", sa.String(320), nullable=False, unique=True),
        sa.Column("summary", sa.Text, nullable=False),
        sa.Column("implication", sa.Text, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("tags", JSON_DOC, nullable=False),
        sa.Column("paper_url", sa.Text, nullable=True),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column("is_premium", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.false()),
        _ts("published_at", nullable=True),
        sa.Column("created_by", sa.BigInteger, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("view_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("citation_count", sa.Integer, nullable=False, server_default="0"),
        _ts("created_at"),
        _ts("updated_at"),
        _ts("deleted_at", nullable=True),
    )
    op.create_index("idx_research_published", "research", ["is_published", "published_at"])
    op.create_index("idx_research_created_by", "research", ["created_by"])

    # --- Courses -> Modules -> Lessons ---
    op.create_table(
        "courses",
        _pk(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("slug", sa.String(320), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column("tags", JSON_DOC, nullable=False),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.false()),
        _ts("published_at", nullable=True),
        sa.Column("created_by", sa.BigInteger, sa.ForeignKey("users.id"), nullable=False),
        _ts("created_at"),
        _ts("updated_at"),
        _ts("deleted_at", nullable=True),
    )

    op.create_table(
        "modules",
        _pk(),
        sa.Column(
            "course_id", sa.BigInteger, sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("order", sa.Integer, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        _ts("deleted_at", nullable=True),
    )
    op.create_index("idx_module_course_order", "modules", ["course_id", "order"])

    op.create_table(
        "lessons",
        _pk(),
        sa.Column(
            "module_id", sa.BigInteger, sa.ForeignKey("modules.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("order", sa.Integer, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("video_url", sa.Text, nullable=True),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.false()),
        _ts("published_at", nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        _ts("deleted_at", nullable=True),
    )
    op.create_index("idx_lesson_module_order", "lessons", ["module_id", "order"])

    # --- Progress & quizzes ---
    op.create_table(
        "progress",
        _pk(),
        _user_fk(),
        sa.Column(
            "course_id", sa.BigInteger, sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "lesson_id", sa.BigInteger, sa.ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False
        ),
        _ts("completed_at"),
        sa.UniqueConstraint("user_id", "lesson_id", name="uq_progress_user_lesson"),
    )
    op.create_index("idx_progress_user_course", "progress", ["user_id", "course_id"])

    op.create_table(
        "quizzes",
        _pk(),
        sa.Column(
            "lesson_id", sa.BigInteger, sa.ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("question", sa.Text, nullable=False),
        sa.Column("options", JSON_DOC, nullable=False),
        sa.Column("correct_index", sa.Integer, nullable=False),
        sa.Column("explanation", sa.Text, nullable=True),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.false()),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("idx_quiz_lesson", "quizzes", ["lesson_id"])

    # --- Bookmarks & onboarding ---
    op.create_table(
        "bookmarks",
        _pk(),
        _user_fk(),
        sa.Column("kind", sa.String(16), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=False),
        _ts("created_at"),
        sa.UniqueConstraint("user_id", "kind", "entity_id", name="uq_bookmark_user_entity"),
    )
    op.create_index("idx_bookmark_entity", "bookmarks", ["entity_id"])

    op.create_table(
        "onboarding",
        _pk(),
        sa.Column(
            "user_id",
            sa.BigInteger,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("steps", JSON_DOC, nullable=False),
        _ts("updated_at"),
    )

    # --- Badges ---
    op.create_table(
        "badges",
        _pk(),
        sa.Column("key", sa.String(64), nullable=False, unique=True),
        sa.Column("title", sa.String(128), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        _ts("created_at"),
    )

    op.create_table(
        "user_badges",
        _pk(),
        _user_fk(),
        sa.Column(
            "badge_id", sa.BigInteger, sa.ForeignKey("badges.id", ondelete="CASCADE"), nullable=False
        ),
        _ts("created_at"),
        sa.UniqueConstraint("user_id", "badge_id", name="uq_user_badge"),
    )
    op.create_index("idx_user_badge_badge", "user_badges", ["badge_id"])

    # --- Analytics ---
    op.create_table(
        "page_views",
        _pk(),
        _user_fk(ondelete="SET NULL", nullable=True),
        sa.Column("path", sa.Text, nullable=False),
        sa.Column("referrer", sa.Text, nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("load_time", sa.Float, nullable=True),
        _ts("timestamp"),
    )
    op.create_index("idx_page_view_path", "page_views", ["path"])
    op.create_index("idx_page_view_timestamp", "page_views", ["timestamp"])

    op.create_table(
        "user_actions",
        _pk(),
        _user_fk(),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("metadata", JSON_DOC, nullable=False),
        _ts("timestamp"),
    )
    op.create_index("idx_user_action_action", "user_actions", ["action"])
    op.create_index("idx_user_action_timestamp", "user_actions", ["timestamp"])

    op.create_table(
        "conversions",
        _pk(),
        _user_fk(),
        sa.Column("conversion_type", sa.String(32), nullable=False),
        sa.Column("value", sa.Float, nullable=True),
        sa.Column("metadata", JSON_DOC, nullable=False),
        _ts("timestamp"),
    )
    op.create_index("idx_conversion_type", "conversions", ["conversion_type"])
    op.create_index("idx_conversion_timestamp", "conversions", ["timestamp"])


def downgrade() -> None:
    for table in (
        "conversions",
        "user_actions",
        "page_views",
        "user_badges",
        "badges",
        "onboarding",
        "bookmarks",
        "quizzes",
        "progress",
        "lessons",
        "modules",
        "courses",
        "research",
        "news",
        "users",
    ):
        op.drop_table(table)
