"""Initial schema: users, topics, questions, library, groups, activities, submissions.

Revision ID: 001
Revises:
Create Date: Initial

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE = sa.text("lifecycle = 'active'")


def _identity():
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("public_id", sa.String(36), nullable=False),
    ]


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    ]


def _lifecycle():
    return sa.Column("lifecycle", sa.String(20), nullable=False, server_default="active")


def _public_id_index(table: str) -> None:
    op.create_index(f"ix_{table}_public_id", table, ["public_id"], unique=True)


def _lifecycle_index(table: str) -> None:
    op.create_index(f"ix_{table}_lifecycle", table, ["lifecycle"], unique=False)


def _topic_link(name: str, owner_table: str, owner_column: str) -> None:
    op.create_table(
        name,
        sa.Column(owner_column, sa.Integer(), nullable=False),
        sa.Column("topic_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint([owner_column], [f"{owner_table}.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["topic_id"], ["topics.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint(owner_column, "topic_id"),
    )


def _library_table(name: str, *extra) -> None:
    op.create_table(
        name,
        *_identity(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by_id", sa.Integer(), nullable=False),
        *extra,
        _lifecycle(),
        *_timestamps(),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    _public_id_index(name)
    _lifecycle_index(name)
    op.create_index(f"uq_{name}_title_active", name, ["title"], unique=True, postgresql_where=ACTIVE, sqlite_where=ACTIVE)


def upgrade() -> None:
    op.create_table(
        "users",
        *_identity(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="regular"),
        *_timestamps(),
        sa.CheckConstraint("role IN ('admin', 'regular')", name="users_role_check"),
        sa.PrimaryKeyConstraint("id"),
    )
    _public_id_index("users")
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "topics",
        *_identity(),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(512), nullable=True),
        sa.Column("created_by_id", sa.Integer(), nullable=False),
        _lifecycle(),
        *_timestamps(),
        sa.CheckConstraint("length(name) > 0 AND length(name) <= 255", name="topics_name_check"),
        sa.CheckConstraint(
            "description IS NULL OR (length(description) > 0 AND length(description) <= 512)",
            name="topics_description_check",
        ),
        sa.ForeignKeyConstraint(["parent_id"], ["topics.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    _public_id_index("topics")
    _lifecycle_index("topics")
    op.create_index("ix_topics_parent_id", "topics", ["parent_id"], unique=False)
    op.create_index(
        "uq_topics_parent_name_active",
        "topics",
        [sa.text("coalesce(parent_id, 0)"), "name"],
        unique=True,
        postgresql_where=ACTIVE,
        sqlite_where=ACTIVE,
    )

    op.create_table(
        "questions",
        *_identity(),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("statement", sa.Text(), nullable=False),
        sa.Column("expected_answer_text", sa.Text(), nullable=True),
        sa.Column("passing_score", sa.Integer(), nullable=True),
        sa.Column("created_by_id", sa.Integer(), nullable=False),
        _lifecycle(),
        *_timestamps(),
        sa.CheckConstraint("type IN ('open_ended', 'closed_ended')", name="questions_type_check"),
        sa.CheckConstraint(
            "passing_score IS NULL OR (passing_score BETWEEN 0 AND 100)", name="questions_passing_score_check"
        ),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    _public_id_index("questions")
    _lifecycle_index("questions")

    op.create_table(
        "question_options",
        *_identity(),
        sa.Column("question_id", sa.Integer(), nullable=False),
        sa.Column("original_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("question_id", "original_order", name="uq_question_options_order"),
    )
    _public_id_index("question_options")
    op.create_index("ix_question_options_question_id", "question_options", ["question_id"], unique=False)

    op.create_table(
        "question_feedbacks",
        *_identity(),
        sa.Column("question_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("difficulty_logic", sa.Integer(), nullable=False),
        sa.Column("difficulty_labor", sa.Integer(), nullable=False),
        sa.Column("difficulty_theory", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("difficulty_logic BETWEEN 1 AND 3", name="question_feedbacks_logic_check"),
        sa.CheckConstraint("difficulty_labor BETWEEN 1 AND 3", name="question_feedbacks_labor_check"),
        sa.CheckConstraint("difficulty_theory BETWEEN 1 AND 3", name="question_feedbacks_theory_check"),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("question_id", "user_id", name="uq_question_feedbacks_user"),
    )
    _public_id_index("question_feedbacks")
    op.create_index("ix_question_feedbacks_question_id", "question_feedbacks", ["question_id"], unique=False)

    _topic_link("question_topics", "questions", "question_id")

    _library_table(
        "video_lessons",
        sa.Column("video_url", sa.String(1024), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.CheckConstraint("duration_minutes > 0", name="video_lessons_duration_check"),
    )
    _library_table("handouts", sa.Column("file_url", sa.String(1024), nullable=False))
    _library_table("exercise_lists", sa.Column("file_url", sa.String(1024), nullable=False))
    _library_table("simulated_exams")
    _topic_link("video_lesson_topics", "video_lessons", "video_lesson_id")
    _topic_link("handout_topics", "handouts", "handout_id")
    _topic_link("exercise_list_topics", "exercise_lists", "exercise_list_id")
    op.create_table(
        "simulated_exam_questions",
        sa.Column("simulated_exam_id", sa.Integer(), nullable=False),
        sa.Column("question_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["simulated_exam_id"], ["simulated_exams.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("simulated_exam_id", "question_id"),
    )

    op.create_table(
        "groups",
        *_identity(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("access_type", sa.String(20), nullable=False, server_default="closed"),
        sa.Column("visibility_type", sa.String(20), nullable=False, server_default="private"),
        sa.Column("created_by_id", sa.Integer(), nullable=False),
        _lifecycle(),
        *_timestamps(),
        sa.CheckConstraint("access_type IN ('open', 'closed')", name="groups_access_type_check"),
        sa.CheckConstraint("visibility_type IN ('public', 'private')", name="groups_visibility_type_check"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    _public_id_index("groups")
    _lifecycle_index("groups")

    op.create_table(
        "group_members",
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        sa.Column("accepted_by_id", sa.Integer(), nullable=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.CheckConstraint("role IN ('admin', 'member')", name="group_members_role_check"),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["accepted_by_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("group_id", "user_id"),
    )

    op.create_table(
        "activities",
        *_identity(),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by_id", sa.Integer(), nullable=False),
        _lifecycle(),
        *_timestamps(),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    _public_id_index("activities")
    _lifecycle_index("activities")
    op.create_index("ix_activities_group_id", "activities", ["group_id"], unique=False)
    op.create_index(
        "uq_activities_group_title_active", "activities", ["group_id", "title"], unique=True,
        postgresql_where=ACTIVE, sqlite_where=ACTIVE,
    )

    op.create_table(
        "activity_items",
        *_identity(),
        sa.Column("activity_id", sa.Integer(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("question_id", sa.Integer(), nullable=True),
        sa.Column("video_lesson_id", sa.Integer(), nullable=True),
        sa.Column("handout_id", sa.Integer(), nullable=True),
        sa.Column("exercise_list_id", sa.Integer(), nullable=True),
        sa.Column("simulated_exam_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "(CASE WHEN question_id IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN video_lesson_id IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN handout_id IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN exercise_list_id IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN simulated_exam_id IS NOT NULL THEN 1 ELSE 0 END) = 1",
            name="activity_item_content_exclusive_check",
        ),
        sa.CheckConstraint(
            "type IN ('question', 'video_lesson', 'handout', 'open_exercise_list', 'simulated_exam')",
            name="activity_items_type_check",
        ),
        sa.ForeignKeyConstraint(["activity_id"], ["activities.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["video_lesson_id"], ["video_lessons.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["handout_id"], ["handouts.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["exercise_list_id"], ["exercise_lists.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["simulated_exam_id"], ["simulated_exams.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("activity_id", "order_index", name="uq_activity_items_order"),
    )
    _public_id_index("activity_items")
    op.create_index("ix_activity_items_activity_id", "activity_items", ["activity_id"], unique=False)

    op.create_table(
        "question_submissions",
        *_identity(),
        sa.Column("question_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("question_option_id", sa.Integer(), nullable=True),
        sa.Column("answer_text", sa.Text(), nullable=True),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column("answer_feedback", sa.Text(), nullable=True),
        sa.Column("passed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.CheckConstraint("score IS NULL OR (score BETWEEN 0 AND 100)", name="question_submissions_score_check"),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["question_option_id"], ["question_options.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    _public_id_index("question_submissions")
    op.create_index("ix_question_submissions_question_id", "question_submissions", ["question_id"], unique=False)
    op.create_index("ix_question_submissions_user_id", "question_submissions", ["user_id"], unique=False)


def downgrade() -> None:
    for table in (
        "question_submissions",
        "activity_items",
        "activities",
        "group_members",
        "groups",
        "simulated_exam_questions",
        "exercise_list_topics",
        "handout_topics",
        "video_lesson_topics",
        "simulated_exams",
        "exercise_lists",
        "handouts",
        "video_lessons",
        "question_topics",
        "question_feedbacks",
        "question_options",
        "questions",
        "topics",
        "users",
    ):
        op.drop_table(table)
