"""Initial news curation schema

Revision ID: 001
Revises:
Create Date: 2025-11-02

Creates the curated articles, feedback, preferences and sessions tables.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "curated_articles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("source_name", sa.Text(), nullable=True),
        sa.Column("published_at", sa.Integer(), nullable=True),
        sa.Column("curated_at", sa.Integer(), nullable=False),
        sa.Column("curation_reason", sa.Text(), nullable=True),
        sa.Column("relevance_score", sa.Integer(), nullable=True),
        sa.Column("category", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("url", name="uq_curated_articles_url"),
    )
    op.create_index("idx_curated_articles_curated_at", "curated_articles", ["curated_at"])
    op.create_index("idx_curated_articles_published_at", "curated_articles", ["published_at"])

    op.create_table(
        "user_feedback",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("curated_article_id", sa.Integer(), nullable=False),
        sa.Column("liked", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("feedback_at", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["curated_article_id"], ["curated_articles.id"], ondelete="CASCADE"
        ),
    )
    op.create_index("idx_user_feedback_article_id", "user_feedback", ["curated_article_id"])
    op.create_index("idx_user_feedback_liked", "user_feedback", ["liked"])

    op.create_table(
        "user_preferences",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("key", sa.Text(), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("key"),
    )

    op.create_table(
        "curation_sessions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("session_date", sa.Text(), nullable=False),
        sa.Column("run_number", sa.Integer(), nullable=False),
        sa.Column("articles_fetched", sa.Integer(), nullable=True, default=0),
        sa.Column("articles_curated", sa.Integer(), nullable=True, default=0),
        sa.Column("agent_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("session_date", "run_number", name="uq_session_date_run"),
    )


def downgrade() -> None:
    op.drop_table("curation_sessions")
    op.drop_table("user_preferences")
    op.drop_index("idx_user_feedback_liked", table_name="user_feedback")
    op.drop_index("idx_user_feedback_article_id", table_name="user_feedback")
    op.drop_table("user_feedback")
    op.drop_index("idx_curated_articles_published_at", table_name="curated_articles")
    op.drop_index("idx_curated_articles_curated_at", table_name="curated_articles")
    op.drop_table("curated_articles")
