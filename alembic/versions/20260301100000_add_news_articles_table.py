"""Add news_articles table for the public news feed.

Revision ID: 20260301100000
Revises: 20260301000000
Create Date: 2026-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20260301100000"
down_revision: Union[str, None] = "20260301000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "news_articles",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=False, server_default=""),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("image_url", sa.String(length=2048), nullable=False, server_default=""),
        sa.Column("external_link", sa.String(length=2048), nullable=True),
        sa.Column("published_on", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_news_articles_published_on"), "news_articles", ["published_on"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_news_articles_published_on"), table_name="news_articles")
    op.drop_table("news_articles")
