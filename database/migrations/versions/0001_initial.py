"""초기 스키마 — videos + 종속 4테이블

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
    ]


def _video_fk() -> sa.Column:
    return sa.Column(
        "video_id", sa.Integer(),
        sa.ForeignKey("videos.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    # ── videos ────────────────────────────────────────────────
    op.create_table(
        "videos",
        sa.Column("id",             sa.Integer(),    primary_key=True),
        sa.Column("youtube_id",     sa.String(11),   nullable=False),
        sa.Column("title",          sa.Text(),       nullable=False),
        sa.Column("channel_name",   sa.String(200)),
        sa.Column("published_year", sa.Integer()),
        *_timestamps(),
        sa.UniqueConstraint("youtube_id", name="uq_videos_youtube_id"),
    )
    op.create_index("idx_videos_created_at", "videos", ["created_at"])

    # ── 1:1 종속 테이블 (video_id UNIQUE = ON CONFLICT 대상) ──
    op.create_table(
        "video_core_summary",
        sa.Column("id",               sa.Integer(), primary_key=True),
        _video_fk(),
        sa.Column("hitokoto_summary", sa.Text(),    nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("video_id", name="uq_core_summary_video_id"),
    )

    op.create_table(
        "video_structure_core",
        sa.Column("id",                    sa.Integer(), primary_key=True),
        _video_fk(),
        sa.Column("product_value_focus",   sa.String(200)),
        sa.Column("visual_main_character", sa.String(200)),
        sa.Column("emotional_tone",        sa.String(200)),
        *_timestamps(),
        sa.UniqueConstraint("video_id", name="uq_structure_core_video_id"),
    )

    op.create_table(
        "video_structure_detail",
        sa.Column("id",                           sa.Integer(), primary_key=True),
        _video_fk(),
        sa.Column("product_value_focus_detail",   sa.Text()),
        sa.Column("visual_main_character_detail", sa.Text()),
        sa.Column("emotional_tone_detail",        sa.Text()),
        sa.Column("appeal_method",                sa.String(200)),
        sa.Column("appeal_method_detail",         sa.Text()),
        *_timestamps(),
        sa.UniqueConstraint("video_id", name="uq_structure_detail_video_id"),
    )

    # ── 1:N (append-only, UNIQUE 없음) ────────────────────────
    op.create_table(
        "video_observation_notes",
        sa.Column("id",                 sa.Integer(), primary_key=True),
        _video_fk(),
        sa.Column("observation_text",   sa.Text(),    nullable=False),
        sa.Column("observation_points", postgresql.JSONB),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text("NOW()")),
    )
    op.create_index(
        "idx_observation_notes_video_created",
        "video_observation_notes",
        ["video_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_observation_notes_video_created", table_name="video_observation_notes")
    op.drop_table("video_observation_notes")
    op.drop_table("video_structure_detail")
    op.drop_table("video_structure_core")
    op.drop_table("video_core_summary")
    op.drop_index("idx_videos_created_at", table_name="videos")
    op.drop_table("videos")
