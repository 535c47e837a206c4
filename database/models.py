"""
database/models.py — SQLAlchemy ORM 모델

테이블:
    videos                   — 크리에이티브(영상) 1건 = 1행. youtube_id UNIQUE
    video_core_summary       — 한마디 요약          (video 당 최대 1행)
    video_structure_core     — 패싯 3종 (필터용)    (video 당 최대 1행)
    video_structure_detail   — 패싯 해설 + 소구 방식 (video 당 최대 1행)
    video_observation_notes  — 관찰 메모 (append-only, video 당 N행)

설계 원칙:
    - 1:1 종속 테이블은 video_id UNIQUE 제약으로 "최대 1행" 을 보장합니다.
      UpsertCoordinator 의 ON CONFLICT (video_id) 대상이기도 합니다.
    - video_observation_notes 에는 UNIQUE 제약이 없습니다. 제출마다 1행씩 쌓입니다.
    - 패싯 컬럼은 NULL 허용. 빈 문자열은 저장하지 않습니다 (NULL 로 정규화).
    - JSONB 는 PostgreSQL 전용이므로 JSON 에 variant 로 지정합니다 (테스트용 SQLite 호환).
    - 이 코어는 어떤 행도 삭제하지 않습니다.

Alembic autogenerate 기준 파일 — 여기서 모델 변경 → alembic revision --autogenerate
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    inspect,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database.base import Base

# PostgreSQL TIMESTAMP WITH TIME ZONE 편의 별칭
TIMESTAMPTZ = DateTime(timezone=True)

# PostgreSQL 에서는 JSONB, 그 외(SQLite) 에서는 JSON
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ═════════════════════════════════════════════════════════════
# Video (주 엔티티)
# ═════════════════════════════════════════════════════════════

class Video(Base):
    """
    크리에이티브 1건.

    youtube_id 가 외부 식별자이며 UPSERT 충돌 대상입니다.
    같은 youtube_id 로 재제출하면 같은 행(id)을 재사용합니다.
    """
    __tablename__ = "videos"

    id:             Mapped[int]                = mapped_column(Integer,     primary_key=True)
    youtube_id:     Mapped[str]                = mapped_column(String(11),  nullable=False, unique=True)
    title:          Mapped[str]                = mapped_column(Text,        nullable=False)
    channel_name:   Mapped[Optional[str]]      = mapped_column(String(200))
    published_year: Mapped[Optional[int]]      = mapped_column(Integer)
    created_at:     Mapped[datetime]           = mapped_column(TIMESTAMPTZ, nullable=False, server_default=func.now())
    updated_at:     Mapped[Optional[datetime]] = mapped_column(TIMESTAMPTZ, server_default=func.now())

    # ── 관계 ──────────────────────────────────────────────────
    core_summary:      Mapped[Optional["CoreSummary"]]     = relationship(back_populates="video", uselist=False)
    structure_core:    Mapped[Optional["StructureCore"]]   = relationship(back_populates="video", uselist=False)
    structure_detail:  Mapped[Optional["StructureDetail"]] = relationship(back_populates="video", uselist=False)
    observation_notes: Mapped[list["ObservationNote"]]     = relationship(
        back_populates="video",
        order_by=lambda: [ObservationNote.created_at, ObservationNote.id],
    )

    __table_args__ = (
        Index("idx_videos_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Video id={self.id} youtube_id={self.youtube_id!r}>"


# ═════════════════════════════════════════════════════════════
# 1:1 종속 테이블
# ═════════════════════════════════════════════════════════════

class CoreSummary(Base):
    """한마디 요약 — video_core_summary"""
    __tablename__ = "video_core_summary"

    id:               Mapped[int]                = mapped_column(Integer, primary_key=True)
    video_id:         Mapped[int]                = mapped_column(ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    hitokoto_summary: Mapped[str]                = mapped_column(Text,    nullable=False)
    created_at:       Mapped[datetime]           = mapped_column(TIMESTAMPTZ, nullable=False, server_default=func.now())
    updated_at:       Mapped[Optional[datetime]] = mapped_column(TIMESTAMPTZ, server_default=func.now())

    video: Mapped["Video"] = relationship(back_populates="core_summary")

    __table_args__ = (
        UniqueConstraint("video_id", name="uq_core_summary_video_id"),
    )


class StructureCore(Base):
    """
    패싯 3종 — video_structure_core

    각 컬럼은 독립적으로 NULL 허용. 목록 필터와 필터 후보 집계의 대상입니다.
    """
    __tablename__ = "video_structure_core"

    id:                    Mapped[int]                = mapped_column(Integer, primary_key=True)
    video_id:              Mapped[int]                = mapped_column(ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    product_value_focus:   Mapped[Optional[str]]      = mapped_column(String(200))
    visual_main_character: Mapped[Optional[str]]      = mapped_column(String(200))
    emotional_tone:        Mapped[Optional[str]]      = mapped_column(String(200))
    created_at:            Mapped[datetime]           = mapped_column(TIMESTAMPTZ, nullable=False, server_default=func.now())
    updated_at:            Mapped[Optional[datetime]] = mapped_column(TIMESTAMPTZ, server_default=func.now())

    video: Mapped["Video"] = relationship(back_populates="structure_core")

    __table_args__ = (
        UniqueConstraint("video_id", name="uq_structure_core_video_id"),
    )


class StructureDetail(Base):
    """패싯 해설 + 소구 방식 — video_structure_detail"""
    __tablename__ = "video_structure_detail"

    id:                           Mapped[int]                = mapped_column(Integer, primary_key=True)
    video_id:                     Mapped[int]                = mapped_column(ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    product_value_focus_detail:   Mapped[Optional[str]]      = mapped_column(Text)
    visual_main_character_detail: Mapped[Optional[str]]      = mapped_column(Text)
    emotional_tone_detail:        Mapped[Optional[str]]      = mapped_column(Text)
    appeal_method:                Mapped[Optional[str]]      = mapped_column(String(200))
    appeal_method_detail:         Mapped[Optional[str]]      = mapped_column(Text)
    created_at:                   Mapped[datetime]           = mapped_column(TIMESTAMPTZ, nullable=False, server_default=func.now())
    updated_at:                   Mapped[Optional[datetime]] = mapped_column(TIMESTAMPTZ, server_default=func.now())

    video: Mapped["Video"] = relationship(back_populates="structure_detail")

    __table_args__ = (
        UniqueConstraint("video_id", name="uq_structure_detail_video_id"),
    )


# ═════════════════════════════════════════════════════════════
# 1:N 종속 테이블
# ═════════════════════════════════════════════════════════════

class ObservationNote(Base):
    """
    관찰 메모 — video_observation_notes (append-only)

    observation_points: 문자열 리스트(JSONB). 과거 데이터에는 JSON 문자열로
    저장된 행도 있으므로 읽을 때는 assembler.normalize_bullets 를 거칩니다.
    """
    __tablename__ = "video_observation_notes"

    id:                 Mapped[int]            = mapped_column(Integer, primary_key=True)
    video_id:           Mapped[int]            = mapped_column(ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    observation_text:   Mapped[str]            = mapped_column(Text,    nullable=False)
    observation_points: Mapped[Optional[list]] = mapped_column(JSONType)
    created_at:         Mapped[datetime]       = mapped_column(TIMESTAMPTZ, nullable=False, server_default=func.now())

    video: Mapped["Video"] = relationship(back_populates="observation_notes")

    __table_args__ = (
        Index("idx_observation_notes_video_created", "video_id", "created_at"),
    )


# ─────────────────────────────────────────────────────────────
# 행 → 딕셔너리
# ─────────────────────────────────────────────────────────────

def row_to_dict(obj: Optional[Base]) -> Optional[dict]:
    """ORM 인스턴스의 컬럼 값을 {컬럼명: 값} 딕셔너리로 변환합니다. None 은 그대로."""
    if obj is None:
        return None
    mapper = inspect(obj).mapper
    return {attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs}
