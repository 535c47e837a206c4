"""
creatives/schemas.py — Pydantic v2 데이터 모델

입력 → 코어 → 출력 구조:

  FacetSelection     : 목록 필터 선택값 3종 (없음 / 값 / NULL 센티널)
  SubmissionPayload  : 일괄 등록 폼 입력 (videos + 종속 4테이블)

  FacetOptions       : 패싯 1개의 선택 후보 + has_null
  FacetCatalog       : 패싯 3종 후보 (공개 목록용)
  AdminTagOptions    : 패싯 3종 + appeal_method 후보 (관리 화면용)
  VideoCard          : 목록 카드 1건
  VideoDetail        : 상세 화면 1건 (관찰 메모 포함)
  RecentVideo        : 관리 화면 최근 등록 1건
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

# ─────────────────────────────────────────────────────────────
# 패싯 정의 (쿼리 키 → video_structure_core 컬럼)
# ─────────────────────────────────────────────────────────────

FACET_COLUMNS: dict[str, str] = {
    "pvf":  "product_value_focus",
    "vmc":  "visual_main_character",
    "tone": "emotional_tone",
}


def _blank_to_none(v: object) -> object:
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


# ─────────────────────────────────────────────────────────────
# 1. 필터 입력
# ─────────────────────────────────────────────────────────────

class FacetSelection(BaseModel):
    """
    목록 필터 선택값.

    각 값은 None(필터 없음), 실제 패싯 값, 또는 NULL 센티널 중 하나입니다.
    호출 간에 상태를 유지하지 않습니다.
    """

    pvf:  Optional[str] = None
    vmc:  Optional[str] = None
    tone: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("pvf", "vmc", "tone", mode="before")
    @classmethod
    def empty_to_none(cls, v: object) -> object:
        """공백만 있는 값은 '필터 없음' 으로 취급합니다."""
        return _blank_to_none(v)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "FacetSelection":
        """
        요청 파라미터 매핑에서 선택값을 만듭니다.
        값이 리스트면 첫 번째 요소만 사용합니다.
        """
        picked: dict[str, Any] = {}
        for key in FACET_COLUMNS:
            v = params.get(key)
            if isinstance(v, (list, tuple)):
                v = v[0] if v else None
            picked[key] = None if v is None else str(v)
        return cls(**picked)

    @property
    def is_active(self) -> bool:
        return any(getattr(self, key) for key in FACET_COLUMNS)

    def active_items(self) -> list[tuple[str, str]]:
        """(컬럼명, 선택값) 목록. 선택되지 않은 패싯은 제외합니다."""
        return [
            (column, getattr(self, key))
            for key, column in FACET_COLUMNS.items()
            if getattr(self, key)
        ]


# ─────────────────────────────────────────────────────────────
# 2. 일괄 등록 입력
# ─────────────────────────────────────────────────────────────

class SubmissionPayload(BaseModel):
    """
    일괄 등록 폼 1건.

    텍스트 필드는 앞뒤 공백을 제거하고, 빈 문자열은 None 으로 바꿉니다.
    필수 항목 검사는 UpsertCoordinator 가 쓰기 전에 수행합니다.
    """

    # videos
    youtube_url:    Optional[str] = Field(None, description="YouTube URL 또는 11자 ID")
    title:          Optional[str] = None
    channel_name:   Optional[str] = None
    published_year: Optional[int] = None

    # video_core_summary
    hitokoto_summary: Optional[str] = None

    # video_structure_core
    product_value_focus:   Optional[str] = None
    visual_main_character: Optional[str] = None
    emotional_tone:        Optional[str] = None

    # video_structure_detail
    product_value_focus_detail:   Optional[str] = None
    visual_main_character_detail: Optional[str] = None
    emotional_tone_detail:        Optional[str] = None
    appeal_method:                Optional[str] = None
    appeal_method_detail:         Optional[str] = None

    # video_observation_notes
    observation_text:   Optional[str] = None
    observation_points: list[str]     = Field(default_factory=list)

    model_config = {"str_strip_whitespace": True}

    @field_validator(
        "youtube_url", "title", "channel_name", "hitokoto_summary",
        "product_value_focus", "visual_main_character", "emotional_tone",
        "product_value_focus_detail", "visual_main_character_detail",
        "emotional_tone_detail", "appeal_method", "appeal_method_detail",
        "observation_text",
        mode="before",
    )
    @classmethod
    def empty_to_none(cls, v: object) -> object:
        return _blank_to_none(v)

    @field_validator("published_year", mode="before")
    @classmethod
    def blank_year(cls, v: object) -> object:
        return _blank_to_none(v)

    @field_validator("observation_points", mode="before")
    @classmethod
    def split_points(cls, v: object) -> list[str]:
        """줄바꿈 텍스트 또는 리스트 → 공백 제거 + 빈 줄 제외."""
        if v is None:
            return []
        items = v.splitlines() if isinstance(v, str) else v
        if not isinstance(items, (list, tuple)):
            return []
        return [str(s).strip() for s in items if s is not None and str(s).strip()]

    DETAIL_FIELDS: ClassVar[tuple[str, ...]] = (
        "product_value_focus_detail",
        "visual_main_character_detail",
        "emotional_tone_detail",
        "appeal_method",
        "appeal_method_detail",
    )

    def missing_required(self) -> list[str]:
        """비어 있는 필수 항목 이름 목록."""
        missing: list[str] = []
        if not self.title:
            missing.append("title")
        if not self.hitokoto_summary:
            missing.append("hitokoto_summary")
        if not any(getattr(self, f) for f in self.DETAIL_FIELDS):
            missing.append("structure_detail")
        if not self.observation_text:
            missing.append("observation_text")
        return missing


# ─────────────────────────────────────────────────────────────
# 3. 출력
# ─────────────────────────────────────────────────────────────

class FacetOptions(BaseModel):
    """패싯 1개의 선택 후보. values 는 정렬된 고유값, has_null 은 실제 NULL 존재 여부."""

    values:   list[str] = Field(default_factory=list)
    has_null: bool      = False


class FacetCatalog(BaseModel):
    pvf:  FacetOptions = Field(default_factory=FacetOptions)
    vmc:  FacetOptions = Field(default_factory=FacetOptions)
    tone: FacetOptions = Field(default_factory=FacetOptions)


class AdminTagOptions(BaseModel):
    pvf:           list[str] = Field(default_factory=list)
    vmc:           list[str] = Field(default_factory=list)
    tone:          list[str] = Field(default_factory=list)
    appeal_method: list[str] = Field(default_factory=list)


class VideoCard(BaseModel):
    """목록 카드. 값이 없으면 None 으로 남깁니다 (표시 문구 치환은 화면 쪽 책임)."""

    id:                    int
    title:                 Optional[str] = None
    hitokoto_summary:      Optional[str] = None
    product_value_focus:   Optional[str] = None
    visual_main_character: Optional[str] = None
    emotional_tone:        Optional[str] = None


class NoteView(BaseModel):
    created_at: Optional[datetime] = None
    text:       Optional[str]      = None
    bullets:    list[str]          = Field(default_factory=list)


class VideoDetail(VideoCard):
    youtube_id:     Optional[str]      = None
    channel_name:   Optional[str]      = None
    published_year: Optional[int]      = None
    created_at:     Optional[datetime] = None

    product_value_focus_detail:   Optional[str] = None
    visual_main_character_detail: Optional[str] = None
    emotional_tone_detail:        Optional[str] = None
    appeal_method:                Optional[str] = None
    appeal_method_detail:         Optional[str] = None

    notes: list[NoteView] = Field(default_factory=list)


class RecentVideo(BaseModel):
    id:             int
    youtube_id:     Optional[str]      = None
    title:          Optional[str]      = None
    channel_name:   Optional[str]      = None
    published_year: Optional[int]      = None
    created_at:     Optional[datetime] = None

    model_config = {"from_attributes": True}   # SQLAlchemy ORM → Pydantic 변환


class ListingPage(BaseModel):
    """apply_filter() 반환 타입."""

    selection: FacetSelection
    records:   list[VideoCard]
    options:   FacetCatalog


