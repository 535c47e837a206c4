"""
creatives/query.py — 목록 조회 쿼리 빌더 (QueryBuilder)

    필터 없음 → videos LEFT OUTER JOIN video_structure_core
                 (패싯 행이 없는 영상도 목록에 나오고, 패싯 값은 None)
    필터 1개 이상 → videos INNER JOIN video_structure_core
                 (패싯 행이 없는 영상은 제외 — 외부 조인이 필터를 무시하지 않도록)

    선택값 == NULL 센티널 → 컬럼 IS NULL
    그 외 선택값          → 컬럼 = 값 (대소문자 구분, 완전 일치)
    조건은 모두 AND 로 결합합니다.

정렬: videos.created_at DESC (동률은 id DESC), 최대 LISTING_LIMIT 행.
클라이언트 쪽 보정 필터링은 하지 않습니다.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Select, select
from sqlalchemy.orm import contains_eager, selectinload

from creatives.schemas import FacetSelection
from database.models import StructureCore, Video

DEFAULT_LISTING_LIMIT = 50
DEFAULT_NULL_SENTINEL = "__NULL__"


def build_listing_query(
    selection:     FacetSelection,
    limit:         int = DEFAULT_LISTING_LIMIT,
    null_sentinel: str = DEFAULT_NULL_SENTINEL,
) -> Select:
    """필터 선택값으로 목록 SELECT 를 만듭니다."""
    stmt = select(Video)

    if selection.is_active:
        stmt = stmt.join(Video.structure_core)
    else:
        stmt = stmt.outerjoin(Video.structure_core)

    stmt = stmt.options(
        contains_eager(Video.structure_core),
        selectinload(Video.core_summary),
    )

    for column_name, value in selection.active_items():
        stmt = stmt.where(facet_predicate(column_name, value, null_sentinel))

    return (
        stmt
        .order_by(Video.created_at.desc(), Video.id.desc())
        .limit(limit)
    )


def facet_predicate(column_name: str, value: str, null_sentinel: str = DEFAULT_NULL_SENTINEL):
    column = getattr(StructureCore, column_name)
    if value == null_sentinel:
        return column.is_(None)
    return column == value


def build_recent_query(limit: int) -> Select:
    """관리 화면 최근 등록 목록."""
    return (
        select(Video)
        .order_by(Video.created_at.desc(), Video.id.desc())
        .limit(limit)
    )


def build_detail_query(video_id: int) -> Select:
    """상세 화면: 영상 1건 + 종속 4테이블."""
    return (
        select(Video)
        .where(Video.id == video_id)
        .options(
            selectinload(Video.core_summary),
            selectinload(Video.structure_core),
            selectinload(Video.structure_detail),
            selectinload(Video.observation_notes),
        )
    )


def join_mode(selection: Optional[FacetSelection]) -> str:
    """로그용: 'inner' / 'outer'"""
    return "inner" if selection is not None and selection.is_active else "outer"
