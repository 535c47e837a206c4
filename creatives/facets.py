"""
creatives/facets.py — 필터 후보 집계 (FilterOptionCatalog)

video_structure_core 샘플 행에서 패싯별로:
  - values   : 공백 제거 후 비어 있지 않은 고유값 (정렬)
  - has_null : 실제 NULL 이 1건 이상 있는지

빈 문자열·공백 문자열은 후보에서 제외하고 has_null 에도 반영하지 않습니다.
샘플 크기는 호출하는 쪽 설정값입니다 (공개 목록 500 / 관리 화면 2000).
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from creatives.schemas import FACET_COLUMNS, FacetCatalog, FacetOptions
from database.models import StructureCore, StructureDetail


def unique_non_empty(values: Iterable[Optional[str]]) -> list[str]:
    """공백 제거 후 비어 있지 않은 고유값을 정렬해 반환합니다."""
    seen: set[str] = set()
    for v in values:
        if v is None:
            continue
        s = str(v).strip()
        if s:
            seen.add(s)
    return sorted(seen)


def has_null(values: Iterable[Optional[str]]) -> bool:
    return any(v is None for v in values)


def build_facet_catalog(rows: Iterable[Mapping[str, Any]]) -> FacetCatalog:
    """
    샘플 행 목록에서 패싯 3종의 후보를 계산합니다. 부수 효과 없음.

    Example:
        rows = [{"product_value_focus": "A"}, {"product_value_focus": None},
                {"product_value_focus": "A"}, {"product_value_focus": ""}]
        build_facet_catalog(rows).pvf
        # → FacetOptions(values=["A"], has_null=True)

    행에 컬럼 키 자체가 없으면 NULL 로 보지 않습니다.
    """
    rows = list(rows)
    options: dict[str, FacetOptions] = {}
    for key, column in FACET_COLUMNS.items():
        column_values = [row[column] for row in rows if column in row]
        options[key] = FacetOptions(
            values   = unique_non_empty(column_values),
            has_null = has_null(column_values),
        )
    return FacetCatalog(**options)


def merge_options(base: Sequence[str], observed: Iterable[str]) -> list[str]:
    """
    기본 어휘(base) 순서를 유지하고, DB 에서만 관측된 값을 정렬해 뒤에 붙입니다.
    """
    base_set = set(base)
    extras = sorted({v for v in observed if v not in base_set})
    return [*base, *extras]


# ─────────────────────────────────────────────────────────────
# DB 샘플 조회
# ─────────────────────────────────────────────────────────────

def sample_structure_core(session: Session, limit: int) -> list[Mapping[str, Any]]:
    stmt = (
        select(
            StructureCore.product_value_focus,
            StructureCore.visual_main_character,
            StructureCore.emotional_tone,
        )
        .limit(limit)
    )
    return list(session.execute(stmt).mappings().all())


def sample_appeal_methods(session: Session, limit: int) -> list[Optional[str]]:
    stmt = select(StructureDetail.appeal_method).limit(limit)
    return list(session.execute(stmt).scalars().all())
