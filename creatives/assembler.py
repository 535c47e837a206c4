"""
creatives/assembler.py — 뷰 레코드 조립 (RecordAssembler)

입력: videos 행 1건 + 종속 관계. 각 관계는 저장소에 따라
      단일 객체 / 1원소 리스트 / 빈 리스트 / None 으로 올 수 있습니다.

정규화:
  - 관계는 항상 리스트로 맞춘 뒤,
    1:1 관계(요약·패싯·해설)는 첫 원소를 사용, 없으면 전 필드 None
  - 관찰 메모는 created_at 오름차순, 본문·항목이 모두 빈 메모는 제외
  - 항목(observation_points)은 normalize_bullets 로 문자열 리스트화
  - 과거에 쓰던 필드명은 후보 목록을 정해진 순서로 시도 (pick_first)

출력은 None 을 그대로 유지합니다. "(미입력)" 같은 표시 문구는 화면 쪽 책임입니다.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from creatives.schemas import NoteView, VideoCard, VideoDetail

# 관계 키 (저장소 응답의 중첩 키 = 테이블명)
SUMMARY_KEY = "video_core_summary"
CORE_KEY    = "video_structure_core"
DETAIL_KEY  = "video_structure_detail"
NOTES_KEY   = "video_observation_notes"

# ─────────────────────────────────────────────────────────────
# 필드 별칭 (앞에서부터 시도)
# ─────────────────────────────────────────────────────────────

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "product_value_focus":   ("product_value_focus", "pvf", "productValueFocus"),
    "visual_main_character": ("visual_main_character", "vmc", "visualMainCharacter"),
    "emotional_tone":        ("emotional_tone", "tone", "emotionalTone"),

    "product_value_focus_detail": (
        "product_value_focus_detail", "product_value_focus_note", "pvf_note", "pvfNote",
    ),
    "visual_main_character_detail": (
        "visual_main_character_detail", "visual_main_character_note", "vmc_note", "vmcNote",
    ),
    "emotional_tone_detail": (
        "emotional_tone_detail", "emotional_tone_note", "tone_note", "toneNote",
    ),
    "appeal_method":        ("appeal_method", "appealMethod", "main_appeal_method"),
    "appeal_method_detail": ("appeal_method_detail", "appeal_method_note", "appealMethodNote"),

    "observation_text": (
        "observation_text", "observationText", "note", "memo", "body", "text", "content",
    ),
    "observation_points": (
        "observation_points", "observationPoints", "points", "bullets", "items", "list",
    ),
}


def as_list(value: Any) -> list:
    """단일 객체 / 리스트 / None 을 리스트로 맞춥니다."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def first_or_none(value: Any) -> Optional[Mapping[str, Any]]:
    items = as_list(value)
    return items[0] if items else None


def normalize_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def pick_first(record: Optional[Mapping[str, Any]], keys: Sequence[str]) -> Any:
    """
    keys 순서대로 record 에서 값을 찾아, 처음으로 존재하고 비어 있지 않은 값을 반환합니다.
    None 과 공백 문자열은 건너뜁니다. 모두 없으면 None.
    """
    if not record:
        return None
    for key in keys:
        v = record.get(key)
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return v
    return None


def pick_field(record: Optional[Mapping[str, Any]], field: str) -> Optional[str]:
    return normalize_text(pick_first(record, FIELD_ALIASES[field]))


def normalize_bullets(value: Any) -> list[str]:
    """
    항목 값을 문자열 리스트로 정규화합니다.

        ["a", " b ", ""]   → ["a", "b"]
        '["a","b"]'        → ["a", "b"]
        "plain text"       → ["plain text"]
        '{"a": 1}'         → ['{"a": 1}']   (배열이 아닌 JSON 은 원문 1개)
        None / "" / "  "   → []

    리스트 원소 중 문자열이 아닌 값은 버립니다.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return _clean_strings(value)
    if not isinstance(value, str):
        return []

    trimmed = value.strip()
    if not trimmed:
        return []
    try:
        parsed = json.loads(trimmed)
    except ValueError:
        return [trimmed]
    if isinstance(parsed, list):
        return _clean_strings(parsed)
    return [trimmed]


def _clean_strings(items: Sequence[Any]) -> list[str]:
    return [s.strip() for s in items if isinstance(s, str) and s.strip()]


def _created_key(value: Any) -> datetime:
    """created_at 정렬 키. 문자열은 ISO 로 파싱, naive 는 UTC 로 간주, 없으면 최소값."""
    dt: Optional[datetime] = None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            dt = None
    if dt is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


# ─────────────────────────────────────────────────────────────
# 조립
# ─────────────────────────────────────────────────────────────

def assemble_notes(value: Any) -> list[NoteView]:
    notes: list[NoteView] = []
    raw_notes = sorted(
        (n for n in as_list(value) if n),
        key=lambda n: _created_key(n.get("created_at")),
    )
    for n in raw_notes:
        text = pick_field(n, "observation_text")
        bullets = normalize_bullets(_pick_points(n))
        if not text and not bullets:
            continue
        notes.append(NoteView(created_at=_created_or_none(n.get("created_at")), text=text, bullets=bullets))
    return notes


def _pick_points(note: Mapping[str, Any]) -> Any:
    """항목 후보 키 중 처음으로 리스트이거나 비어 있지 않은 문자열인 값."""
    for key in FIELD_ALIASES["observation_points"]:
        v = note.get(key)
        if v is None:
            continue
        if isinstance(v, (list, tuple)):
            return v
        if isinstance(v, str) and v.strip():
            return v
    return []


def _created_or_none(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        return _created_key(value)
    return None


def assemble_card(row: Mapping[str, Any]) -> VideoCard:
    """목록 카드 1건."""
    summary = first_or_none(row.get(SUMMARY_KEY))
    core = first_or_none(row.get(CORE_KEY))
    return VideoCard(
        id                    = row["id"],
        title                 = normalize_text(row.get("title")),
        hitokoto_summary      = normalize_text((summary or {}).get("hitokoto_summary")),
        product_value_focus   = pick_field(core, "product_value_focus"),
        visual_main_character = pick_field(core, "visual_main_character"),
        emotional_tone        = pick_field(core, "emotional_tone"),
    )


def assemble_detail(row: Mapping[str, Any]) -> VideoDetail:
    """상세 화면 1건 (카드 필드 + 메타 + 해설 + 관찰 메모)."""
    card = assemble_card(row)
    detail = first_or_none(row.get(DETAIL_KEY))
    year = row.get("published_year")
    return VideoDetail(
        **card.model_dump(),
        youtube_id     = normalize_text(row.get("youtube_id")),
        channel_name   = normalize_text(row.get("channel_name")),
        published_year = int(year) if year else None,
        created_at     = _created_or_none(row.get("created_at")),
        product_value_focus_detail   = pick_field(detail, "product_value_focus_detail"),
        visual_main_character_detail = pick_field(detail, "visual_main_character_detail"),
        emotional_tone_detail        = pick_field(detail, "emotional_tone_detail"),
        appeal_method                = pick_field(detail, "appeal_method"),
        appeal_method_detail         = pick_field(detail, "appeal_method_detail"),
        notes = assemble_notes(row.get(NOTES_KEY)),
    )
