"""
뷰 레코드 조립 테스트

저장소마다 다른 관계 모양(단일 객체 / 리스트 / 빈 리스트 / None)과
과거 필드명이 섞여 있어도 같은 뷰 레코드가 나와야 합니다.
"""

from datetime import datetime, timezone

import pytest

from creatives.assembler import (
    CORE_KEY,
    DETAIL_KEY,
    NOTES_KEY,
    SUMMARY_KEY,
    assemble_card,
    assemble_detail,
    assemble_notes,
    normalize_bullets,
    pick_first,
)


class TestNormalizeBullets:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (["a", " b ", ""], ["a", "b"]),
            (["a", 3, None, {"x": 1}, "b"], ["a", "b"]),
            ('["a", " b ", ""]', ["a", "b"]),
            ("plain text", ["plain text"]),
            ('{"a": 1}', ['{"a": 1}']),
            ("[broken", ["[broken"]),
            ("", []),
            ("   ", []),
            (None, []),
            (42, []),
        ],
    )
    def test_cases(self, value, expected):
        assert normalize_bullets(value) == expected


class TestPickFirst:
    def test_first_non_empty_in_order(self):
        record = {"pvf": "", "productValueFocus": "late", "product_value_focus": None}
        assert pick_first(record, ["product_value_focus", "pvf", "productValueFocus"]) == "late"

    def test_all_missing(self):
        assert pick_first({"x": 1}, ["a", "b"]) is None
        assert pick_first(None, ["a"]) is None


class TestAssembleCard:
    BASE = {"id": 7, "title": " 영상 ", "created_at": "2025-01-01T00:00:00Z"}

    def test_single_object_relations(self):
        row = {
            **self.BASE,
            SUMMARY_KEY: {"hitokoto_summary": "요약"},
            CORE_KEY: {"product_value_focus": "A", "visual_main_character": None, "emotional_tone": "t"},
        }
        card = assemble_card(row)

        assert card.id == 7
        assert card.title == "영상"
        assert card.hitokoto_summary == "요약"
        assert card.product_value_focus == "A"
        assert card.visual_main_character is None
        assert card.emotional_tone == "t"

    def test_list_relations_use_first_element(self):
        row = {
            **self.BASE,
            SUMMARY_KEY: [{"hitokoto_summary": "첫째"}, {"hitokoto_summary": "둘째"}],
            CORE_KEY: [{"pvf": "legacy"}],
        }
        card = assemble_card(row)

        assert card.hitokoto_summary == "첫째"
        assert card.product_value_focus == "legacy"

    @pytest.mark.parametrize("missing", [None, []])
    def test_missing_relations_give_none(self, missing):
        card = assemble_card({**self.BASE, SUMMARY_KEY: missing, CORE_KEY: missing})

        assert card.hitokoto_summary is None
        assert card.product_value_focus is None
        assert card.emotional_tone is None


class TestAssembleNotes:
    def test_sorted_ascending_and_empty_dropped(self):
        notes = assemble_notes([
            {"created_at": "2025-01-03T00:00:00Z", "observation_text": "셋째"},
            {"created_at": "2025-01-01T00:00:00Z", "observation_text": "첫째", "observation_points": '["p1"]'},
            {"created_at": "2025-01-02T00:00:00Z", "observation_text": " ", "observation_points": []},
            None,
        ])

        assert [n.text for n in notes] == ["첫째", "셋째"]
        assert notes[0].bullets == ["p1"]
        assert notes[0].created_at == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_legacy_keys(self):
        notes = assemble_notes({"memo": "메모", "bullets": ["a", "b"]})

        assert len(notes) == 1
        assert notes[0].text == "메모"
        assert notes[0].bullets == ["a", "b"]

    def test_bullets_only_note_kept(self):
        notes = assemble_notes([{"observation_points": ["only"]}])
        assert notes[0].text is None
        assert notes[0].bullets == ["only"]


class TestAssembleDetail:
    def test_full_detail(self):
        row = {
            "id": 1,
            "youtube_id": "dQw4w9WgXcQ",
            "title": "t",
            "channel_name": "",
            "published_year": 2009,
            "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc),
            SUMMARY_KEY: {"hitokoto_summary": "s"},
            CORE_KEY: None,
            DETAIL_KEY: [{"pvf_note": "해설", "appealMethod": "反復"}],
            NOTES_KEY: [],
        }
        detail = assemble_detail(row)

        assert detail.youtube_id == "dQw4w9WgXcQ"
        assert detail.channel_name is None
        assert detail.published_year == 2009
        assert detail.product_value_focus_detail == "해설"
        assert detail.appeal_method == "反復"
        assert detail.appeal_method_detail is None
        assert detail.product_value_focus is None
        assert detail.notes == []
